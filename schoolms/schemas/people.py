from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Student


class StudentBase(BaseModel):
    """Schema cơ bản cho Student."""

    first_name: str
    last_name: str
    email: Optional[str] = None
    student_number: Optional[str] = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class StudentDto(StudentBase):
    id: int
    photo_url: Optional[str] = None


class StudentDetail(StudentDto):
    enrollment_count: int = 0
    class_count: int = 0


class StudentPhoto(BaseModel):
    student_id: int
    photo_url: str


class StudentDashboard(BaseModel):
    student_id: int
    enrolled_courses: int = 0
    pending_assignments: int = 0
    attendance_rate: float = 0.0
    recent_grades: List[float] = []


class StudentStats(BaseModel):
    student_id: int
    gpa: Optional[float] = None
    completed_courses: int = 0
    attendance_rate: float = 0.0


class NotificationDto(BaseModel):
    id: int
    student_id: int
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


# Teacher


class TeacherBase(BaseModel):
    """Schema cơ bản cho Teacher."""

    first_name: str
    last_name: str
    email: Optional[str] = None
    department_id: Optional[int] = None


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    department_id: Optional[int] = None


class TeacherDto(TeacherBase):
    id: int


class TeacherDetail(TeacherDto):
    course_count: int = 0
    class_count: int = 0


class TeacherStats(BaseModel):
    teacher_id: int
    course_count: int = 0
    class_count: int = 0
    student_count: int = 0


# User & role


class UserDto(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_active: bool = True
    roles: List[str] = []


class UserUpdate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None


class UserProfile(UserDto):
    full_name: Optional[str] = None
    last_login: Optional[datetime] = None


class UserRolesUpdate(BaseModel):
    roles: List[str] = Field(default_factory=list)


class RoleDto(BaseModel):
    name: str
    description: Optional[str] = None


class RoleCreate(BaseModel):
    name: str
    description: Optional[str] = None


class RoleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class UserStatistics(BaseModel):
    total_users: int = 0
    active_users: int = 0
    users_by_role: Dict[str, int] = {}
