from typing import List, Optional

from pydantic import BaseModel, Field


# Department


class DepartmentDto(BaseModel):
    id: int
    name: str
    head_teacher_id: Optional[int] = None


class DepartmentCreate(BaseModel):
    name: str
    head_teacher_id: Optional[int] = None


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None


# Course


class CourseBase(BaseModel):
    """Schema cơ bản cho Course."""

    code: str
    title: str
    department_id: Optional[int] = None
    teacher_id: Optional[int] = None


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    code: Optional[str] = None
    title: Optional[str] = None
    department_id: Optional[int] = None


class CourseDto(CourseBase):
    id: int


class CourseDetail(CourseDto):
    enrollment_count: int = 0
    class_count: int = 0


# Class (a scheduled section of a course)


class ClassBase(BaseModel):
    """Schema cơ bản cho Class."""

    name: str
    course_id: int
    teacher_id: Optional[int] = None
    is_active: bool = True


class ClassCreate(ClassBase):
    pass


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    teacher_id: Optional[int] = None
    is_active: Optional[bool] = None


class ClassDto(ClassBase):
    id: int


class ClassDetail(ClassDto):
    student_count: int = 0


class ClassEnrollmentRequest(BaseModel):
    student_id: int
    class_id: int


class BulkClassEnrollmentRequest(BaseModel):
    class_id: int
    student_ids: List[int] = Field(default_factory=list)


# Enrollment


class EnrollmentBase(BaseModel):
    student_id: int
    course_id: int
    class_id: Optional[int] = None
    status: str = "active"


class EnrollmentCreate(EnrollmentBase):
    pass


class EnrollmentUpdate(BaseModel):
    class_id: Optional[int] = None
    status: Optional[str] = None


class EnrollmentDto(EnrollmentBase):
    id: int
