from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# Grade


class GradeCreate(BaseModel):
    """Schema tạo mới Grade."""

    student_id: int
    course_id: int
    score: float

    @field_validator("score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("Điểm phải nằm trong khoảng 0-100")
        return v


class GradeUpdate(BaseModel):
    score: Optional[float] = None
    comment: Optional[str] = None


class GradeDto(BaseModel):
    id: int
    student_id: int
    course_id: int
    score: float
    comment: Optional[str] = None


class BulkGradeCreate(BaseModel):
    course_id: int
    grades: List[GradeCreate] = Field(default_factory=list)


class StudentCourseGrades(BaseModel):
    student_id: int
    course_id: int
    grades: List[GradeDto] = []
    average: Optional[float] = None


# Attendance


class AttendanceCreate(BaseModel):
    student_id: int
    class_id: int
    date: date
    status: str = "present"


class AttendanceUpdate(BaseModel):
    status: Optional[str] = None
    note: Optional[str] = None


class AttendanceDto(BaseModel):
    id: int
    student_id: int
    class_id: int
    date: date
    status: str = "present"
    note: Optional[str] = None


class AttendanceMark(BaseModel):
    student_id: int
    status: str = "present"


class BulkAttendanceCreate(BaseModel):
    class_id: int
    date: date
    attendances: List[AttendanceMark] = Field(default_factory=list)


class AttendanceSummary(BaseModel):
    student_id: int
    course_id: int
    present: int = 0
    absent: int = 0
    late: int = 0

    @property
    def attendance_rate(self) -> float:
        total = self.present + self.absent + self.late
        return (self.present + self.late) / total if total else 0.0


class AttendanceReport(BaseModel):
    class_id: int
    start_date: date
    end_date: date
    records: List[AttendanceDto] = []


# Assignment & submission


class AssignmentCreate(BaseModel):
    class_id: int
    teacher_id: int
    title: str
    due_date: Optional[datetime] = None


class AssignmentUpdate(BaseModel):
    title: Optional[str] = None
    due_date: Optional[datetime] = None


class AssignmentDto(AssignmentCreate):
    id: int


class AssignmentDetail(AssignmentDto):
    submission_count: int = 0


class SubmissionCreate(BaseModel):
    assignment_id: int
    student_id: int
    content: str


class SubmissionUpdate(BaseModel):
    content: Optional[str] = None


class SubmissionGrade(BaseModel):
    score: float
    feedback: Optional[str] = None


class SubmissionDto(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    content: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None


class SubmissionStats(BaseModel):
    assignment_id: int
    submitted: int = 0
    graded: int = 0
    average_score: Optional[float] = None
