"""
Contracts of the domain services the cache layer wraps.

Each Protocol lists the async methods of one entity's service. The persistent
store behind them is outside this package; the decorated services in
``schoolms.services.caching`` implement the same Protocols.
"""

from datetime import date
from typing import List, Optional, Protocol, runtime_checkable

from schoolms.schemas.academics import (
    BulkClassEnrollmentRequest,
    ClassCreate,
    ClassDetail,
    ClassDto,
    ClassEnrollmentRequest,
    ClassUpdate,
    CourseCreate,
    CourseDetail,
    CourseDto,
    CourseUpdate,
    DepartmentCreate,
    DepartmentDto,
    DepartmentUpdate,
    EnrollmentCreate,
    EnrollmentDto,
    EnrollmentUpdate,
)
from schoolms.schemas.assessment import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentDto,
    AssignmentUpdate,
    AttendanceCreate,
    AttendanceDto,
    AttendanceReport,
    AttendanceSummary,
    AttendanceUpdate,
    BulkAttendanceCreate,
    BulkGradeCreate,
    GradeCreate,
    GradeDto,
    GradeUpdate,
    StudentCourseGrades,
    SubmissionCreate,
    SubmissionDto,
    SubmissionGrade,
    SubmissionStats,
    SubmissionUpdate,
)
from schoolms.schemas.common import PagedResponse, SearchRequest
from schoolms.schemas.people import (
    NotificationDto,
    RoleCreate,
    RoleDto,
    RoleUpdate,
    StudentCreate,
    StudentDashboard,
    StudentDetail,
    StudentDto,
    StudentPhoto,
    StudentStats,
    StudentUpdate,
    TeacherCreate,
    TeacherDetail,
    TeacherDto,
    TeacherStats,
    TeacherUpdate,
    UserDto,
    UserProfile,
    UserRolesUpdate,
    UserStatistics,
    UserUpdate,
)


@runtime_checkable
class StudentServiceProtocol(Protocol):
    async def get_student_by_id(self, student_id: int) -> Optional[StudentDto]: ...

    async def get_student_detail(self, student_id: int) -> Optional[StudentDetail]: ...

    async def get_student_dashboard(self, student_id: int) -> Optional[StudentDashboard]: ...

    async def get_student_stats(self, student_id: int) -> Optional[StudentStats]: ...

    async def get_paged_students(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[StudentDto]: ...

    async def get_student_enrollments(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def get_student_grades(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[GradeDto]: ...

    async def get_student_classes(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[ClassDto]: ...

    async def get_student_attendance(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_student_assignments(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AssignmentDto]: ...

    async def get_student_notifications(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[NotificationDto]: ...

    async def create_student(self, payload: StudentCreate) -> StudentDto: ...

    async def update_student(
        self, student_id: int, payload: StudentUpdate
    ) -> Optional[StudentDto]: ...

    async def delete_student(self, student_id: int) -> bool: ...

    async def upload_student_photo(self, payload: StudentPhoto) -> bool: ...


@runtime_checkable
class TeacherServiceProtocol(Protocol):
    async def get_teacher_by_id(self, teacher_id: int) -> Optional[TeacherDto]: ...

    async def get_teacher_detail(self, teacher_id: int) -> Optional[TeacherDetail]: ...

    async def get_teacher_stats(self, teacher_id: int) -> Optional[TeacherStats]: ...

    async def get_all_teachers(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[TeacherDto]: ...

    async def get_teacher_courses(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[CourseDto]: ...

    async def get_teacher_classes(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[ClassDto]: ...

    async def get_class_students(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[StudentDto]: ...

    async def get_class_attendance_history(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_class_assignments(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AssignmentDto]: ...

    async def get_class_by_id(self, class_id: int) -> Optional[ClassDto]: ...

    async def create_teacher(self, payload: TeacherCreate) -> TeacherDto: ...

    async def update_teacher(
        self, teacher_id: int, payload: TeacherUpdate
    ) -> Optional[TeacherDto]: ...

    async def delete_teacher(self, teacher_id: int) -> bool: ...

    async def create_class(self, payload: ClassCreate) -> ClassDto: ...

    async def update_class(self, class_id: int, payload: ClassUpdate) -> Optional[ClassDto]: ...

    async def deactivate_class(self, class_id: int) -> bool: ...

    async def enroll_student_in_class(self, payload: ClassEnrollmentRequest) -> bool: ...

    async def remove_student_from_class(self, class_id: int, student_id: int) -> bool: ...

    async def bulk_enroll_students(self, payload: BulkClassEnrollmentRequest) -> bool: ...


@runtime_checkable
class CourseServiceProtocol(Protocol):
    async def get_course_by_id(self, course_id: int) -> Optional[CourseDto]: ...

    async def get_course_detail(self, course_id: int) -> Optional[CourseDetail]: ...

    async def get_all_courses(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[CourseDto]: ...

    async def get_course_enrollments(
        self, course_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def create_course(self, payload: CourseCreate) -> CourseDto: ...

    async def update_course(
        self, course_id: int, payload: CourseUpdate
    ) -> Optional[CourseDto]: ...

    async def delete_course(self, course_id: int) -> bool: ...

    async def assign_teacher_to_course(self, course_id: int, teacher_id: int) -> bool: ...

    async def remove_teacher_from_course(self, course_id: int) -> bool: ...


@runtime_checkable
class ClassServiceProtocol(Protocol):
    async def get_class_by_id(self, class_id: int) -> Optional[ClassDto]: ...

    async def get_class_detail(self, class_id: int) -> Optional[ClassDetail]: ...

    async def get_all_classes(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[ClassDto]: ...

    async def get_class_enrollments(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def create_class(self, payload: ClassCreate) -> ClassDto: ...

    async def update_class(self, class_id: int, payload: ClassUpdate) -> Optional[ClassDto]: ...

    async def delete_class(self, class_id: int) -> bool: ...

    async def assign_teacher_to_class(self, class_id: int, teacher_id: int) -> bool: ...

    async def remove_teacher_from_class(self, class_id: int) -> bool: ...


@runtime_checkable
class EnrollmentServiceProtocol(Protocol):
    async def get_enrollment_by_id(self, enrollment_id: int) -> Optional[EnrollmentDto]: ...

    async def get_all_enrollments(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def get_enrollments_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def get_enrollments_by_course(
        self, course_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def get_enrollments_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[EnrollmentDto]: ...

    async def create_enrollment(self, payload: EnrollmentCreate) -> EnrollmentDto: ...

    async def update_enrollment(
        self, enrollment_id: int, payload: EnrollmentUpdate
    ) -> Optional[EnrollmentDto]: ...

    async def delete_enrollment(self, enrollment_id: int) -> bool: ...

    async def update_enrollment_status(self, enrollment_id: int, status: str) -> bool: ...


@runtime_checkable
class GradeServiceProtocol(Protocol):
    async def get_grade_by_id(self, grade_id: int) -> Optional[GradeDto]: ...

    async def get_all_grades(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[GradeDto]: ...

    async def get_grades_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[GradeDto]: ...

    async def get_grades_by_course(
        self, course_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[GradeDto]: ...

    async def get_student_course_grades(
        self, student_id: int, course_id: int
    ) -> Optional[StudentCourseGrades]: ...

    async def create_grade(self, payload: GradeCreate) -> GradeDto: ...

    async def update_grade(self, grade_id: int, payload: GradeUpdate) -> Optional[GradeDto]: ...

    async def delete_grade(self, grade_id: int) -> bool: ...

    async def bulk_create_grades(self, payload: BulkGradeCreate) -> bool: ...


@runtime_checkable
class AttendanceServiceProtocol(Protocol):
    async def get_attendance_by_id(self, attendance_id: int) -> Optional[AttendanceDto]: ...

    async def get_all_attendance(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_attendance_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_attendance_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_attendance_by_date(
        self, attendance_date: date, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AttendanceDto]: ...

    async def get_attendance_summary(
        self, student_id: int, course_id: int
    ) -> Optional[AttendanceSummary]: ...

    async def generate_attendance_report(
        self, class_id: int, start_date: date, end_date: date
    ) -> Optional[AttendanceReport]: ...

    async def create_attendance(self, payload: AttendanceCreate) -> AttendanceDto: ...

    async def update_attendance(
        self, attendance_id: int, payload: AttendanceUpdate
    ) -> Optional[AttendanceDto]: ...

    async def delete_attendance(self, attendance_id: int) -> bool: ...

    async def bulk_create_attendance(self, payload: BulkAttendanceCreate) -> bool: ...


@runtime_checkable
class AssignmentServiceProtocol(Protocol):
    async def get_assignment_by_id(self, assignment_id: int) -> Optional[AssignmentDto]: ...

    async def get_assignment_detail(
        self, assignment_id: int
    ) -> Optional[AssignmentDetail]: ...

    async def get_all_assignments(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AssignmentDto]: ...

    async def get_assignments_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AssignmentDto]: ...

    async def get_assignments_by_teacher(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[AssignmentDto]: ...

    async def create_assignment(self, payload: AssignmentCreate) -> AssignmentDto: ...

    async def update_assignment(
        self, assignment_id: int, payload: AssignmentUpdate
    ) -> Optional[AssignmentDto]: ...

    async def delete_assignment(self, assignment_id: int) -> bool: ...


@runtime_checkable
class SubmissionServiceProtocol(Protocol):
    async def get_submission_by_id(self, submission_id: int) -> Optional[SubmissionDto]: ...

    async def get_submissions_by_assignment(
        self, assignment_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[SubmissionDto]: ...

    async def get_submissions_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ) -> PagedResponse[SubmissionDto]: ...

    async def get_submission_stats(self, assignment_id: int) -> Optional[SubmissionStats]: ...

    async def submit_assignment(self, payload: SubmissionCreate) -> SubmissionDto: ...

    async def update_submission(
        self, submission_id: int, payload: SubmissionUpdate
    ) -> Optional[SubmissionDto]: ...

    async def grade_submission(
        self, submission_id: int, payload: SubmissionGrade
    ) -> Optional[SubmissionDto]: ...

    async def delete_submission(self, submission_id: int) -> bool: ...


@runtime_checkable
class DepartmentServiceProtocol(Protocol):
    async def get_by_id(self, department_id: int) -> Optional[DepartmentDto]: ...

    async def get_all(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[DepartmentDto]: ...

    async def create(self, payload: DepartmentCreate) -> DepartmentDto: ...

    async def update(
        self, department_id: int, payload: DepartmentUpdate
    ) -> Optional[DepartmentDto]: ...

    async def delete(self, department_id: int) -> bool: ...

    async def assign_head_of_department(self, department_id: int, teacher_id: int) -> bool: ...


@runtime_checkable
class UserServiceProtocol(Protocol):
    async def get_user_by_id(self, user_id: int) -> Optional[UserDto]: ...

    async def get_user_profile(self, user_id: int) -> Optional[UserProfile]: ...

    async def get_all_users(
        self, request: Optional[SearchRequest] = None
    ) -> PagedResponse[UserDto]: ...

    async def get_users_by_role(
        self, role_name: str, request: Optional[SearchRequest] = None
    ) -> PagedResponse[UserDto]: ...

    async def search_users(
        self, query: str, request: Optional[SearchRequest] = None
    ) -> PagedResponse[UserDto]: ...

    async def get_all_roles(self) -> List[RoleDto]: ...

    async def get_users_in_role(self, role_name: str) -> List[UserDto]: ...

    async def get_user_statistics(self) -> UserStatistics: ...

    async def update_user(self, user_id: int, payload: UserUpdate) -> Optional[UserDto]: ...

    async def delete_user(self, user_id: int) -> bool: ...

    async def activate_user(self, user_id: int) -> bool: ...

    async def deactivate_user(self, user_id: int) -> bool: ...

    async def bulk_delete_users(self, user_ids: List[int]) -> bool: ...

    async def update_user_roles(self, user_id: int, payload: UserRolesUpdate) -> bool: ...

    async def assign_role_to_user(self, user_id: int, role_name: str) -> bool: ...

    async def remove_role_from_user(self, user_id: int, role_name: str) -> bool: ...

    async def create_role(self, payload: RoleCreate) -> RoleDto: ...

    async def update_role(self, role_name: str, payload: RoleUpdate) -> Optional[RoleDto]: ...

    async def delete_role(self, role_name: str) -> bool: ...
