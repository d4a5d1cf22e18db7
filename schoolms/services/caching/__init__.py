"""
Cache decorators cho từng domain service.

``CACHING_SERVICES`` maps the registry name of a service to its decorator;
``schoolms.container.decorate_services`` wraps inner services by that name.
"""

from schoolms.services.caching.assignment import CachingAssignmentService
from schoolms.services.caching.attendance import CachingAttendanceService
from schoolms.services.caching.course import CachingCourseService
from schoolms.services.caching.department import CachingDepartmentService
from schoolms.services.caching.enrollment import CachingEnrollmentService
from schoolms.services.caching.grade import CachingGradeService
from schoolms.services.caching.school_class import CachingClassService
from schoolms.services.caching.student import CachingStudentService
from schoolms.services.caching.submission import CachingSubmissionService
from schoolms.services.caching.teacher import CachingTeacherService
from schoolms.services.caching.user import CachingUserService

CACHING_SERVICES = {
    "student": CachingStudentService,
    "teacher": CachingTeacherService,
    "course": CachingCourseService,
    "class": CachingClassService,
    "enrollment": CachingEnrollmentService,
    "grade": CachingGradeService,
    "attendance": CachingAttendanceService,
    "assignment": CachingAssignmentService,
    "submission": CachingSubmissionService,
    "department": CachingDepartmentService,
    "user": CachingUserService,
}

__all__ = [
    "CACHING_SERVICES",
    "CachingAssignmentService",
    "CachingAttendanceService",
    "CachingClassService",
    "CachingCourseService",
    "CachingDepartmentService",
    "CachingEnrollmentService",
    "CachingGradeService",
    "CachingStudentService",
    "CachingSubmissionService",
    "CachingTeacherService",
    "CachingUserService",
]
