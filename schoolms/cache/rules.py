"""
Invalidation rules for the school domain.

Each rule receives the MutationContext of a successful write and yields the key
patterns that may now hold stale data. ``base_rule`` (own keys plus own list
pages) is registered for every write of every entity; the rules below add the
keys of related records, found through ``ctx.related``.
"""

from typing import Iterator, List

from schoolms.cache.keys import (
    entity_patterns,
    list_pattern,
    scope_pattern,
    scoped_key,
    scoped_list_pattern,
    static_key,
    tag_pattern,
    view_pattern,
)
from schoolms.cache.strategies.event_based import (
    InvalidationCoordinator,
    Mutation,
    MutationContext,
    base_rule,
)

WRITES = (Mutation.CREATED, Mutation.UPDATED, Mutation.DELETED)


def _student_views(student_id) -> List[str]:
    return [
        view_pattern("student", "dashboard", student_id),
        view_pattern("student", "stats", student_id),
    ]


def _ids(ctx: MutationContext, single: str, many: str) -> List:
    """Ids named `single` plus every element of list-valued `many` fields."""
    ids = list(ctx.related(single))
    direct = ctx.params.get(many)
    nested = [direct] if isinstance(direct, (list, tuple, set)) else []
    for group in nested + ctx.related(many):
        ids.extend(group)
    return list(dict.fromkeys(ids))


def _own_scope(ctx: MutationContext) -> Iterator[str]:
    """Everything scoped under the changed record, once it exists."""
    if ctx.entity_id is not None and ctx.mutation != Mutation.CREATED:
        yield scope_pattern(ctx.entity_type, ctx.entity_id)


# Student


def student_rule(ctx: MutationContext) -> Iterator[str]:
    if ctx.entity_id is None or ctx.mutation == Mutation.CREATED:
        return
    yield from _student_views(ctx.entity_id)
    yield scope_pattern("student", ctx.entity_id)


# Teacher


def teacher_rule(ctx: MutationContext) -> Iterator[str]:
    if ctx.entity_id is None or ctx.mutation == Mutation.CREATED:
        return
    yield view_pattern("teacher", "stats", ctx.entity_id)
    yield scope_pattern("teacher", ctx.entity_id)
    for department_id in ctx.related("department_id"):
        yield from entity_patterns("department", department_id)


# Department


def department_head_rule(ctx: MutationContext) -> Iterator[str]:
    for teacher_id in ctx.related("head_teacher_id") + ctx.related("teacher_id"):
        yield from entity_patterns("teacher", teacher_id)


# Course


def course_rule(ctx: MutationContext) -> Iterator[str]:
    yield from _own_scope(ctx)
    for teacher_id in ctx.related("teacher_id"):
        yield scoped_list_pattern("teacher", teacher_id, "course")
        yield view_pattern("teacher", "stats", teacher_id)


def course_teacher_rule(ctx: MutationContext) -> Iterator[str]:
    """Teacher assigned to or removed from a course."""
    for teacher_id in ctx.related("teacher_id"):
        yield from entity_patterns("teacher", teacher_id)
        yield scoped_list_pattern("teacher", teacher_id, "course")
        yield view_pattern("teacher", "stats", teacher_id)


# Class


def class_rule(ctx: MutationContext) -> Iterator[str]:
    yield from _own_scope(ctx)
    for teacher_id in ctx.related("teacher_id"):
        yield scoped_list_pattern("teacher", teacher_id, "class")
        yield view_pattern("teacher", "stats", teacher_id)
    for course_id in ctx.related("course_id"):
        yield from entity_patterns("course", course_id)


def class_teacher_rule(ctx: MutationContext) -> Iterator[str]:
    for teacher_id in ctx.related("teacher_id"):
        yield from entity_patterns("teacher", teacher_id)
        yield scoped_list_pattern("teacher", teacher_id, "class")
        yield view_pattern("teacher", "stats", teacher_id)


def class_membership_rule(ctx: MutationContext) -> Iterator[str]:
    """Students enrolled into or removed from a class."""
    for class_id in ctx.related("class_id") or [ctx.entity_id]:
        if class_id is None:
            continue
        yield scoped_list_pattern("class", class_id, "student")
        yield scoped_list_pattern("class", class_id, "enrollment")
    for student_id in _ids(ctx, "student_id", "student_ids"):
        yield from entity_patterns("student", student_id)
        yield scoped_list_pattern("student", student_id, "class")
        yield scoped_list_pattern("student", student_id, "enrollment")
        yield from _student_views(student_id)
    yield list_pattern("enrollment")


# Enrollment


def enrollment_rule(ctx: MutationContext) -> Iterator[str]:
    for student_id in ctx.related("student_id"):
        yield scoped_list_pattern("student", student_id, "enrollment")
        yield scoped_list_pattern("student", student_id, "class")
        yield from entity_patterns("student", student_id)
        yield from _student_views(student_id)
    for course_id in ctx.related("course_id"):
        yield scoped_list_pattern("course", course_id, "enrollment")
        yield from entity_patterns("course", course_id)
    for class_id in ctx.related("class_id"):
        yield scoped_list_pattern("class", class_id, "enrollment")
        yield scoped_list_pattern("class", class_id, "student")


# Grade


def grade_rule(ctx: MutationContext) -> Iterator[str]:
    for student_id in ctx.related("student_id"):
        yield scoped_list_pattern("student", student_id, "grade")
        yield scope_pattern("student", student_id, "course")
        yield from _student_views(student_id)
    for course_id in ctx.related("course_id"):
        yield scoped_list_pattern("course", course_id, "grade")


# Attendance


def attendance_rule(ctx: MutationContext) -> Iterator[str]:
    for student_id in ctx.related("student_id"):
        yield scoped_list_pattern("student", student_id, "attendance")
        yield scope_pattern("student", student_id, "attendance_summary")
        yield from _student_views(student_id)
    for class_id in ctx.related("class_id"):
        yield scoped_list_pattern("class", class_id, "attendance")
        yield scope_pattern("class", class_id, "attendance_report")
    for day in ctx.related("date"):
        yield scoped_list_pattern("date", day, "attendance")


# Assignment & submission


def assignment_rule(ctx: MutationContext) -> Iterator[str]:
    yield from _own_scope(ctx)
    for class_id in ctx.related("class_id"):
        yield scoped_list_pattern("class", class_id, "assignment")
    for teacher_id in ctx.related("teacher_id"):
        yield scoped_list_pattern("teacher", teacher_id, "assignment")
    # Students of the class are unknown here; drop every student's assignment pages
    yield tag_pattern("student_assignment_list")


def submission_rule(ctx: MutationContext) -> Iterator[str]:
    for assignment_id in ctx.related("assignment_id"):
        yield scoped_list_pattern("assignment", assignment_id, "submission")
        yield scoped_key("assignment", assignment_id, "submission_stats").render()
        yield from entity_patterns("assignment", assignment_id)
    for student_id in ctx.related("student_id"):
        yield scoped_list_pattern("student", student_id, "submission")
        yield from _student_views(student_id)
    yield tag_pattern("student_assignment_list")


# User & role


def user_rule(ctx: MutationContext) -> Iterator[str]:
    user_ids = [ctx.entity_id] if ctx.entity_id is not None else []
    for user_id in dict.fromkeys(user_ids + _ids(ctx, "user_id", "user_ids")):
        yield from entity_patterns("user", user_id)
        yield view_pattern("user", "profile", user_id)
    yield static_key("user", "statistics").render()
    yield tag_pattern("role_user_list")
    yield tag_pattern("role_users")


def role_rule(ctx: MutationContext) -> Iterator[str]:
    yield static_key("role", "list").render()
    for role_name in ctx.related("role_name") + ctx.related("name"):
        yield scope_pattern("role", role_name)
    yield list_pattern("user")
    yield static_key("user", "statistics").render()


def register_school_rules(coordinator: InvalidationCoordinator) -> InvalidationCoordinator:
    """
    Đăng ký toàn bộ invalidation rules của hệ thống.

    Args:
        coordinator: Coordinator to populate

    Returns:
        The same coordinator, for chaining
    """
    register = coordinator.register_rule

    student_writes = WRITES + (Mutation.PHOTO_CHANGED,)
    register("student", student_writes, base_rule)
    register("student", student_writes, student_rule)

    register("teacher", WRITES, base_rule)
    register("teacher", WRITES, teacher_rule)

    department_writes = WRITES + (Mutation.ASSIGNED,)
    register("department", department_writes, base_rule)
    register("department", (Mutation.ASSIGNED,), department_head_rule)

    register("course", WRITES, base_rule)
    register("course", WRITES, course_rule)
    register("course", (Mutation.ASSIGNED, Mutation.UNASSIGNED), base_rule)
    register("course", (Mutation.ASSIGNED, Mutation.UNASSIGNED), course_teacher_rule)

    class_writes = WRITES + (Mutation.STATUS_CHANGED,)
    register("class", class_writes, base_rule)
    register("class", class_writes, class_rule)
    register("class", (Mutation.ASSIGNED, Mutation.UNASSIGNED), base_rule)
    register("class", (Mutation.ASSIGNED, Mutation.UNASSIGNED), class_teacher_rule)
    membership = (Mutation.ENROLLED, Mutation.UNENROLLED, Mutation.BULK_ENROLLED)
    register("class", membership, base_rule)
    register("class", membership, class_membership_rule)

    enrollment_writes = WRITES + (Mutation.STATUS_CHANGED,)
    register("enrollment", enrollment_writes, base_rule)
    register("enrollment", enrollment_writes, enrollment_rule)

    grade_writes = WRITES + (Mutation.BULK_CREATED,)
    register("grade", grade_writes, base_rule)
    register("grade", grade_writes, grade_rule)

    attendance_writes = WRITES + (Mutation.BULK_CREATED,)
    register("attendance", attendance_writes, base_rule)
    register("attendance", attendance_writes, attendance_rule)

    register("assignment", WRITES, base_rule)
    register("assignment", WRITES, assignment_rule)

    submission_writes = WRITES + (Mutation.GRADED,)
    register("submission", submission_writes, base_rule)
    register("submission", submission_writes, submission_rule)

    user_writes = (
        Mutation.UPDATED,
        Mutation.DELETED,
        Mutation.STATUS_CHANGED,
        Mutation.ROLES_CHANGED,
        Mutation.BULK_DELETED,
    )
    register("user", user_writes, base_rule)
    register("user", user_writes, user_rule)

    register("role", WRITES, role_rule)

    return coordinator
