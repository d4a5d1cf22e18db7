"""
Cache key builder.

Keys are rendered from a fixed sequence of segments joined by ``_``:

    student_5                                   entity_key("student", 5)
    student_detail_5                            view_key("student", "detail", 5)
    student_list_{search}_{page}_{size}_{sort}_{desc}
                                                list_key("student", request)
    class_3_student_list_{search}_...           scoped_list_key("class", 3, "student", request)
    student_4_attendance_summary_course_9       scoped_key("student", 4, "attendance_summary", "course", 9)

Free-text qualifiers are escaped so that a value containing the separator can
never shift into the next slot: ``%`` becomes ``%25`` and ``_`` becomes ``%5F``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, FrozenSet, Optional, Tuple

from schoolms.schemas.common import SearchRequest

SEPARATOR = "_"
WILDCARD = "*"


def escape_qualifier(value: Any) -> str:
    """
    Render one qualifier.

    Args:
        value: None, bool, number, date or free text

    Returns:
        Separator-free string
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, datetime):
        return value.strftime("%Y%m%d%H%M%S")
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value).replace("%", "%25").replace(SEPARATOR, "%5F")


@dataclass(frozen=True)
class CacheKey:
    """
    Structured cache key.

    Attributes:
        entity_type: Entity the key belongs to (first segment)
        operation: Read operation the key was built for
        segments: Rendered, escaped segments in order
        tags: Index tags the backend files the key under
    """

    entity_type: str
    operation: str
    segments: Tuple[str, ...]
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def render(self) -> str:
        return SEPARATOR.join(self.segments)

    def __str__(self) -> str:
        return self.render()


def _paging(request: Optional[SearchRequest]) -> Tuple[str, ...]:
    request = request or SearchRequest()
    return (
        escape_qualifier(request.search),
        str(request.page),
        str(request.page_size),
        escape_qualifier(request.sort_by),
        str(request.sort_descending),
    )


def entity_key(entity_type: str, entity_id: Any) -> CacheKey:
    """``{entity}_{id}``"""
    return CacheKey(
        entity_type, "detail", (entity_type, escape_qualifier(entity_id))
    )


def view_key(entity_type: str, view: str, entity_id: Any) -> CacheKey:
    """``{entity}_{view}_{id}``, e.g. ``student_dashboard_5``."""
    return CacheKey(entity_type, view, (entity_type, view, escape_qualifier(entity_id)))


def list_key(
    entity_type: str, request: Optional[SearchRequest] = None, *qualifiers: Any
) -> CacheKey:
    """
    ``{entity}_list_[{qualifiers}_]{search}_{page}_{pageSize}_{sortBy}_{sortDescending}``

    Args:
        entity_type: Entity being listed
        request: Paging parameters; defaults apply when omitted
        *qualifiers: Extra filters (e.g. a user search query), rendered before paging

    Returns:
        CacheKey tagged ``{entity}_list``
    """
    segments = (
        (entity_type, "list")
        + tuple(escape_qualifier(q) for q in qualifiers)
        + _paging(request)
    )
    return CacheKey(
        entity_type, "list", segments, frozenset({f"{entity_type}_list"})
    )


def scoped_list_key(
    parent_type: str,
    parent_id: Any,
    entity_type: str,
    request: Optional[SearchRequest] = None,
    *qualifiers: Any,
) -> CacheKey:
    """
    ``{parent}_{parentId}_{entity}_list_{search}_{page}_{pageSize}_{sortBy}_{sortDescending}``

    Tagged with the scope (``class_3_student_list``), the parent (``class_3``)
    and the cross-parent family (``class_student_list``).
    """
    parent = f"{parent_type}{SEPARATOR}{escape_qualifier(parent_id)}"
    scope = f"{parent}{SEPARATOR}{entity_type}{SEPARATOR}list"
    family = f"{parent_type}{SEPARATOR}{entity_type}{SEPARATOR}list"
    segments = (
        (parent_type, escape_qualifier(parent_id), entity_type, "list")
        + tuple(escape_qualifier(q) for q in qualifiers)
        + _paging(request)
    )
    return CacheKey(
        parent_type, f"{entity_type}_list", segments, frozenset({scope, parent, family})
    )


def scoped_key(parent_type: str, parent_id: Any, name: str, *qualifiers: Any) -> CacheKey:
    """
    Single value scoped under a parent, e.g. ``student_4_course_9_grades`` or
    ``assignment_7_submission_stats``.
    """
    parent = f"{parent_type}{SEPARATOR}{escape_qualifier(parent_id)}"
    segments = (parent_type, escape_qualifier(parent_id), name) + tuple(
        escape_qualifier(q) for q in qualifiers
    )
    family = f"{parent_type}{SEPARATOR}{name}"
    return CacheKey(parent_type, name, segments, frozenset({parent, family}))


def static_key(*segments: str) -> CacheKey:
    """Parameterless read such as ``role_list`` or ``user_statistics``."""
    return CacheKey(segments[0], SEPARATOR.join(segments[1:]), tuple(segments))


# Invalidation patterns. A trailing ``*`` marks a prefix pattern.


def entity_patterns(entity_type: str, entity_id: Any) -> Tuple[str, ...]:
    """``{entity}_{id}`` and ``{entity}_detail_{id}``"""
    return (
        entity_key(entity_type, entity_id).render(),
        view_key(entity_type, "detail", entity_id).render(),
    )


def view_pattern(entity_type: str, view: str, entity_id: Any) -> str:
    return view_key(entity_type, view, entity_id).render()


def list_pattern(entity_type: str) -> str:
    """``{entity}_list_*``"""
    return f"{entity_type}{SEPARATOR}list{SEPARATOR}{WILDCARD}"


def scoped_list_pattern(parent_type: str, parent_id: Any, entity_type: str) -> str:
    """``{parent}_{id}_{entity}_list_*``"""
    return (
        f"{parent_type}{SEPARATOR}{escape_qualifier(parent_id)}{SEPARATOR}"
        f"{entity_type}{SEPARATOR}list{SEPARATOR}{WILDCARD}"
    )


def scope_pattern(parent_type: str, parent_id: Any, *segments: Any) -> str:
    """``{parent}_{id}_[{segments}_]*``: everything scoped under a parent."""
    parts = (parent_type, escape_qualifier(parent_id)) + tuple(
        escape_qualifier(s) if not isinstance(s, str) else s for s in segments
    )
    return SEPARATOR.join(parts) + SEPARATOR + WILDCARD


def is_prefix_pattern(pattern: str) -> bool:
    return pattern.endswith(WILDCARD)


TAG_PATTERN_PREFIX = "tag:"


def tag_pattern(tag: str) -> str:
    """Pattern removing every key indexed under ``tag``, e.g. ``tag:student_assignment_list``."""
    return f"{TAG_PATTERN_PREFIX}{tag}"


def is_tag_pattern(pattern: str) -> bool:
    return pattern.startswith(TAG_PATTERN_PREFIX)
