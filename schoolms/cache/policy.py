from typing import Dict, Mapping, Optional, Tuple

from schoolms.common.exceptions import ConfigurationError
from schoolms.core.config import Settings

MINUTE = 60

# (entity_type, operation) -> seconds. Volatile data (attendance, grades,
# dashboards) is kept short; reference data (departments, roles) is kept long.
DEFAULT_TTLS: Dict[Tuple[str, str], int] = {
    ("student", "detail"): 15 * MINUTE,
    ("student", "list"): 10 * MINUTE,
    ("student", "dashboard"): 5 * MINUTE,
    ("student", "stats"): 5 * MINUTE,
    ("student", "enrollment_list"): 10 * MINUTE,
    ("student", "grade_list"): 5 * MINUTE,
    ("student", "class_list"): 10 * MINUTE,
    ("student", "attendance_list"): 5 * MINUTE,
    ("student", "assignment_list"): 5 * MINUTE,
    ("student", "notification_list"): 2 * MINUTE,
    ("teacher", "detail"): 20 * MINUTE,
    ("teacher", "list"): 15 * MINUTE,
    ("teacher", "stats"): 10 * MINUTE,
    ("teacher", "course_list"): 15 * MINUTE,
    ("teacher", "class_list"): 15 * MINUTE,
    ("class", "detail"): 20 * MINUTE,
    ("class", "list"): 15 * MINUTE,
    ("class", "enrollment_list"): 10 * MINUTE,
    ("class", "student_list"): 5 * MINUTE,
    ("class", "attendance_list"): 5 * MINUTE,
    ("class", "assignment_list"): 10 * MINUTE,
    ("course", "detail"): 20 * MINUTE,
    ("course", "list"): 15 * MINUTE,
    ("course", "enrollment_list"): 10 * MINUTE,
    ("enrollment", "detail"): 15 * MINUTE,
    ("enrollment", "list"): 10 * MINUTE,
    ("enrollment", "by_parent"): 10 * MINUTE,
    ("grade", "detail"): 10 * MINUTE,
    ("grade", "list"): 5 * MINUTE,
    ("grade", "by_parent"): 5 * MINUTE,
    ("grade", "student_course"): 5 * MINUTE,
    ("attendance", "detail"): 10 * MINUTE,
    ("attendance", "list"): 5 * MINUTE,
    ("attendance", "by_parent"): 5 * MINUTE,
    ("attendance", "summary"): 5 * MINUTE,
    ("attendance", "report"): 10 * MINUTE,
    ("assignment", "detail"): 20 * MINUTE,
    ("assignment", "list"): 15 * MINUTE,
    ("assignment", "by_parent"): 15 * MINUTE,
    ("submission", "detail"): 15 * MINUTE,
    ("submission", "list"): 10 * MINUTE,
    ("submission", "by_parent"): 10 * MINUTE,
    ("submission", "stats"): 5 * MINUTE,
    ("department", "detail"): 30 * MINUTE,
    ("department", "list"): 20 * MINUTE,
    ("user", "detail"): 15 * MINUTE,
    ("user", "profile"): 20 * MINUTE,
    ("user", "list"): 10 * MINUTE,
    ("user", "roles"): 30 * MINUTE,
    ("user", "in_role"): 10 * MINUTE,
    ("user", "statistics"): 5 * MINUTE,
}


class TTLPolicy:
    """
    Resolve the TTL of a cached read.

    Lookup order: configured override, built-in table, default TTL.
    """

    def __init__(
        self,
        default_ttl: int = 10 * MINUTE,
        overrides: Optional[Mapping[str, int]] = None,
        table: Optional[Mapping[Tuple[str, str], int]] = None,
    ):
        """
        Args:
            default_ttl: Fallback for pairs missing from the table
            overrides: ``{"entity.operation": seconds}``
            table: Replaces ``DEFAULT_TTLS`` when given
        """
        if default_ttl <= 0:
            raise ConfigurationError(
                "Default cache TTL must be positive", config_key="CACHE_DEFAULT_TTL"
            )

        self.default_ttl = default_ttl
        self._table: Dict[Tuple[str, str], int] = dict(
            DEFAULT_TTLS if table is None else table
        )

        for name, seconds in (overrides or {}).items():
            entity_type, _, operation = name.partition(".")
            if not entity_type or not operation or seconds <= 0:
                raise ConfigurationError(
                    f"Invalid TTL override {name}={seconds}",
                    config_key="CACHE_TTL_OVERRIDES",
                )
            self._table[(entity_type, operation)] = seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TTLPolicy":
        return cls(
            default_ttl=settings.CACHE_DEFAULT_TTL,
            overrides=settings.CACHE_TTL_OVERRIDES,
        )

    def ttl_for(self, entity_type: str, operation: str) -> int:
        return self._table.get((entity_type, operation), self.default_ttl)

    def as_dict(self) -> Dict[str, int]:
        return {f"{e}.{op}": ttl for (e, op), ttl in sorted(self._table.items())}
