"""
Vô hiệu hóa cache dựa trên các sự kiện (event).

Every successful write is dispatched as the event ``"{entity_type}.{mutation}"``.
Rules registered for the event turn the write's context into key patterns, and
each pattern is removed from the backend independently of the others.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from schoolms.cache.backends.base import BaseCacheBackend
from schoolms.cache.keys import (
    TAG_PATTERN_PREFIX,
    entity_patterns,
    is_prefix_pattern,
    is_tag_pattern,
    list_pattern,
)
from schoolms.logging.setup import get_logger
from schoolms.monitoring.metrics import CacheMetrics, metrics as default_metrics

logger = get_logger(__name__)

Event = str  # "{entity_type}.{mutation}"


class Mutation:
    """Mutation kinds a write can declare."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    ENROLLED = "enrolled"
    UNENROLLED = "unenrolled"
    BULK_CREATED = "bulk_created"
    BULK_ENROLLED = "bulk_enrolled"
    BULK_DELETED = "bulk_deleted"
    GRADED = "graded"
    PHOTO_CHANGED = "photo_changed"
    ROLES_CHANGED = "roles_changed"


@dataclass
class MutationContext:
    """
    Everything known about a completed write.

    Attributes:
        entity_type: Entity the write changed
        mutation: Mutation kind
        entity_id: Id of the changed record, when there is a single one
        params: Bound arguments of the write call, by parameter name
        result: Value the write returned
        snapshot: Record as it was before the write, when it was read up front
    """

    entity_type: str
    mutation: str
    entity_id: Any = None
    params: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    snapshot: Any = None

    @property
    def event(self) -> Event:
        return f"{self.entity_type}.{self.mutation}"

    def related(self, attribute: str) -> List[Any]:
        """
        Collect ``attribute`` from the write's parameters, snapshot and result.

        An update can move a record between parents (an enrollment changing
        class), so both the old and the new value are returned, deduplicated.
        Lists of payloads (bulk writes) are searched one level deep.

        Args:
            attribute: Field name such as ``student_id``

        Returns:
            Distinct non-None values
        """
        sources: List[Any] = [self.snapshot, self.result]
        for value in self.params.values():
            sources.append(value)
            for nested in _children(value):
                sources.append(nested)

        values: List[Any] = []
        direct = self.params.get(attribute)
        if direct is not None and not isinstance(direct, (list, tuple, set)):
            values.append(direct)
        for source in sources:
            value = _lookup(source, attribute)
            if value is not None and value not in values:
                values.append(value)
        return values

    def first(self, attribute: str) -> Any:
        values = self.related(attribute)
        return values[0] if values else None


def _lookup(source: Any, attribute: str) -> Any:
    if source is None or isinstance(source, (str, int, float, bool)):
        return None
    if isinstance(source, Mapping):
        return source.get(attribute)
    return getattr(source, attribute, None)


def _children(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple, set)):
        return value
    nested: List[Any] = []
    for name in getattr(type(value), "model_fields", {}) or {}:
        attr = getattr(value, name, None)
        if isinstance(attr, (list, tuple)):
            nested.extend(attr)
    return nested


InvalidationRule = Callable[[MutationContext], Iterable[str]]


def base_rule(ctx: MutationContext) -> List[str]:
    """The entity's own keys and every cached page of its list."""
    patterns: List[str] = []
    if ctx.entity_id is not None:
        patterns.extend(entity_patterns(ctx.entity_type, ctx.entity_id))
    patterns.append(list_pattern(ctx.entity_type))
    return patterns


class InvalidationCoordinator:
    """
    Dispatcher từ mutation sang các cache key pattern cần xóa.

    Rules are registered per event. The coordinator is invoked only after the
    write returned successfully; it never raises to the writer.
    """

    def __init__(
        self,
        backend: BaseCacheBackend,
        metrics: Optional[CacheMetrics] = None,
    ):
        self.backend = backend
        self.metrics = metrics or default_metrics
        self._rules: Dict[Event, List[InvalidationRule]] = {}

    def register_rule(
        self, entity_type: str, mutations: Iterable[str], rule: InvalidationRule
    ) -> None:
        """
        Đăng ký rule cho các sự kiện.

        Args:
            entity_type: Entity type
            mutations: Mutation kinds the rule applies to
            rule: Callable returning key patterns for a MutationContext
        """
        for mutation in mutations:
            self._rules.setdefault(f"{entity_type}.{mutation}", []).append(rule)

    def rule(self, entity_type: str, *mutations: str):
        """Decorator form of ``register_rule``."""

        def decorator(func: InvalidationRule) -> InvalidationRule:
            self.register_rule(entity_type, mutations, func)
            return func

        return decorator

    def is_mapped(self, entity_type: str, mutation: str) -> bool:
        return f"{entity_type}.{mutation}" in self._rules

    @property
    def events(self) -> List[Event]:
        return sorted(self._rules)

    def patterns_for(self, ctx: MutationContext) -> List[str]:
        """
        Ordered, de-duplicated patterns for a write.

        An event without rules falls back to the base rule and logs a warning,
        so an undeclared write path still drops the entity's own keys.
        """
        rules = self._rules.get(ctx.event)
        if not rules:
            logger.warning(
                f"No invalidation rule for '{ctx.event}', only base keys are removed"
            )
            rules = [base_rule]

        patterns: List[str] = []
        for rule in rules:
            for pattern in rule(ctx):
                if pattern not in patterns:
                    patterns.append(pattern)
        return patterns

    async def on_mutation(
        self,
        entity_type: str,
        mutation: str,
        entity_id: Any = None,
        params: Optional[Dict[str, Any]] = None,
        result: Any = None,
        snapshot: Any = None,
    ) -> int:
        """
        Kích hoạt fan-out invalidation cho một write đã thành công.

        Args:
            entity_type: Entity type
            mutation: Mutation kind
            entity_id: Changed record id
            params: Bound write arguments
            result: Write result
            snapshot: Pre-write record

        Returns:
            Number of cache entries removed
        """
        ctx = MutationContext(
            entity_type=entity_type,
            mutation=mutation,
            entity_id=entity_id,
            params=params or {},
            result=result,
            snapshot=snapshot,
        )
        try:
            patterns = self.patterns_for(ctx)
        except Exception as e:
            logger.error(f"Failed to resolve invalidation for '{ctx.event}': {str(e)}")
            return 0

        removed = await self.invalidate(patterns)
        self.metrics.track_invalidation(entity_type, mutation)
        logger.info(
            f"Invalidated {removed} cache entries after {ctx.event}"
            f"{'' if entity_id is None else f' (id={entity_id})'}"
        )
        return removed

    async def invalidate(self, patterns: Iterable[str]) -> int:
        """
        Remove patterns as independent operations.

        A failing pattern is logged and does not stop the others.

        Returns:
            Number of cache entries removed
        """
        patterns = list(patterns)
        if not patterns:
            return 0

        results = await asyncio.gather(
            *(self._remove(pattern) for pattern in patterns), return_exceptions=True
        )

        removed = 0
        for pattern, outcome in zip(patterns, results):
            if isinstance(outcome, Exception):
                logger.error(f"Failed to invalidate '{pattern}': {str(outcome)}")
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                removed += outcome
        return removed

    async def _remove(self, pattern: str) -> int:
        if is_tag_pattern(pattern):
            return await self.backend.invalidate_by_tags(
                [pattern[len(TAG_PATTERN_PREFIX) :]]
            )
        if is_prefix_pattern(pattern):
            return await self.backend.remove_by_prefix(pattern[:-1])
        return 1 if await self.backend.delete(pattern) else 0

    def unmapped(self, services: Iterable[Any]) -> List[Event]:
        """
        Write paths declared on decorated services that have no rule.

        Args:
            services: Decorated service instances or classes

        Returns:
            Sorted list of unmapped events
        """
        missing = set()
        for service in services:
            for entity_type, mutation in declared_mutations(service):
                if not self.is_mapped(entity_type, mutation):
                    missing.add(f"{entity_type}.{mutation}")
        return sorted(missing)


def declared_mutations(service: Any) -> List[Tuple[str, str]]:
    """``(entity_type, mutation)`` pairs declared with ``@invalidates`` on a service."""
    cls = service if isinstance(service, type) else type(service)
    declared = []
    for name in dir(cls):
        marker = getattr(getattr(cls, name, None), "__cache_mutation__", None)
        if marker is None:
            continue
        entity_type, mutation = marker
        declared.append((entity_type or cls.entity_type, mutation))
    return declared
