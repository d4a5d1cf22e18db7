from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from schoolms.common.exceptions import CacheBackendError


@dataclass(frozen=True)
class CacheEntry:
    """
    A single cached value.

    Entries are immutable: a new value for the same key replaces the entry.
    """

    key: str
    value: Any
    created_at: float
    expires_at: float
    size_units: int = 1
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.expires_at <= self.created_at:
            raise CacheBackendError(
                "expires_at must be later than created_at", key=self.key
            )

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


def leading_tag(key: str) -> str:
    """
    Entity-type tag every key is indexed under: the segment before the first ``_``.

    ``student_list_...`` and ``student_4_grade_list_...`` both map to ``student``.
    """
    return key.split("_", 1)[0]


def validate_ttl(key: str, ttl: float) -> None:
    if ttl is None or ttl <= 0:
        raise CacheBackendError(f"TTL must be positive, got {ttl!r}", key=key)


class BaseCacheBackend(ABC):
    """
    Interface shared by the memory and redis backends.

    ``get`` must never raise; every other operation may raise
    ``CacheBackendError`` and relies on the caller to recover.
    """

    backend_type: str = "base"

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Optional[Iterable[str]] = None,
        size_units: int = 1,
    ) -> bool:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    async def remove_by_prefix(self, prefix: str) -> int:
        ...

    @abstractmethod
    async def invalidate_by_tags(self, tags: List[str]) -> int:
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def clear(self) -> int:
        ...

    @abstractmethod
    async def stats(self) -> Dict[str, Any]:
        ...

    async def close(self) -> None:
        """Release background resources. No-op by default."""
