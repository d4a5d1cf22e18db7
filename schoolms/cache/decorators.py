import functools
import inspect
from typing import Any, Awaitable, Callable, ClassVar, Dict, Optional, Union

from schoolms.cache.keys import CacheKey
from schoolms.cache.manager import CacheManager
from schoolms.cache.policy import TTLPolicy
from schoolms.cache.strategies.event_based import InvalidationCoordinator
from schoolms.logging.setup import get_logger

logger = get_logger(__name__)

KeyBuilder = Callable[..., CacheKey]
SnapshotReader = Callable[[Any, Dict[str, Any]], Awaitable[Any]]


class CachingService:
    """
    Base class for the cache decorators placed in front of domain services.

    Subclasses set ``entity_type`` and declare each method of the wrapped
    service with ``@cached_read`` (reads) or ``@invalidates`` (writes); method
    bodies only delegate to ``self.inner``. The decorated object exposes the
    same methods and signatures as the service it wraps.
    """

    entity_type: ClassVar[str] = ""

    def __init__(
        self,
        inner: Any,
        cache: CacheManager,
        invalidator: InvalidationCoordinator,
        ttl_policy: TTLPolicy,
    ):
        self.inner = inner
        self.cache = cache
        self.invalidator = invalidator
        self.ttl_policy = ttl_policy

    def __repr__(self) -> str:
        return f"{type(self).__name__}(inner={self.inner!r})"


def _bind(signature: inspect.Signature, args, kwargs) -> Dict[str, Any]:
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    arguments = dict(bound.arguments)
    arguments.pop("self", None)
    return arguments


def cached_read(operation: str, key: KeyBuilder, entity: Optional[str] = None):
    """
    Decorator cho read method: cache-aside qua ``CacheManager.get_or_create``.

    Args:
        operation: TTL operation name, looked up as ``(entity_type, operation)``
        key: Builds the CacheKey from the call arguments, passed by parameter name
        entity: Entity whose TTL table applies, the service's own by default

    Returns:
        Decorator function
    """

    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self: CachingService, *args, **kwargs):
            cache_key = key(**_bind(signature, (self,) + args, kwargs))
            ttl = self.ttl_policy.ttl_for(entity or self.entity_type, operation)
            return await self.cache.get_or_create(
                cache_key, lambda: func(self, *args, **kwargs), ttl
            )

        wrapper.__cache_operation__ = operation
        return wrapper

    return decorator


def _succeeded(result: Any) -> bool:
    return result is not None and result is not False


def invalidates(
    mutation: str,
    entity: Optional[str] = None,
    entity_id: Union[str, Callable[[Dict[str, Any], Any], Any], None] = None,
    snapshot: Optional[SnapshotReader] = None,
):
    """
    Decorator cho write method: run the write, then fan out invalidation.

    Invalidation happens only after the write returned successfully (neither
    None nor False). Exceptions from the write propagate and invalidate nothing.

    Args:
        mutation: Mutation kind dispatched to the coordinator
        entity: Entity the write changes, the service's own by default
        entity_id: Name of the parameter holding the changed id, or a callable
            ``(arguments, result) -> id``; defaults to ``result.id``
        snapshot: ``(service, arguments) -> record`` read from the undecorated
            service before the write, for relations only the stored record knows

    Returns:
        Decorator function
    """

    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self: CachingService, *args, **kwargs):
            arguments = _bind(signature, (self,) + args, kwargs)
            entity_type = entity or self.entity_type

            before = None
            if snapshot is not None:
                try:
                    before = await snapshot(self, arguments)
                except Exception as e:
                    logger.warning(
                        f"Could not read {entity_type} before {mutation}: {str(e)}"
                    )

            result = await func(self, *args, **kwargs)
            if not _succeeded(result):
                return result

            if callable(entity_id):
                ident = entity_id(arguments, result)
            elif entity_id is not None:
                ident = arguments.get(entity_id)
            else:
                ident = getattr(result, "id", None)

            await self.invalidator.on_mutation(
                entity_type,
                mutation,
                entity_id=ident,
                params=arguments,
                result=result,
                snapshot=before,
            )
            return result

        wrapper.__cache_mutation__ = (entity, mutation)
        return wrapper

    return decorator
