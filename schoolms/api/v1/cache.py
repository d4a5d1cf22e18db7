"""
API quản lý cache.

Cung cấp các endpoints:
- Xem thống kê cache, kèm kiểm tra set/get/exists trên backend
- Xóa cache theo prefix pattern, theo tag, hoặc toàn bộ
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from schoolms.api.deps import get_cache_manager, get_container
from schoolms.cache.keys import is_prefix_pattern
from schoolms.cache.manager import CacheManager
from schoolms.container import CacheContainer
from schoolms.logging.setup import get_logger
from schoolms.schemas.cache import CacheClearResponse, CacheProbe, CacheStatsResponse

logger = get_logger(__name__)

PROBE_KEY = "cache_test_key"
PROBE_TTL = 60

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(container: CacheContainer = Depends(get_container)):
    """
    Lấy thống kê về cache.

    Writes a probe value, reads it back and checks that it exists, then
    returns the probe result with the manager and backend statistics.
    """
    manager = container.manager
    stored = f"Cached at {datetime.now(timezone.utc).isoformat()}"

    await manager.set(PROBE_KEY, stored, ttl=PROBE_TTL)
    retrieved = await manager.get(PROBE_KEY)
    exists = await manager.exists(PROBE_KEY)

    probe = CacheProbe(
        test_key=PROBE_KEY,
        stored_value=stored,
        retrieved_value=retrieved,
        key_exists=exists,
    )
    working = retrieved == stored and exists
    return CacheStatsResponse(
        enabled=container.settings.CACHE_ENABLED,
        backend=manager.cache_type,
        probe=probe,
        manager=await manager.stats(),
        message="Cache is working correctly" if working else "Cache is not responding",
    )


@router.delete("/clear", response_model=CacheClearResponse)
async def clear_cache(
    pattern: Optional[str] = Query(
        None, description="Key prefix to remove, e.g. 'student_list_'"
    ),
    tag: Optional[str] = Query(
        None, description="Tag to invalidate, e.g. 'class_3' or 'student_assignment_list'"
    ),
    manager: CacheManager = Depends(get_cache_manager),
):
    """
    Xóa cache theo pattern hoặc tag.

    A trailing ``*`` on the pattern is accepted and ignored: patterns are
    always prefixes. Without a pattern or a tag every key is removed.
    """
    if tag:
        removed = await manager.invalidate_by_tags([tag])
        logger.info(f"Cleared {removed} cache entries tagged '{tag}'")
        return CacheClearResponse(tag=tag, removed=removed, message="Cache Cleared")

    if pattern:
        prefix = pattern[:-1] if is_prefix_pattern(pattern) else pattern
        removed = await manager.remove_by_prefix(prefix)
        logger.info(f"Cleared {removed} cache entries with prefix '{prefix}'")
    else:
        removed = await manager.clear()

    return CacheClearResponse(pattern=pattern or None, removed=removed, message="Cache Cleared")
