from fastapi import Request

from schoolms.cache.manager import CacheManager
from schoolms.container import CacheContainer


def get_container(request: Request) -> CacheContainer:
    """Cache container owned by the running application."""
    return request.app.state.cache


def get_cache_manager(request: Request) -> CacheManager:
    return get_container(request).manager
