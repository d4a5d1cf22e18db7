from fastapi import APIRouter

from schoolms.api.v1.cache import router as cache_router

api_router = APIRouter()
api_router.include_router(cache_router)

__all__ = ["api_router"]
