from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from schoolms.api.v1 import api_router
from schoolms.common.exceptions import BaseAppException
from schoolms.container import CacheContainer, build_container
from schoolms.core.config import Settings, get_settings
from schoolms.logging.setup import get_logger, setup_logging

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[CacheContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings, the cached process settings by default
        container: Pre-built cache container; built from settings at startup
            when omitted

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        if getattr(app.state, "cache", None) is None:
            app.state.cache = build_container(settings)
        logger.info(
            f"Starting {settings.PROJECT_NAME} "
            f"(cache backend: {app.state.cache.manager.cache_type})"
        )

        yield

        await app.state.cache.close()
        logger.info(f"Shutting down {settings.PROJECT_NAME}...")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.APP_VERSION,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.cache = container

    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok", "version": settings.APP_VERSION}

    return app
