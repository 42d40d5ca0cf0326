import logging

from fastapi import FastAPI

from assistant_stream.agents.base import AssistantAgent
from assistant_stream.api.router import api_router
from assistant_stream.api.routers.health import router as health_router
from assistant_stream.core.logging import configure_logging
from assistant_stream.core.settings import Settings, get_settings
from assistant_stream.dependency_injection.container import build_container

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, agent: AssistantAgent | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.effective_log_level)

    container = build_container(settings, agent)

    app = FastAPI(
        title="Assistant Stream",
        version="0.1.0",
        docs_url="/docs" if settings.enable_swagger else None,
        redoc_url="/redoc" if settings.enable_swagger else None,
        openapi_url="/openapi.json" if settings.enable_swagger else None,
    )
    app.state.settings = settings
    app.state.container = container

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    logger.info("assistant stream app created", extra={"app_env": settings.app_env})
    return app
