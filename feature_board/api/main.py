# feature_board/api/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from feature_board.api.errors import register_exception_handlers
from feature_board.api.middleware import RequestIdMiddleware
from feature_board.api.routers.admin import router as admin_router
from feature_board.api.routers.auth import router as auth_router
from feature_board.api.routers.cron import router as cron_router
from feature_board.api.routers.feedback import router as feedback_router
from feature_board.api.routers.health import router as health_router
from feature_board.api.routers.votes import router as votes_router
from feature_board.config.settings import Settings, get_settings
from feature_board.logging_config import configure_logging
from feature_board.services.container import ServiceContainer, build_container

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or (container.settings if container else get_settings())
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.container is None:
            app.state.container = build_container(settings)
        yield
        app.state.container.close()

    app = FastAPI(title="Feature Board API", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(feedback_router)
    app.include_router(votes_router)
    app.include_router(cron_router)
    app.include_router(admin_router)
    app.include_router(auth_router)

    return app


app = create_app()


def main():
    """Serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        # keep the format set by configure_logging
        log_config=None,
    )


if __name__ == "__main__":
    main()
