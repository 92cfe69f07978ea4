"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from billing_engine.config import configure_logging, get_settings
from billing_engine.core import container
from billing_engine.database import dispose_engine, get_session_factory, initialize_database
from billing_engine.infrastructure.common.error_handlers import register_exception_handlers
from billing_engine.infrastructure.lending.routers import loans

logger = structlog.get_logger(__name__)


def create_app(session_factory: sessionmaker[Session] | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        session_factory: Session factory to use instead of the one built from
            DATABASE_URL at startup

    Returns:
        Configured FastAPI application; serve it with
        `uvicorn --factory billing_engine.main:create_app`
    """
    settings = get_settings()
    configure_logging(settings.ENVIRONMENT)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_database = session_factory is None
        if session_factory is None:
            initialize_database(settings)
            container.session_factory.override(get_session_factory())
        else:
            container.session_factory.override(session_factory)
        logger.info("application_started", environment=settings.ENVIRONMENT)
        try:
            yield
        finally:
            container.session_factory.reset_override()
            if owns_database:
                dispose_engine()
            logger.info("application_stopped")

    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(loans.router, prefix=settings.API_V1_PREFIX)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app
