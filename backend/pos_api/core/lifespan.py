"""
Application lifespan handler.
Opens the database on startup and closes it on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from pos_api.models import Base
from pos_shared.config.logging import get_logger, setup_logging
from pos_shared.config.settings import settings
from pos_shared.infrastructure.db import close_db, init_db

logger = get_logger("pos_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )

    logger.info("Starting POS API", port=settings.api_port, env=settings.environment)

    engine = init_db()
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down POS API")
    close_db()
