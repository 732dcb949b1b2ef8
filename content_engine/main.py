import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

import content_engine.models  # noqa: F401  registers every table on Base.metadata
from content_engine.config import settings
from content_engine.database import Base, engine
from content_engine.exception_handlers import register_exception_handlers
from content_engine.services.notification_service import get_notification_dispatcher

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables in debug mode and run the notification workers."""
    logger.info("Starting up the application...")
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")

    dispatcher = get_notification_dispatcher()
    await dispatcher.start()
    try:
        yield
    finally:
        logger.info("Shutting down the application...")
        await dispatcher.stop()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Editorial content lifecycle and revision engine",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        return {"message": f"{settings.app_name} is running", "version": settings.app_version}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()
