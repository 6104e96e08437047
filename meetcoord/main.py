# meetcoord/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from meetcoord.api.routes import health, meeting_requests
from meetcoord.core.config import get_settings
from meetcoord.core.logging_config import configure_logging
from meetcoord.db.session import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database schema ready")
    yield
    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """
    Application factory for the Meeting Request Coordinator service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Coordinates meeting requests between a requester and a responder:\n"
            "proposal, accept / reject / single-round reschedule, advisory\n"
            "time-slot conflict detection and summary statistics."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Routers
    app.include_router(health.router)
    app.include_router(meeting_requests.router)

    return app


app = create_app()
