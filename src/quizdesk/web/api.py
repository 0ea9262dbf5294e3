"""FastAPI application factory.

Main entry point for the quizdesk Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizdesk import __version__
from quizdesk.config.app_config import load_app_config
from quizdesk.core.errors import QuizdeskError
from quizdesk.db.database import init_db
from quizdesk.logging_setup import configure_logging
from quizdesk.web.routes import (
    admin_router,
    analytics_router,
    assignments_router,
    auth_router,
    files_router,
    functions_router,
    grading_router,
    health_router,
    student_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    db_path = init_db()
    logger.info(
        "api_startup",
        db_path=str(db_path.absolute()),
        storage_dir=str(config.storage.directory.absolute()),
    )
    yield
    logger.info("api_shutdown")


async def quizdesk_error_handler(request: Request, exc: QuizdeskError) -> JSONResponse:
    """Translate domain errors into HTTP responses."""
    logger.info(
        "api_error",
        path=request.url.path,
        error=type(exc).__name__,
        status=exc.status_code,
    )
    content: dict = {"detail": exc.message}
    position = getattr(exc, "position", None)
    if position is not None:
        content["position"] = position
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()
    configure_logging(config.server.log_level, config.server.json_logs)

    app = FastAPI(
        title="quizdesk API",
        description="Assignments, quizzes and grading for instructors and students",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuizdeskError, quizdesk_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(assignments_router)
    app.include_router(student_router)
    app.include_router(grading_router)
    app.include_router(analytics_router)
    app.include_router(files_router)
    app.include_router(functions_router)

    return app


# Default app instance for uvicorn
app = create_app()
