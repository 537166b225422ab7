"""
Action runner application.

Exposes every loaded connector action over HTTP so workflows (or people)
can list, describe and execute them.
"""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from . import __version__
from .api.actions import router as actions_router
from .api.health import router as health_router
from .config import get_settings
from .exceptions import ActionError, action_error_handler
from .services.operation_service import operation_service
from .utils.logging import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("Starting action runner", version=__version__)
    operation_service.load_operations()
    logger.info("Application started successfully", actions=len(operation_service.operations))

    yield

    logger.info("Application shutdown completed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="CloudSlang Connector Actions",
        version=__version__,
        description="Runs ABBYY, Terraform Cloud, mail and vSphere actions",
        lifespan=lifespan
    )

    # Register exception handlers
    @app.exception_handler(ActionError)
    async def action_exception_handler(request, exc: ActionError):
        error = action_error_handler(exc)
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})

    # Include API routers
    app.include_router(health_router)
    app.include_router(actions_router, prefix="/v1")

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "cs_actions.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None  # Use our custom logging
    )


if __name__ == "__main__":
    run()
