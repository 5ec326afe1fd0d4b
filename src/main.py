from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.dependencies import (
    get_execution_harness,
    get_session_registry,
    get_settings,
    shutdown_execution_harness,
)
from src.infrastructure.api.middlewares import add_default_middlewares, add_exception_handlers
from src.infrastructure.api.routes.session_routes import router as session_router
from src.infrastructure.log_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    get_execution_harness()
    logger.info(
        f"ImgEdit backend started (workers={settings.workers}, max_history={settings.max_history})"
    )
    yield
    shutdown_execution_harness()
    logger.info("ImgEdit backend stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(
        title="ImgEdit Backend",
        version="0.1.0",
        description="""
        ## ImgEdit Backend API

        In-memory image editing sessions with bounded undo/redo, built on NumPy.

        ### Features
        - **Sessions**: Upload an image to start an editing session
        - **Operations**: Brightness, contrast, crop, rotate, blur and batches of them
        - **History**: Undo/redo over the last 10 states per session
        - **Rollback**: A failed operation leaves the session untouched

        ### Error Responses
        All errors share one body: `{"detail", "kind", "operation", "parameter"}`
        - **400 Bad Request**: Missing or malformed operation parameters
        - **404 Not Found**: Session does not exist or has ended
        - **409 Conflict**: Request arrived in an invalid state
        - **422 Unprocessable Entity**: Operation failed against the image (rolled back)
        - **501 Not Implemented**: Operation is recognized but not implemented
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )
    add_default_middlewares(app, settings)
    add_exception_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the ImgEdit API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "imgedit-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy", "sessions": len(get_session_registry())}

    app.include_router(session_router)
    return app


app = create_app()
