from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.domain.errors import (
    IllegalStateError,
    PipelineError,
    ProcessingError,
    UnsupportedOperationError,
    ValidationError,
)
from src.infrastructure.config import Settings
from src.infrastructure.sessions.session_registry import SessionNotFoundError

# Most specific first
_STATUS_BY_ERROR: list[tuple[type[PipelineError], int]] = [
    (SessionNotFoundError, 404),
    (ValidationError, 400),
    (UnsupportedOperationError, 501),
    (ProcessingError, 422),
    (IllegalStateError, 409),
]


def status_for(exc: PipelineError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def add_default_middlewares(app: FastAPI, settings: Settings) -> None:
    # CORS configuration
    # In development/demo mode, allow common frontend origins
    if settings.env in ("development", "staging"):
        allowed_origins = [
            "http://localhost:3000",
            "http://localhost:5173",  # Vite default
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    else:
        allowed_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
        status_code = status_for(exc)
        logger.warning(
            f"{request.method} {request.url.path}: {type(exc).__name__} "
            f"({exc.kind.value}) {exc.message}"
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())
