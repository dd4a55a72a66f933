"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from picstyle import __version__
from picstyle.api.routes import router
from picstyle.config import Settings, get_settings
from picstyle.errors import (
    CorruptData,
    DimensionMismatch,
    EncodeFailure,
    InvalidDimensions,
    PicstyleError,
    TemplateNotFound,
    TemplateValidationError,
    UnsupportedFormat,
)
from picstyle.pool import ConversionPool
from picstyle.storage import ArtifactStore
from picstyle.style_model import HeuristicStyleModelProvider
from picstyle.studio import StyleStudio
from picstyle.templates import InMemoryTemplateRepository

logger = logging.getLogger(__name__)

_ERROR_STATUS: list[tuple[type[PicstyleError], int]] = [
    (TemplateNotFound, status.HTTP_404_NOT_FOUND),
    (TemplateValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidDimensions, status.HTTP_400_BAD_REQUEST),
    (UnsupportedFormat, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (CorruptData, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DimensionMismatch, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (EncodeFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def init_state(app: FastAPI, settings: Settings) -> None:
    """Wire settings, the studio and the conversion pool onto ``app.state``."""
    app.state.settings = settings
    app.state.studio = StyleStudio(
        settings,
        repository=InMemoryTemplateRepository(),
        provider=HeuristicStyleModelProvider(),
        store=ArtifactStore(settings.output_dir),
    )
    app.state.conversion_pool = ConversionPool(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting PicStyle (max_concurrent=%s, output_dir=%s, canvas=%dx%d)",
        settings.max_concurrent,
        settings.output_dir,
        settings.canvas_max_width,
        settings.canvas_max_height,
    )

    init_state(app, settings)

    logger.info("PicStyle ready")
    yield

    logger.info("Shutting down PicStyle")
    app.state.conversion_pool.shutdown()
    logger.info("PicStyle shutdown complete")


async def _picstyle_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, error_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            code = error_code
            break
    logger.warning("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


async def _timeout_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("%s %s rejected: pipeline pool busy", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Server busy, try again later"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="PicStyle",
        description="Photo stylization API: thumbnails, line-art outlines and cartoon illustrations",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(PicstyleError, _picstyle_error_handler)
    application.add_exception_handler(TimeoutError, _timeout_handler)
    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("picstyle.main:app", host=settings.host, port=settings.port)
