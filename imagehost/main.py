"""FastAPI application for imagehost.

This module builds the app that:
- Accepts single and batch image uploads into a flat storage directory
- Lists and deletes stored images
- Serves stored images with content types derived from their extension
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imagehost.config import Settings
from imagehost.errors import ImageHostError, Unauthorized
from imagehost.log_utils import log_request_rejected
from imagehost.routes import auth, files, static, uploads
from imagehost.schemas.files import HealthResponse
from imagehost.storage import ensure_storage_dir

logger = logging.getLogger(__name__)


def fail_fast(app: FastAPI, exc: BaseException) -> None:
    """Record a fatal error and ask the running server to stop.

    The CLI exits non-zero once the server has stopped; restarting is left
    to an external supervisor.
    """
    if not app.state.settings.exit_on_error:
        return
    app.state.fatal_error = exc
    server = getattr(app.state, "server", None)
    if server is not None:
        server.should_exit = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    settings: Settings = app.state.settings
    ensure_storage_dir(settings.serve_dir)

    if settings.uses_default_key:
        logger.warning("Auth is enabled with the default placeholder key; set AUTH_KEY in production")

    def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        logger.error(f"Unhandled async failure: {context.get('message')}", exc_info=exc)
        fail_fast(app, exc or RuntimeError(context.get("message", "unknown")))

    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(handle_loop_exception)

    logger.info("Starting imagehost server...")
    yield
    loop.set_exception_handler(previous_handler)
    logger.info("Shutting down imagehost server...")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one immutable settings object."""
    settings = settings or Settings()

    app = FastAPI(
        title="imagehost",
        description="Upload, list, delete and serve image files from a flat directory",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.fatal_error = None

    # Any origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    @app.exception_handler(ImageHostError)
    async def handle_imagehost_error(request: Request, exc: ImageHostError):
        log_request_rejected(logger, request.url.path, exc.status_code, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        log_request_rejected(logger, request.url.path, 422, "invalid request")
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        fail_fast(request.app, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error"},
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint for load balancer."""
        uptime = max(0.0, time.monotonic() - request.app.state.started_at)
        return HealthResponse(uptime=uptime)

    app.include_router(files.router, tags=["Files"])
    if not settings.read_only:
        app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
        app.include_router(uploads.router, tags=["Uploads"])
    # Catch-all /{filename} must come last
    app.include_router(static.router)

    return app


app = create_app()
