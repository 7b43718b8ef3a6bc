"""FastAPI application for the Prefscale backend"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from prefscale import __version__
from prefscale.app import PrefscaleApp
from prefscale.services.blob_store import BlobStore
from prefscale.services.document_store import DocumentStore
from prefscale.utils.config import Settings, load_settings
from prefscale.utils.exceptions import PrefscaleError
from prefscale.utils.logger import get_logger, setup_logger

from .api import auth_router, router as api_router

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    document_store: Optional[DocumentStore] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    """Build the app. Settings come from the environment unless given."""
    settings = settings or load_settings()
    setup_logger(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        file_path=settings.logging.file_path,
        max_bytes=settings.logging.max_bytes,
        backup_count=settings.logging.backup_count,
    )

    backend = PrefscaleApp(settings, document_store=document_store, blob_store=blob_store)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("Server starting", host=settings.host, port=settings.port)
        try:
            yield
        finally:
            backend.shutdown()
            logger.info("Server stopped")

    app = FastAPI(
        title="Prefscale Backend",
        description="Accounts, blogs and contact messages",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.backend = backend

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(PrefscaleError)
    async def prefscale_error_handler(request: Request, exc: PrefscaleError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Invalid request", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"message": "Invalid request"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error", path=request.url.path, error=str(exc), error_type=type(exc).__name__
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Prefscale Backend Live"

    app.include_router(auth_router)
    app.include_router(api_router)
    return app
