"""
Contact Relay Backend
FastAPI application relaying contact-form emails to EmailJS and CV uploads
to Cloudinary, optionally serving the pre-built portfolio site.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, load_settings
from app.routers import email, upload
from app.services.cloudinary import CloudinaryClient
from app.services.emailjs import EmailJSClient
from app.services.staging import build_staging
from app.static_site import SPAStaticFiles

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

API_PATHS = ("/test", "/send-email", "/upload-cv")


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, detail, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    return _error_response(400, f"Invalid request: {location}: {message}" if location else message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    return _error_response(500, "Internal server error")


def _mount_static_site(app: FastAPI, static_dir: Optional[str]) -> None:
    """Serve the pre-built SPA from ``static_dir`` when it exists."""
    if not static_dir:
        return
    if not os.path.isdir(static_dir):
        logger.warning(f"STATIC_DIR {static_dir!r} is not a directory; static site disabled")
        return

    app.mount(
        "/",
        SPAStaticFiles(directory=static_dir, reserved_paths=API_PATHS),
        name="static",
    )
    logger.info(f"Serving static site from {static_dir}")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Provider clients are constructed here, once, from ``settings`` and
    stored on ``app.state`` for the request dependencies. ``transport`` lets
    callers (tests) substitute the EmailJS HTTP transport.
    """
    if settings is None:
        settings = load_settings()

    logging.getLogger().setLevel(settings.log_level)

    http = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.outbound_timeout_seconds),
        transport=transport,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.log_config()
        logger.info(f"Contact relay running on port {settings.port}")
        try:
            yield
        finally:
            await http.aclose()

    app = FastAPI(
        title="Contact Relay API",
        description="Relays contact-form emails to EmailJS and CV uploads to Cloudinary",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.http = http
    app.state.emailjs = EmailJSClient(settings, http)
    app.state.cloudinary = CloudinaryClient(settings)
    app.state.staging = build_staging(
        settings.upload_staging,
        max_bytes=settings.upload_max_bytes,
        temp_dir=settings.upload_temp_dir,
    )

    # CORS configuration: every origin by default, credentials allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/test")
    async def test():
        return {"message": "Backend is working!"}

    app.include_router(email.router, tags=["email"])
    app.include_router(upload.router, tags=["upload"])

    # Must come last: the SPA mount at "/" swallows every unmatched path
    _mount_static_site(app, settings.static_dir)

    return app


app = create_app()


def run() -> None:
    """Start the server on the configured PORT."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
