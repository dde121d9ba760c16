"""
Main entrypoint for the Guest Registry API.

This module assembles the FastAPI application, sets up logging,
middleware and error handlers, and includes the API router.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn guest_registry_api.app.main:app --reload

Tests call ``create_app`` directly with their own ``Settings`` and, if
needed, a substitute store or authenticator.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.context import AppContext
from .core.db import GuestStore
from .core.errors import RegistrationFailedError, RegistrationValidationError
from .core.logging_config import setup_logging
from .core.security import AdminAuthenticator, StaticTokenAuthenticator
from .services.guest_service import GuestService

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data: blob:; "
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
        "font-src 'self' https://fonts.gstatic.com"
    ),
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[GuestStore] = None,
    authenticator: Optional[AdminAuthenticator] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    This function performs one‑time setup tasks such as configuring
    logging, building the application context and registering routes,
    middleware and exception handlers.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration; defaults to the environment-derived settings.
    store : Optional[GuestStore]
        Record store; defaults to a SQLite store at ``settings.database_url``.
    authenticator : Optional[AdminAuthenticator]
        Admin check; defaults to the static ``X-Admin-Token`` secret.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the setup below
    # can safely log messages.
    setup_logging(settings.log_level, settings.log_dir or None)

    store = store or GuestStore(settings.database_url)
    context = AppContext(
        settings=settings,
        store=store,
        authenticator=authenticator or StaticTokenAuthenticator(settings.admin_token),
        guests=GuestService(store),
    )

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.context = context

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Admin-Token"],
    )

    @app.middleware("http")
    async def log_and_secure(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "HTTP %s %s %s %sms ip=%s ua=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request.client.host if request.client else None,
            request.headers.get("user-agent"),
        )
        return response

    app.include_router(api_router, prefix="/api")

    _register_exception_handlers(app, settings)
    _register_spa_fallback(app, settings)

    @app.on_event("startup")
    async def startup_event() -> None:
        await context.store.connect()
        logger.info(
            "%s started (environment=%s, health check at /api/health)",
            settings.project_name,
            settings.environment,
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await context.store.close()

    return app


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RegistrationValidationError)
    async def validation_error_handler(request: Request, exc: RegistrationValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder({"success": False, "message": exc.message, "errors": exc.errors}),
        )

    @app.exception_handler(RegistrationFailedError)
    async def registration_failed_handler(request: Request, exc: RegistrationFailedError) -> JSONResponse:
        logger.error("Guest registration failed: %s", exc, exc_info=exc.cause or exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Registration failed",
                "error": str(exc) if settings.is_development else "Internal server error",
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            logger.warning("404 - API route not found: %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={
                    "success": False,
                    "message": "API endpoint not found",
                    "path": request.url.path,
                    "method": request.method,
                    "timestamp": _timestamp(),
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled application error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Internal server error",
                "error": str(exc) if settings.is_development else "Something went wrong",
                "timestamp": _timestamp(),
            },
        )


def _register_spa_fallback(app: FastAPI, settings: Settings) -> None:
    """Serve the single page application for every non-API GET.

    Existing files under ``settings.public_dir`` are returned as is;
    any other path gets ``index.html`` so the client-side router can
    handle it.  Unknown ``/api`` paths fall through to the 404 handler.
    """
    public_dir = Path(settings.public_dir).resolve()

    @app.api_route(
        "/api/{rest:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    async def unknown_api_route(rest: str) -> None:
        raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str) -> FileResponse:
        if full_path == "api":
            raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
        candidate = (public_dir / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(public_dir):
            return FileResponse(candidate)
        index = public_dir / "index.html"
        if not index.is_file():
            raise StarletteHTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Application shell not found"
            )
        return FileResponse(index)


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
