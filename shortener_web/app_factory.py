"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortener.exceptions import ErrorKind, ShortenerError
from shortener.events import EventChannel
from shortener.service import URLShortenerService
from .api import api_router
from .web import web_router
from .hub import ConnectionHub, router as hub_router
from .middleware.logging import LoggingMiddleware


ERROR_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.DUPLICATE_CODE: 409,
    ErrorKind.NOT_FOUND: 404,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start and stop the event hub with the application."""
    hub: ConnectionHub = app.state.hub
    await hub.start()
    yield
    await hub.stop()


def _register_error_handlers(app: FastAPI, debug: bool, logger: logging.Logger) -> None:
    @app.exception_handler(ShortenerError)
    async def shortener_error_handler(request: Request, exc: ShortenerError):
        status_code = ERROR_STATUS.get(exc.kind, 400)
        logger.info(f"{request.method} {request.url.path} rejected ({exc.kind.value}): {exc.message}")
        return JSONResponse(status_code=status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content={"error": message, "detail": str(errors)},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        message = str(exc) if debug else "An unexpected error occurred"
        return JSONResponse(status_code=500, content={"error": message})


def create_app(
    service_instance: URLShortenerService,
    config,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    The event hub drains the service's event channel; a service built
    without one is given a fresh channel.

    Args:
        service_instance: Service instance
        config: Configuration instance
        logger: Optional logger

    Returns:
        Configured FastAPI app
    """
    logger = logger or logging.getLogger("shortener_web")
    if service_instance.events is None:
        service_instance.events = EventChannel()
    event_channel = service_instance.events

    app = FastAPI(
        title="URL Shortener",
        description="In-memory URL shortening service with real-time click events",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config
    app.state.events = event_channel
    app.state.hub = ConnectionHub(event_channel)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    _register_error_handlers(app, debug=config.debug, logger=logger)

    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(hub_router, tags=["Events"])
    # Catch-all /{short_code} goes last
    app.include_router(web_router, tags=["Redirect"])

    return app
