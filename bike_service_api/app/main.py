"""
Main entrypoint for the Bike Service API.

This module assembles the FastAPI application, sets up logging,
registers the domain error handler and includes versioned routers.
The ``create_app`` function builds and configures the app.  A default
instance is exposed as the module attribute ``app``, built from the
environment on first access rather than at import time, e.g.::

    uvicorn bike_service_api.app.main:app --reload

Collaborators are built from ``Settings`` by ``build_container`` and
stored on ``app.state.container``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .clients.user_client import UserServiceClient
from .container import ServiceContainer, build_container
from .core.cache import CachePort
from .core.config import Settings
from .core.db import init_db
from .core.exceptions import (
    BikeServiceError,
    ForbiddenError,
    InvalidIdentifierError,
    NotFoundError,
    ReferenceNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from .core.logging_config import setup_logging


logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidIdentifierError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ReferenceNotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_code_for(exc: BikeServiceError) -> int:
    """Return the HTTP status for a domain error; unknown kinds are 500."""
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[CachePort] = None,
    user_client: Optional[UserServiceClient] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration; read from the environment when omitted.
    cache, user_client : optional
        Replacements for the collaborators derived from settings.
    container : Optional[ServiceContainer]
        An already built container, shared with another surface.  The
        app does not close a container it did not build.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    owns_container = container is None
    if container is None:
        settings = settings or Settings()
        setup_logging(settings)
        container = build_container(settings, cache=cache, user_client=user_client)
    settings = container.settings

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/api/v1")

    @app.exception_handler(BikeServiceError)
    async def domain_error_handler(request: Request, exc: BikeServiceError) -> JSONResponse:
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("Request failed path=%s: %s", request.url.path, exc)
            detail = "Internal server error"
        else:
            logger.info("Request rejected path=%s status=%s: %s", request.url.path, status_code, exc)
            detail = str(exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Invalid request body path=%s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid JSON format", "errors": jsonable_errors(exc)},
        )

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    # Register startup event to initialise the database and apply migrations.
    @app.on_event("startup")
    async def startup_event() -> None:
        version = init_db(container.db_path)
        logger.info("Database ready schema_version=%s", version)

    if owns_container:
        @app.on_event("shutdown")
        async def shutdown_event() -> None:
            container.close()

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Reduce pydantic error entries to their location and message."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def __getattr__(name: str):
    # ``app`` is built on first access so that importing ``create_app``
    # (as run.py does) does not build a second container.  uvicorn
    # resolves ``main:app`` with getattr, which lands here.
    if name == "app":
        instance = create_app()
        globals()["app"] = instance
        return instance
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
