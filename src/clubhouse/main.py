"""FastAPI application factory for Clubhouse."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from clubhouse.config import settings
from clubhouse.db.repositories.credential_repo import OrganizationNotFound
from clubhouse.db.session import engine
from clubhouse.dependencies import get_cipher
from clubhouse.errors import AuthorizationDenied, CredentialError, StoreUnavailable
from clubhouse.middleware.rate_limiter import RateLimitMiddleware
from clubhouse.models.base import Base
from clubhouse.models.organization import Organization  # noqa: F401 - register model
from clubhouse.models.role_assignment import AdminRole  # noqa: F401 - register model
from clubhouse.models.team import Team  # noqa: F401 - register model
from clubhouse.observability import RequestLoggingMiddleware, configure_logging

logger = logging.getLogger("clubhouse")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    # Startup: bad secrets abort here, before any request is accepted
    configure_logging()
    settings.validate_secrets()
    get_cipher()
    # Auto-create tables for dev/test (production uses Alembic)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Clubhouse started")
    yield
    # Shutdown
    logger.info("Clubhouse shutting down")


async def _authorization_denied(request: Request, exc: AuthorizationDenied) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Insufficient permissions"},
    )


async def _credential_error(request: Request, exc: CredentialError) -> JSONResponse:
    logger.error(
        "credential operation failed path=%s error=%s", request.url.path, type(exc).__name__
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": CredentialError.public_message},
    )


async def _store_unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("store unavailable path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


async def _organization_not_found(request: Request, exc: OrganizationNotFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Organization not found"},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Clubhouse",
        description=(
            "Authorization and credential protection for multi-tenant "
            "sports-team management."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.add_middleware(RateLimitMiddleware, rpm=settings.rate_limit_rpm)

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(AuthorizationDenied, _authorization_denied)
    app.add_exception_handler(CredentialError, _credential_error)
    app.add_exception_handler(StoreUnavailable, _store_unavailable)
    app.add_exception_handler(OrganizationNotFound, _organization_not_found)

    # Include routers
    from clubhouse.api.health import router as health_router
    from clubhouse.api.v1.authz import router as authz_router
    from clubhouse.api.v1.credentials import router as credentials_router
    from clubhouse.api.v1.roles import router as roles_router

    app.include_router(health_router)
    app.include_router(authz_router)
    app.include_router(roles_router)
    app.include_router(credentials_router)

    return app


app = create_app()
