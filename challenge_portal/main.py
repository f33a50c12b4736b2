"""FastAPI application factory.

Configures CORS, structured logging, error rendering, lifespan wiring of
the service bundle, and router registration.

Run with ``uvicorn challenge_portal.main:create_app --factory``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from challenge_portal.core.config import Settings
from challenge_portal.core.errors import ChallengePortalError
from challenge_portal.core.logging import setup_logging
from challenge_portal.dependencies import Services, build_services
from challenge_portal.routers import candidates, downloads, health, releases, webhooks

logger = logging.getLogger(__name__)


def _parse_origins(raw: str) -> list[str]:
    raw = raw.strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


async def _challenge_error_handler(request: Request, exc: ChallengePortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            extra={
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "error_message": exc.message,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies as 400 ``{"error": ...}``."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.warning(
        "request_validation_failed",
        extra={"path": request.url.path, "error_message": message},
    )
    return JSONResponse(status_code=400, content={"error": message})


def create_app(services: Services | None = None) -> FastAPI:
    """Build the application.

    Without *services*, settings are read from the environment and all
    clients are constructed during start-up.
    """
    settings = services.settings if services is not None else Settings()  # type: ignore[call-arg]

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.LOG_LEVEL)
        if getattr(application.state, "services", None) is None:
            application.state.services = build_services(settings)
        logger.info(
            "Application starting up",
            extra={
                "github_repo": f"{settings.GITHUB_REPO_OWNER}/{settings.GITHUB_REPO_NAME}",
                "webhook_secret_configured": bool(settings.GITHUB_WEBHOOK_SECRET),
            },
        )
        yield
        logger.info("Application shutting down")

    application = FastAPI(
        title="Challenge Portal API",
        description="Invite candidates and serve the take-home challenge from the latest GitHub release",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.services = services

    # -----------------------------------------------------------------------
    # CORS Configuration
    # -----------------------------------------------------------------------
    application.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_origins(settings.ALLOWED_ORIGINS),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Error rendering
    # -----------------------------------------------------------------------
    application.add_exception_handler(ChallengePortalError, _challenge_error_handler)
    application.add_exception_handler(RequestValidationError, _request_validation_handler)

    # -----------------------------------------------------------------------
    # Router Registration
    # -----------------------------------------------------------------------
    application.include_router(health.router, tags=["Health"])
    application.include_router(candidates.router, tags=["Candidates"])
    application.include_router(downloads.router, tags=["Downloads"])
    application.include_router(releases.router, tags=["Releases"])
    application.include_router(webhooks.router, tags=["Webhooks"])

    return application
