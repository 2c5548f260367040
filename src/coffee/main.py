# src/coffee/main.py
"""Main entry point for the Coffee application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from coffee import __version__
from coffee.api.pages import router as pages_router
from coffee.api.v1 import (
    admin_router,
    agreement_router,
    alerts_router,
    auth_router,
    comments_router,
    debug_router,
    notifications_router,
    posts_router,
    profile_router,
    search_router,
    system_router,
    users_router,
    votes_router,
)
from coffee.core.errors import AccessRedirect, CoffeeError
from coffee.core.settings import settings
from coffee.db.session import create_tables

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


async def handle_coffee_error(request: Request, exc: CoffeeError) -> JSONResponse:
    """Render a domain error as ``{"detail", "code"}``."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def handle_access_redirect(request: Request, exc: AccessRedirect) -> Response:
    """Send page requests elsewhere and tell API callers where they belong."""
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            status_code=(
                status.HTTP_403_FORBIDDEN if exc.authenticated else status.HTTP_401_UNAUTHORIZED
            ),
            content={"detail": exc.reason, "redirect_to": exc.location},
        )
    return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)


def create_app() -> FastAPI:
    """Build the application; debug routes are only mounted when ``DEBUG`` is on."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    application = FastAPI(
        title=f"{settings.app_name} API",
        description="Community posts about people, gated by admin-approved identity verification",
        version=__version__,
    )

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip middleware for compression
    application.add_middleware(GZipMiddleware)

    application.add_exception_handler(CoffeeError, handle_coffee_error)
    application.add_exception_handler(AccessRedirect, handle_access_redirect)

    # Include API routers
    for router in (
        auth_router,
        agreement_router,
        posts_router,
        votes_router,
        comments_router,
        search_router,
        alerts_router,
        notifications_router,
        profile_router,
        users_router,
        admin_router,
        system_router,
    ):
        application.include_router(router, prefix=API_PREFIX)
    if settings.debug:
        logger.warning("DEBUG is enabled; diagnostic endpoints are mounted")
        application.include_router(debug_router, prefix=API_PREFIX)

    application.include_router(pages_router)

    @application.on_event("startup")
    async def on_startup() -> None:
        if settings.create_tables_on_startup:
            create_tables()

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": f"{settings.app_name} API",
            "version": __version__,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("coffee.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
