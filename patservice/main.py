"""
FastAPI application entrypoint for running the token API locally.
"""

from __future__ import annotations

from fastapi import FastAPI

from patservice.api.routes import router as api_router
from patservice.core.config import get_settings
from patservice.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Repository Access Token Service",
        version="0.1.0",
        description="Issue, list and revoke repository access tokens.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
