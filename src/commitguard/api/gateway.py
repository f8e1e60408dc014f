"""
API Gateway -- FastAPI application factory.

Creates the FastAPI app around one CommitmentEnforcer instance. This is
the entrypoint for uvicorn:

    uvicorn commitguard.api.gateway:create_app --factory --host 0.0.0.0 --port 8000

Configuration comes from the environment (see enforcement/config.py).
CORS origins: CORS_ORIGINS=comma,separated (default: localhost only).
"""

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..enforcement import CommitmentEnforcer, EnforcerConfig, configure_logging
from .routes import enforcement, health

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://localhost:8080",
]


def _get_cors_origins() -> list[str]:
    """Load CORS origins from environment or use safe defaults."""
    origins_env = os.environ.get("CORS_ORIGINS", "")
    if origins_env.strip():
        return [o.strip() for o in origins_env.split(",") if o.strip()]
    return DEFAULT_CORS_ORIGINS


def create_app(enforcer: CommitmentEnforcer | None = None) -> FastAPI:
    """
    Application factory -- creates and configures the FastAPI app.

    Args:
        enforcer: Pre-built enforcer (built from environment config if None).
    """
    if enforcer is None:
        configure_logging()
        enforcer = CommitmentEnforcer.from_config(EnforcerConfig.from_env())

    application = FastAPI(
        title="commitguard API",
        description="Response-policy enforcement for generated text",
        version=__version__,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    application.state.enforcer = enforcer
    application.state.start_time = time.time()

    application.include_router(health.router, tags=["Health"])
    application.include_router(enforcement.router, prefix="/api/v1", tags=["Enforcement"])

    logger.info(f"[Gateway] API gateway initialized ({len(enforcer.registry)} profiles)")
    return application
