"""
CodeVault Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn codevault.main:app) and by the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware: Request ID → Logging → GZip → CORS       │
    │                                                       │
    │  Routes:                                              │
    │    /users        /codes (gated)    /auth    /health   │
    │                                                       │
    │  app.state:                                           │
    │    settings, token_codec, user_service, code_service  │
    │                                                       │
    │  Exception Handlers (error_handlers.py):              │
    │    401 │ 403 │ 400 │ 404 │ 409 │ 500                  │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log readiness
    Shutdown: dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from codevault import __version__
from codevault.config import Settings, settings as default_settings
from codevault.database import dispose_engine
from codevault.error_handlers import register_exception_handlers
from codevault.middleware.logging import RequestLoggingMiddleware
from codevault.middleware.request_id import RequestIDMiddleware
from codevault.routes import auth, codes, health, users
from codevault.services.code_service import CodeService
from codevault.services.token_service import build_token_codec
from codevault.services.user_service import UserService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before anything else logs.
    Format:  2024-01-15T12:00:00 [INFO] codevault.access: GET /codes 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # These log every statement / connection at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("CodeVault Backend %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Not fatal: the server still answers health checks
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info(
        "Token TTL: %ds | query tokens: %s | cascade user delete: %s",
        config.token_ttl_seconds,
        "on" if config.allow_query_token else "off",
        "on" if config.cascade_user_delete else "off",
    )
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CodeVault Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to build the app from. Defaults to the process-wide
                settings; tests pass their own to change secrets or policies.

    The signing secret reaches the token codec here and nowhere else; the
    auth gate finds the codec on app.state.
    """
    config = config or default_settings

    app = FastAPI(
        title="CodeVault API",
        description=(
            "Users and their code snippets, behind bearer-token authorization "
            "with per-owner access control."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared, read-only state ───────────────────────────────────────────
    app.state.settings = config
    app.state.token_codec = build_token_codec(config)
    app.state.user_service = UserService(
        required_fields=config.user_required_fields_list,
        cascade_delete=config.cascade_user_delete,
    )
    app.state.code_service = CodeService(required_fields=config.code_required_fields_list)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(codes.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


# uvicorn expects `codevault.main:app` to be importable
app = create_app()
