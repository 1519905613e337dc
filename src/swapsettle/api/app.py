"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swapsettle.config import get_settings
from swapsettle.errors import (
    AmountTooSmall,
    ConfigurationError,
    InsufficientLiquidity,
    InvalidRequest,
    InvalidSecretsCount,
    RouteUnavailable,
    SubmissionFailed,
    SwapError,
    TokenUnsupported,
    VenueUnavailable,
)
from swapsettle.swap_engine.engine import SwapEngine, create_engine

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
_ERROR_STATUS: list[tuple[type[SwapError], int]] = [
    (InvalidRequest, 400),
    (AmountTooSmall, 400),
    (TokenUnsupported, 400),
    (RouteUnavailable, 400),
    (InsufficientLiquidity, 409),
    (SubmissionFailed, 422),
    (InvalidSecretsCount, 502),
    (VenueUnavailable, 502),
    (ConfigurationError, 503),
]


def status_for(error: SwapError) -> int:
    for error_cls, status_code in _ERROR_STATUS:
        if isinstance(error, error_cls):
            return status_code
    return 500


async def swap_error_handler(request: Request, exc: SwapError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {status_code} {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.user_message, "code": type(exc).__name__},
    )


def create_app(engine: Optional[SwapEngine] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        engine: Pre-built engine (tests); built from settings at startup otherwise
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        app.state.engine = engine or create_engine(settings)
        yield
        # Shutdown
        await app.state.engine.shutdown()

    app = FastAPI(
        title="Swapsettle API",
        description="Swap quote and settlement orchestration",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SwapError, swap_error_handler)

    # Register routes
    from swapsettle.api.routes import health, orders

    app.include_router(health.router, tags=["Health"])
    app.include_router(orders.router, prefix="/api/v1", tags=["Swaps"])

    return app
