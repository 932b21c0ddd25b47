"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from market_pulse.api.deps import AppState, api_key_middleware
from market_pulse.api.routes import router
from market_pulse.core.config import PulseConfig, load_config
from market_pulse.core.exceptions import (
    ConfigError,
    MarketPulseError,
    ProviderError,
    ResolutionError,
)

# First matching class wins
_STATUS_MAP: tuple[tuple[type[MarketPulseError], int], ...] = (
    (ConfigError, 400),
    (ResolutionError, 502),
    (ProviderError, 502),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    app.state.app_state = AppState.from_config(config)

    yield


def create_app(config: PulseConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    import market_pulse

    app = FastAPI(
        title="Market Pulse API",
        description="Session-aware equity quotes and multi-source token prices",
        version=market_pulse.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    # Optional API key middleware
    if config and config.api.api_key:
        app.middleware("http")(api_key_middleware)

    app.include_router(router, prefix="/api")

    @app.exception_handler(MarketPulseError)
    async def pulse_exception_handler(request: Request, exc: MarketPulseError):
        status = next(
            (code for cls, code in _STATUS_MAP if isinstance(exc, cls)),
            500,
        )
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app
