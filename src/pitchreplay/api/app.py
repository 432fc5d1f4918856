"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import PitchReplayConfig, default_config
from ..errors import (
    MatchDataFormatError,
    MatchDataNotFoundError,
    MatchNotLoadedError,
    PitchReplayError,
)
from ..session import MatchSession
from ..timeline.scheduler import Scheduler

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    MatchDataNotFoundError: 404,
    MatchNotLoadedError: 409,
    MatchDataFormatError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"Serving SkillCorner data from {app.state.session.data_dir}")

    yield

    # No tick may outlive the event loop
    app.state.session.close()


def create_app(
    config: PitchReplayConfig | None = None, scheduler: Scheduler | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Loaded configuration. Defaults apply when omitted.
        scheduler: Playback tick source for the session. Defaults to the
            server's event loop.
    """
    config = config or default_config()

    app = FastAPI(
        title="pitchreplay API",
        description="Match playback and phases of play for SkillCorner open data",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session = MatchSession(config.data_dir, config, scheduler=scheduler)

    # Configure CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",  # Vite dev server
            "http://localhost:3000",  # Alternative port
            "http://127.0.0.1:5173",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    _register_routes(app)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PitchReplayError)
    async def handle_pitchreplay_error(
        request: Request, exc: PitchReplayError
    ) -> JSONResponse:
        status_code = 500
        for error_type, code in _ERROR_STATUS.items():
            if isinstance(exc, error_type):
                status_code = code
                break

        if status_code == 500:
            logger.error(f"Unhandled pitchreplay error on {request.url.path}: {exc}")

        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "type": type(exc).__name__,
                    "message": str(exc),
                    "details": exc.details,
                }
            },
        )


def _register_routes(app: FastAPI) -> None:
    """Register all API routes."""
    from .routers import matches_router, session_router, stats_router

    app.include_router(matches_router)
    app.include_router(session_router)
    app.include_router(stats_router)

    @app.get("/")
    async def root():
        """API information."""
        return {
            "name": "pitchreplay API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint."""
        data_dir = request.app.state.config.data_dir
        session = request.app.state.session

        return {
            "status": "healthy",
            "version": __version__,
            "data_dir": str(data_dir),
            "data_available": (data_dir / "matches.json").is_file(),
            "loaded_match_id": session.match_id,
        }
