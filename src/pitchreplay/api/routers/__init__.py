"""API routers for pitchreplay."""

from .matches import router as matches_router
from .session import router as session_router
from .stats import router as stats_router

__all__ = ["matches_router", "session_router", "stats_router"]
