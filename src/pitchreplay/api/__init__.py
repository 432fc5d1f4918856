"""FastAPI application for match playback."""

from .app import create_app

__all__ = ["create_app"]
