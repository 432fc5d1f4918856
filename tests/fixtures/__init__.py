"""Shared test fixtures and builders for pitchreplay tests."""

from .builders import (
    create_test_event,
    create_test_frame,
    create_test_frames,
    create_test_match,
    create_test_phase,
    write_opendata,
)

__all__ = [
    "create_test_event",
    "create_test_frame",
    "create_test_frames",
    "create_test_match",
    "create_test_phase",
    "write_opendata",
]
