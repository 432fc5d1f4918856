"""Temporal playback and phase-of-play reconstruction.

This package drives the match timeline:
- Frame index: binary-search lookups by frame number
- Phases: active phase of play and its display geometry
- Playback: play/pause/speed/step/jump clock over the frame index
- Navigator: frame-number navigation helpers
- Field adapter: canonical player and ball positions for a frame

Sparse data (missing ball, undetected players, frame gaps) never raises;
every lookup degrades to a defined fallback.

Example:
    from pitchreplay.timeline import FrameIndex, find_phase_at_frame, build_phase_data

    index = FrameIndex(tracking)
    phase = find_phase_at_frame(phases, 15000)
    phase_data = build_phase_data(phase, events, index, match, 15000)
"""

from .field_adapter import FieldBall, FieldPlayer, ball_to_field, players_to_field
from .frame_index import FrameIndex, first_valid_frame_index, lower_bound
from .navigator import TimelineNavigator
from .phases import (
    BallRange,
    BallTracePoint,
    PassData,
    PhaseData,
    build_phase_data,
    compute_ball_movement_range,
    extract_passes_in_phase,
    find_phase_at_frame,
    resolve_possession_color,
    sample_ball_trajectory,
)
from .playback import PlaybackController, PlaybackState
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    # Frame index
    "FrameIndex",
    "lower_bound",
    "first_valid_frame_index",
    # Phases
    "BallRange",
    "BallTracePoint",
    "PassData",
    "PhaseData",
    "find_phase_at_frame",
    "compute_ball_movement_range",
    "extract_passes_in_phase",
    "sample_ball_trajectory",
    "resolve_possession_color",
    "build_phase_data",
    # Playback
    "PlaybackController",
    "PlaybackState",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    # Navigation
    "TimelineNavigator",
    # Field adapter
    "FieldPlayer",
    "FieldBall",
    "players_to_field",
    "ball_to_field",
]
