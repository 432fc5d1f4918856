"""Phase-of-play resolution and display geometry.

Given a frame number, find the active phase of play and derive what the
pitch view draws for it: the span of the ball's movement, the passes played
inside the phase and a sampled ball trail.

Two coordinate bases are in play and must stay separate:

- Tracking coordinates are relative to the phase's attacking side and are
  transformed with ``phase.attacking_side``.
- Event coordinates are pre-normalized so the acting team always attacks to
  the right; they are transformed with each event's own
  ``attacking_side_id`` (2 means the team actually attacks to the left).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

from ..coords import RIGHT_TO_LEFT, LEFT_TO_RIGHT, transform_point, transform_x
from ..skillcorner.types import DynamicEvent, MatchInfo, PhaseOfPlay, TrackingFrame
from .frame_index import FrameIndex

DEFAULT_TRACE_SAMPLE_EVERY = 5

HOME_FALLBACK_COLOR = "#ff4444"
AWAY_FALLBACK_COLOR = "#4444ff"
NEUTRAL_POSSESSION_COLOR = "rgba(255, 255, 255, 0.6)"

PASS_EVENT_TYPE = "player_possession"
PASS_END_TYPE = "pass"

# attacking_side_id of an event whose team attacks right-to-left
EVENT_SIDE_RIGHT_TO_LEFT = 2

# Stand-in for a phase extent the CSV leaves empty: the halfway line
MISSING_EXTENT_X = 0.0


@dataclass(frozen=True)
class BallRange:
    x_start: float
    x_end: float


@dataclass(frozen=True)
class PassData:
    x_start: float
    y_start: float
    x_end: float
    y_end: float
    frame_start: int


@dataclass(frozen=True)
class BallTracePoint:
    x: float
    y: float
    frame: int


@dataclass(frozen=True)
class PhaseData:
    """Display geometry of one phase, rebuilt on every request."""

    x_start: float
    x_end: float
    phase_name: str | None
    team_color: str
    current_frame: int
    passes: list[PassData] = field(default_factory=list)
    ball_trace: list[BallTracePoint] = field(default_factory=list)
    y_start: float = 0.0
    y_end: float = 0.0
    time_start: str | None = None
    time_end: str | None = None
    frame_start: int | None = None
    frame_end: int | None = None
    phase_index: int | None = None
    team_in_possession_id: int | None = None
    attacking_side: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


TrackingSource = Sequence[TrackingFrame] | FrameIndex


def find_phase_at_frame(
    phases: Sequence[PhaseOfPlay], frame_number: int
) -> PhaseOfPlay | None:
    """First phase in list order whose [frame_start, frame_end] holds frame_number.

    Phases are expected not to overlap. If they do, the first listed phase
    wins; no attempt is made to detect or repair the overlap.
    """
    for phase in phases:
        if phase.contains(frame_number):
            return phase
    return None


def _frames_in_phase(
    tracking: TrackingSource, phase: PhaseOfPlay
) -> Sequence[TrackingFrame]:
    if isinstance(tracking, FrameIndex):
        return tracking.frames_between(phase.frame_start, phase.frame_end)
    return [f for f in tracking if phase.frame_start <= f.frame <= phase.frame_end]


def compute_ball_movement_range(
    tracking: TrackingSource, phase: PhaseOfPlay, attacking_side: str
) -> BallRange:
    """Min/max transformed ball x over the phase's frames.

    Falls back to the phase's own recorded x_start/x_end when no frame in
    the window has a ball x. An extent the phase does not record is taken
    as the halfway line (:data:`MISSING_EXTENT_X`).
    """
    xs = [
        transform_x(frame.ball.x, attacking_side)
        for frame in _frames_in_phase(tracking, phase)
        if frame.ball.x is not None
    ]
    if not xs:
        return BallRange(
            x_start=transform_x(_recorded_extent(phase.x_start), attacking_side),
            x_end=transform_x(_recorded_extent(phase.x_end), attacking_side),
        )
    return BallRange(x_start=min(xs), x_end=max(xs))


def _recorded_extent(value: float | None) -> float:
    return MISSING_EXTENT_X if value is None else value


def _event_side(event: DynamicEvent) -> str:
    if event.attacking_side_id == EVENT_SIDE_RIGHT_TO_LEFT:
        return RIGHT_TO_LEFT
    return LEFT_TO_RIGHT


def is_completed_pass(event: DynamicEvent) -> bool:
    return (
        event.event_type == PASS_EVENT_TYPE
        and event.end_type == PASS_END_TYPE
        and event.has_coordinates
    )


def extract_passes_in_phase(
    events: Sequence[DynamicEvent], phase: PhaseOfPlay
) -> list[PassData]:
    """Completed passes whose frame range lies inside the phase, in event order."""
    passes = []
    for event in events:
        if event.frame_start < phase.frame_start or event.frame_end > phase.frame_end:
            continue
        if not is_completed_pass(event):
            continue

        side = _event_side(event)
        start = transform_point(event.x_start, event.y_start, side)
        end = transform_point(event.x_end, event.y_end, side)
        passes.append(
            PassData(
                x_start=start.x,
                y_start=start.y,
                x_end=end.x,
                y_end=end.y,
                frame_start=event.frame_start,
            )
        )
    return passes


def sample_ball_trajectory(
    tracking: TrackingSource,
    phase: PhaseOfPlay,
    attacking_side: str,
    sample_every: int = DEFAULT_TRACE_SAMPLE_EVERY,
) -> list[BallTracePoint]:
    """Ball positions on every Nth frame number of the phase.

    Sampling keys on ``frame % sample_every`` rather than list position so the
    trail stays put when frames are missing.
    """
    sample_every = max(1, sample_every)
    trace = []
    for frame in _frames_in_phase(tracking, phase):
        if frame.frame % sample_every != 0:
            continue
        if frame.ball.x is None or frame.ball.y is None:
            continue
        point = transform_point(frame.ball.x, frame.ball.y, attacking_side)
        trace.append(BallTracePoint(x=point.x, y=point.y, frame=frame.frame))
    return trace


def resolve_possession_color(phase: PhaseOfPlay, match: MatchInfo | None) -> str:
    """Jersey color of the team in possession, neutral if neither side matches."""
    if match is None:
        return NEUTRAL_POSSESSION_COLOR

    home_color = (
        match.home_team_kit and match.home_team_kit.jersey_color
    ) or HOME_FALLBACK_COLOR
    away_color = (
        match.away_team_kit and match.away_team_kit.jersey_color
    ) or AWAY_FALLBACK_COLOR

    if phase.team_in_possession_id == match.home_team.id:
        return home_color
    if phase.team_in_possession_id == match.away_team.id:
        return away_color
    return NEUTRAL_POSSESSION_COLOR


def build_phase_data(
    phase: PhaseOfPlay | None,
    events: Sequence[DynamicEvent],
    tracking: TrackingSource,
    match: MatchInfo | None,
    current_frame_number: int,
    sample_every: int = DEFAULT_TRACE_SAMPLE_EVERY,
) -> PhaseData | None:
    """Assemble the PhaseData for ``phase``, or None when there is no phase.

    Pure: nothing is cached or mutated, so it is safe to call on every tick.
    """
    if phase is None:
        return None

    attacking_side = phase.attacking_side
    ball_range = compute_ball_movement_range(tracking, phase, attacking_side)

    return PhaseData(
        x_start=ball_range.x_start,
        x_end=ball_range.x_end,
        phase_name=phase.phase_type,
        team_color=resolve_possession_color(phase, match),
        current_frame=current_frame_number,
        passes=extract_passes_in_phase(events, phase),
        ball_trace=sample_ball_trajectory(
            tracking, phase, attacking_side, sample_every=sample_every
        ),
        time_start=phase.time_start,
        time_end=phase.time_end,
        frame_start=phase.frame_start,
        frame_end=phase.frame_end,
        phase_index=phase.index,
        team_in_possession_id=phase.team_in_possession_id,
        attacking_side=attacking_side,
    )
