"""Tracking frame to pitch-view positions.

Raw tracking coordinates are relative to the attacking direction; the pitch
view wants them canonical. Player and ball samples are passed through the
coordinate transform using the attacking side supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..coords import transform_x, transform_y
from ..skillcorner.types import TrackingFrame


@dataclass(frozen=True)
class FieldPlayer:
    player_id: int
    x: float
    y: float
    is_detected: bool = True


@dataclass(frozen=True)
class FieldBall:
    x: float | None
    y: float | None
    z: float | None
    is_detected: bool


def players_to_field(
    frame: TrackingFrame | None, attacking_side: str | None
) -> list[FieldPlayer]:
    """Transformed positions of every positioned player in ``frame``.

    Players missing a coordinate are left out rather than drawn at 0.
    """
    if frame is None:
        return []

    return [
        FieldPlayer(
            player_id=p.player_id,
            x=transform_x(p.x, attacking_side),
            y=transform_y(p.y, attacking_side),
            is_detected=p.is_detected if p.is_detected is not None else True,
        )
        for p in frame.players
        if p.has_position
    ]


def ball_to_field(frame: TrackingFrame | None, attacking_side: str | None) -> FieldBall:
    """Transformed ball position; undetected axes stay None."""
    if frame is None:
        return FieldBall(x=None, y=None, z=None, is_detected=False)

    ball = frame.ball
    detected = ball.x is not None and ball.y is not None
    return FieldBall(
        x=transform_x(ball.x, attacking_side) if ball.x is not None else None,
        y=transform_y(ball.y, attacking_side) if ball.y is not None else None,
        z=ball.z,
        is_detected=bool(ball.is_detected) if ball.is_detected is not None else detected,
    )
