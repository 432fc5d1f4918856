"""Attacking-direction coordinate normalization.

SkillCorner coordinates are centred on the pitch (metres, x along the length,
y along the width) and expressed relative to an attacking direction. Display
coordinates are canonical: a "right-to-left" point is mirrored through the
centre spot by negating both axes.
"""

from __future__ import annotations

from typing import NamedTuple

LEFT_TO_RIGHT = "left-to-right"
RIGHT_TO_LEFT = "right-to-left"

# Full token plus the short alias used by some sources
_FLIPPED_SIDES = frozenset({RIGHT_TO_LEFT, "right"})


class Point(NamedTuple):
    """2D pitch point in metres."""

    x: float
    y: float


def should_flip(attacking_side: str | None) -> bool:
    """Return True when coordinates for this side must be mirrored."""
    return attacking_side in _FLIPPED_SIDES


def transform_x(x: float, attacking_side: str | None) -> float:
    return -x if should_flip(attacking_side) else x


def transform_y(y: float, attacking_side: str | None) -> float:
    return -y if should_flip(attacking_side) else y


def transform_point(x: float, y: float, attacking_side: str | None) -> Point:
    """Transform a raw point into the canonical display frame.

    Args:
        x: Raw x coordinate
        y: Raw y coordinate
        attacking_side: "left-to-right", "right-to-left" or a short alias

    Returns:
        Point with both axes negated for right-to-left, unchanged otherwise
    """
    return Point(transform_x(x, attacking_side), transform_y(y, attacking_side))
