"""Physical profiles from the season-level aggregates export.

The aggregates CSV has one row per player, position group and competition
split. Rows sharing a player and position group are merged: distances,
counts and minutes are summed; the peak values (PSV99 and meters per
minute) keep their maximum. Empty cells count as zero.

Each merged profile gets a 0..1 score per metric, min-max normalised over
the strictly positive values of that metric across all profiles:
- a metric with no positive values, or a single distinct one, scores 0.5
- values outside that range (zeros, missing cells) are clamped to 0.0
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..errors import MatchDataFormatError, MatchDataNotFoundError
from ..skillcorner.loaders import read_csv_records
from .common import age_from_birthday, round_half_up

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

# (label, column, decimals kept in raw_values)
PHYSICAL_METRICS: tuple[tuple[str, str, int], ...] = (
    ("Minutes", "minutes_full_all", 0),
    ("Total distance", "total_distance_full_all", 0),
    ("Sprint distance", "sprint_distance_full_all", 0),
    ("HSR distance", "hsr_distance_full_all", 0),
    ("Running distance", "running_distance_full_all", 0),
    ("HI distance", "hi_distance_full_all", 0),
    ("PSV99", "psv99", 1),
    ("High accel count", "highaccel_count_full_all", 0),
    ("High decel count", "highdecel_count_full_all", 0),
    ("Sprint count", "sprint_count_full_all", 0),
    ("HSR count", "hsr_count_full_all", 0),
    ("Meters per minute", "total_metersperminute_full_all", 1),
)

PEAK_COLUMNS = frozenset({"psv99", "total_metersperminute_full_all"})


@dataclass(frozen=True)
class PhysicalProfile:
    id: str
    player_id: str
    name: str
    surname: str
    age: int | None
    position: str | None
    scores: dict[str, float] = field(default_factory=dict)
    raw_values: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def merge_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """One record per (player_id, position_group), first-seen order."""
    merged: dict[tuple[str, Any], dict[str, Any]] = {}
    for row in rows:
        key = (str(row.get("player_id")), row.get("position_group"))
        existing = merged.get(key)
        if existing is None:
            record = dict(row)
            for _, column, _ in PHYSICAL_METRICS:
                record[column] = _number(row.get(column))
            merged[key] = record
            continue
        for _, column, _ in PHYSICAL_METRICS:
            value = _number(row.get(column))
            if column in PEAK_COLUMNS:
                existing[column] = max(existing[column], value)
            else:
                existing[column] += value
    return list(merged.values())


def metric_ranges(records: list[dict[str, Any]]) -> dict[str, tuple[float, float] | None]:
    ranges: dict[str, tuple[float, float] | None] = {}
    for _, column, _ in PHYSICAL_METRICS:
        positive = [r[column] for r in records if r[column] > 0]
        ranges[column] = (min(positive), max(positive)) if positive else None
    return ranges


def normalize(value: float, bounds: tuple[float, float] | None) -> float:
    if bounds is None:
        return NEUTRAL_SCORE
    low, high = bounds
    if high == low:
        return NEUTRAL_SCORE
    return min(1.0, max(0.0, (value - low) / (high - low)))


def build_profiles(
    rows: list[dict[str, Any]], today: date | None = None
) -> list[PhysicalProfile]:
    records = merge_rows(rows)
    ranges = metric_ranges(records)

    profiles = []
    for record in records:
        name, _, surname = str(record.get("player_name") or "").partition(" ")
        player_id = str(record.get("player_id"))
        position = record.get("position_group")
        profiles.append(
            PhysicalProfile(
                id=f"{player_id}_{position}",
                player_id=player_id,
                name=name,
                surname=surname,
                age=age_from_birthday(record.get("player_birthdate"), today),
                position=position,
                scores={
                    label: normalize(record[column], ranges[column])
                    for label, column, _ in PHYSICAL_METRICS
                },
                raw_values={
                    label: round_half_up(record[column], digits)
                    for label, column, digits in PHYSICAL_METRICS
                },
            )
        )
    return profiles


def load_physical_profiles(path: Path, today: date | None = None) -> list[PhysicalProfile]:
    """Read an aggregates CSV and build one normalised profile per player and position.

    Raises:
        MatchDataNotFoundError: If the file does not exist.
        MatchDataFormatError: If the file is not a readable CSV.
    """
    path = Path(path)
    if not path.is_file():
        raise MatchDataNotFoundError(str(path))

    rows = read_csv_records(path)
    if rows and "player_id" not in rows[0]:
        raise MatchDataFormatError(str(path), "missing player_id column")

    profiles = build_profiles(rows, today)
    logger.debug(f"Built {len(profiles)} physical profiles from {path.name}")
    return profiles
