"""Helpers shared by the match statistics modules."""

from __future__ import annotations

import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Iterator

from ..errors import PitchReplayError
from ..skillcorner.loaders import list_match_ids, load_match
from ..skillcorner.types import MatchInfo

logger = logging.getLogger(__name__)

# Rates are expressed per 30 minutes of (out of) possession time
RATE_WINDOW_MINUTES = 30


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, so 31.25 -> 31.3 rather than 31.2."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def per_30(count: float, minutes: float, digits: int = 1) -> float:
    if not minutes:
        return 0.0
    return round_half_up(count / minutes * RATE_WINDOW_MINUTES, digits)


def percentage(part: float, whole: float, digits: int = 1) -> float:
    if not whole:
        return 0.0
    return round_half_up(part * 100 / whole, digits)


def age_from_birthday(birthday: str | None, today: date | None = None) -> int | None:
    """Age as the difference of calendar years, matching the published cards."""
    if not birthday:
        return None
    try:
        born = int(str(birthday)[:4])
    except ValueError:
        return None
    return (today or date.today()).year - born


def is_true(value: Any) -> bool:
    return value is True or (isinstance(value, str) and value.lower() == "true")


def iter_matches(
    data_dir: Path, limit: int | None = None
) -> Iterator[MatchInfo]:
    """Yield the metadata of every readable match under data/matches.

    Matches whose metadata is missing or malformed are logged and skipped.
    """
    match_ids = list_match_ids(data_dir)
    if limit is not None:
        match_ids = match_ids[:limit]
    for match_id in match_ids:
        try:
            yield load_match(match_id, data_dir)
        except PitchReplayError as e:
            logger.warning(f"Skipping match {match_id}: {e}")
