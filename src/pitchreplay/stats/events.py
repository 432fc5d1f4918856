"""Dynamic event listings and per-player event statistics.

Player event counts are normalised by the player's minutes out of
possession (OTIP) the way SkillCorner reports defensive actions:
``count / otip_minutes * 30``. Per subtype the breakdown also tracks

- mid block: the event starts or ends in the middle third (third id 2)
- high block: the event starts or ends in the attacking third (third id 3)
- force backward, affected line break and pressing-chain regains

Rates and percentages are rounded to 1 decimal.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from ..errors import PitchReplayError
from ..skillcorner.loaders import list_match_ids, load_dynamic_event_rows
from .common import is_true, iter_matches, per_30, percentage, round_half_up

logger = logging.getLogger(__name__)

MID_BLOCK_THIRD = 2
HIGH_BLOCK_THIRD = 3
UNKNOWN_SUBTYPE = "unknown"
NO_LINE_BREAK = frozenset({"None", "NA", ""})


def event_type_label(event_type: str) -> str:
    return event_type.replace("_", " ").upper()


def list_event_types(data_dir: Path, sample_matches: int = 5) -> list[dict[str, str]]:
    """Distinct event types found in the first ``sample_matches`` matches.

    Scanning every events file is slow, so only a sample is read. Matches
    whose events file is missing or unreadable are skipped.
    """
    found: set[str] = set()
    for match_id in list_match_ids(data_dir)[:sample_matches]:
        try:
            rows = load_dynamic_event_rows(match_id, data_dir)
        except PitchReplayError as e:
            logger.warning(f"Skipping events of match {match_id}: {e}")
            continue
        found.update(str(row["event_type"]) for row in rows if row.get("event_type"))

    return [{"id": t, "label": event_type_label(t)} for t in sorted(found)]


@dataclass(frozen=True)
class SubtypeBreakdown:
    subtype: str
    count: int
    percentage: float
    per30_otip: float
    mid_block_count: int
    high_block_count: int
    mid_block_per30_otip: float
    high_block_per30_otip: float
    force_backward_count: int
    force_backward_percentage: float
    affected_line_break_count: int
    affected_line_break_percentage: float
    regain_count: int
    regain_percentage: float


@dataclass(frozen=True)
class MatchEventCount:
    match_id: int
    events: int
    otip_minutes: float
    events_per30_otip: float


@dataclass(frozen=True)
class PlayerEventStats:
    player_id: int
    event_type: str
    total_events: int = 0
    total_otip_minutes: float = 0.0
    events_per30_otip: float = 0.0
    subtypes: list[SubtypeBreakdown] = field(default_factory=list)
    matches: list[MatchEventCount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _SubtypeCounter:
    count: int = 0
    mid_block: int = 0
    high_block: int = 0
    force_backward: int = 0
    affected_line_break: int = 0
    regain: int = 0


def _third(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _breaks_line(value: Any) -> bool:
    if value is None or value is False:
        return False
    return str(value) not in NO_LINE_BREAK


def _tally(counter: _SubtypeCounter, row: dict[str, Any]) -> None:
    thirds = {_third(row.get("third_id_start")), _third(row.get("third_id_end"))}
    counter.count += 1
    if MID_BLOCK_THIRD in thirds:
        counter.mid_block += 1
    if HIGH_BLOCK_THIRD in thirds:
        counter.high_block += 1
    if is_true(row.get("force_backward")):
        counter.force_backward += 1
    if _breaks_line(row.get("affected_line_break")):
        counter.affected_line_break += 1
    if row.get("pressing_chain_end_type") == "regain":
        counter.regain += 1


def _otip_minutes_by_match(data_dir: Path, player_id: int) -> dict[int, float]:
    minutes: dict[int, float] = {}
    for match in iter_matches(data_dir):
        for player in match.raw.get("players") or []:
            if str(player.get("id")) != str(player_id):
                continue
            total = (player.get("playing_time") or {}).get("total")
            if isinstance(total, dict) and total:
                minutes[match.id] = total.get("minutes_otip") or 0.0
            break
    return minutes


def player_event_stats(
    data_dir: Path, player_id: int | str, event_type: str
) -> PlayerEventStats:
    """Events of one type by one player over every match they played in."""
    player_id = int(player_id)
    otip_by_match = _otip_minutes_by_match(data_dir, player_id)

    counters: dict[str, _SubtypeCounter] = {}
    matches = []
    total_events = 0
    total_otip = 0.0
    for match_id, otip in otip_by_match.items():
        try:
            rows = load_dynamic_event_rows(match_id, data_dir)
        except PitchReplayError as e:
            logger.warning(f"Skipping events of match {match_id}: {e}")
            continue

        match_events = 0
        for row in rows:
            if row.get("event_type") != event_type or str(row.get("player_id")) != str(player_id):
                continue
            subtype = str(row.get("event_subtype") or UNKNOWN_SUBTYPE)
            _tally(counters.setdefault(subtype, _SubtypeCounter()), row)
            match_events += 1

        total_events += match_events
        total_otip += otip
        matches.append(
            MatchEventCount(
                match_id=match_id,
                events=match_events,
                otip_minutes=round_half_up(otip, 1),
                events_per30_otip=per_30(match_events, otip),
            )
        )

    subtypes = [
        SubtypeBreakdown(
            subtype=subtype,
            count=c.count,
            percentage=percentage(c.count, total_events),
            per30_otip=per_30(c.count, total_otip),
            mid_block_count=c.mid_block,
            high_block_count=c.high_block,
            mid_block_per30_otip=per_30(c.mid_block, total_otip),
            high_block_per30_otip=per_30(c.high_block, total_otip),
            force_backward_count=c.force_backward,
            force_backward_percentage=percentage(c.force_backward, c.count),
            affected_line_break_count=c.affected_line_break,
            affected_line_break_percentage=percentage(c.affected_line_break, c.count),
            regain_count=c.regain,
            regain_percentage=percentage(c.regain, c.count),
        )
        for subtype, c in counters.items()
    ]
    subtypes.sort(key=lambda s: s.count, reverse=True)

    return PlayerEventStats(
        player_id=player_id,
        event_type=event_type,
        total_events=total_events,
        total_otip_minutes=round_half_up(total_otip, 1),
        events_per30_otip=per_30(total_events, total_otip),
        subtypes=subtypes,
        matches=matches,
    )
