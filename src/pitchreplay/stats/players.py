"""Per-player totals across every match in the checkout.

Each match metadata file lists its squad with a ``playing_time`` block.
Players whose ``playing_time.total`` is empty were unused substitutes and
are not counted. Identity (names, age, team, position) is taken from the
first match a player appears in; later matches only add to the counters.

Rounding:
- minutes and average minutes per match: 1 decimal
- goals per match: 2 decimals
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..skillcorner.types import MatchInfo
from .common import age_from_birthday, iter_matches, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class PlayerMatchStats:
    player_id: int
    first_name: str | None
    last_name: str | None
    short_name: str | None
    card_name: str
    card_surname: str
    age: int | None
    team_name: str
    position: str | None
    matches_played: int = 0
    total_minutes_played: float = 0.0
    total_minutes_tip: float = 0.0
    total_minutes_otip: float = 0.0
    total_goals: int = 0
    total_own_goals: int = 0
    total_yellow_cards: int = 0
    total_red_cards: int = 0
    match_ids: list[int] = field(default_factory=list)

    @property
    def average_minutes_per_match(self) -> float:
        if not self.matches_played:
            return 0.0
        return round_half_up(self.total_minutes_played / self.matches_played, 1)

    @property
    def goals_per_match(self) -> float:
        if not self.matches_played:
            return 0.0
        return round_half_up(self.total_goals / self.matches_played, 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "short_name": self.short_name,
            "card_name": self.card_name,
            "card_surname": self.card_surname,
            "age": self.age,
            "team_name": self.team_name,
            "position": self.position,
            "matches_played": self.matches_played,
            "total_minutes_played": round_half_up(self.total_minutes_played, 1),
            "total_minutes_tip": round_half_up(self.total_minutes_tip, 1),
            "total_minutes_otip": round_half_up(self.total_minutes_otip, 1),
            "total_goals": self.total_goals,
            "total_own_goals": self.total_own_goals,
            "total_yellow_cards": self.total_yellow_cards,
            "total_red_cards": self.total_red_cards,
            "match_ids": list(self.match_ids),
            "average_minutes_per_match": self.average_minutes_per_match,
            "goals_per_match": self.goals_per_match,
        }


def split_card_name(short_name: str | None) -> tuple[str, str]:
    """("P.", "Smith") from "P. Smith": the last word is the card surname."""
    parts = (short_name or "").split()
    if not parts:
        return "", ""
    return " ".join(parts[:-1]), parts[-1]


def _count(value: Any) -> int:
    return int(value or 0)


def _team_name(player: dict[str, Any], match: MatchInfo) -> str:
    if player.get("team_id") == match.home_team.id:
        return match.home_team.name
    return match.away_team.name


def _new_stats(player: dict[str, Any], match: MatchInfo, today: date | None) -> PlayerMatchStats:
    card_name, card_surname = split_card_name(player.get("short_name"))
    return PlayerMatchStats(
        player_id=int(player["id"]),
        first_name=player.get("first_name"),
        last_name=player.get("last_name"),
        short_name=player.get("short_name"),
        card_name=card_name,
        card_surname=card_surname,
        age=age_from_birthday(player.get("birthday"), today),
        team_name=_team_name(player, match),
        position=(player.get("player_role") or {}).get("position_group"),
    )


def add_match(
    stats_by_player: dict[int, PlayerMatchStats],
    match: MatchInfo,
    today: date | None = None,
) -> None:
    """Fold one match's squad into the running per-player totals."""
    for player in match.raw.get("players") or []:
        total = (player.get("playing_time") or {}).get("total")
        if not total:
            continue

        player_id = int(player["id"])
        stats = stats_by_player.get(player_id)
        if stats is None:
            stats = _new_stats(player, match, today)
            stats_by_player[player_id] = stats

        stats.matches_played += 1
        stats.total_minutes_played += total.get("minutes_played") or 0.0
        stats.total_minutes_tip += total.get("minutes_tip") or 0.0
        stats.total_minutes_otip += total.get("minutes_otip") or 0.0
        stats.total_goals += _count(player.get("goal"))
        stats.total_own_goals += _count(player.get("own_goal"))
        stats.total_yellow_cards += _count(player.get("yellow_card"))
        stats.total_red_cards += _count(player.get("red_card"))
        stats.match_ids.append(match.id)


def aggregate_player_match_stats(
    data_dir: Path, today: date | None = None
) -> list[PlayerMatchStats]:
    """Totals for every player who took the field, in first-seen order."""
    stats_by_player: dict[int, PlayerMatchStats] = {}
    for match in iter_matches(data_dir):
        try:
            add_match(stats_by_player, match, today)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping squad of match {match.id}: {e!r}")

    logger.debug(f"Aggregated match stats for {len(stats_by_player)} players")
    return list(stats_by_player.values())
