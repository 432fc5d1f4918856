"""Team performance averaged over matches, with head-to-head splits.

Per match and team (from the metadata and the dynamic events CSV):
- possession: team minutes in possession (TIP) over both teams' TIP, in %
- pass_accuracy: share of ``player_possession`` events ending in a pass
  whose ``pass_outcome`` is successful, in %
- pass_volume: number of those successful passes
- total_xthreat: summed xthreat of passing options and off-ball runs
- obr_per_min: off-ball runs per minute of TIP
- lb_attempts: events flagged ``last_line_break``; lb_success_rate is the
  share of them with a successful pass outcome, in %
- pressing_actions: ``pressing`` and ``counter_press`` engagements;
  regain_rate is the share of them ending a pressing chain with a regain

Team figures are plain means of the per-match values. Matches whose
metadata or events cannot be read are skipped.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import PitchReplayError
from ..skillcorner.loaders import load_dynamic_event_rows
from ..skillcorner.types import MatchInfo
from .common import is_true, iter_matches, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_TEAM_COLOR = "#FFFFFF"
XTHREAT_EVENT_TYPES = frozenset({"passing_option", "off_ball_run"})
PRESSING_SUBTYPES = frozenset({"pressing", "counter_press"})

# (metric, decimals in the averaged output)
TEAM_METRICS: tuple[tuple[str, int], ...] = (
    ("possession", 1),
    ("pass_accuracy", 1),
    ("pass_volume", 1),
    ("total_xthreat", 2),
    ("obr_per_min", 2),
    ("lb_attempts", 1),
    ("lb_success_rate", 1),
    ("pressing_actions", 1),
    ("regain_rate", 1),
)


def _mean(values: list[float], digits: int) -> float:
    if not values:
        return 0.0
    return round_half_up(sum(values) / len(values), digits)


def _averages(samples: list[dict[str, float]]) -> dict[str, float]:
    return {
        name: _mean([s[name] for s in samples], digits) for name, digits in TEAM_METRICS
    }


def _xthreat(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def team_match_metrics(
    team_id: int, tip: float, total_tip: float, rows: list[dict[str, Any]]
) -> dict[str, float]:
    """Unrounded metrics for one team in one match."""
    own = [r for r in rows if str(r.get("team_id")) == str(team_id)]

    passes = [
        r for r in own
        if r.get("event_type") == "player_possession" and r.get("end_type") == "pass"
    ]
    successful = sum(1 for r in passes if r.get("pass_outcome") == "successful")

    off_ball_runs = sum(1 for r in own if r.get("event_type") == "off_ball_run")
    line_breaks = [r for r in own if is_true(r.get("last_line_break"))]
    pressing = [r for r in own if r.get("event_subtype") in PRESSING_SUBTYPES]

    return {
        "possession": tip * 100 / total_tip if total_tip else 0.0,
        "pass_accuracy": successful * 100 / len(passes) if passes else 0.0,
        "pass_volume": float(successful),
        "total_xthreat": sum(
            _xthreat(r.get("xthreat")) for r in own if r.get("event_type") in XTHREAT_EVENT_TYPES
        ),
        "obr_per_min": off_ball_runs / tip if tip else 0.0,
        "lb_attempts": float(len(line_breaks)),
        "lb_success_rate": (
            sum(1 for r in line_breaks if r.get("pass_outcome") == "successful")
            * 100 / len(line_breaks)
            if line_breaks
            else 0.0
        ),
        "pressing_actions": float(len(pressing)),
        "regain_rate": (
            sum(1 for r in pressing if r.get("pressing_chain_end_type") == "regain")
            * 100 / len(pressing)
            if pressing
            else 0.0
        ),
    }


@dataclass
class TeamPerformance:
    team_id: int
    team_name: str
    team_color: str
    samples: list[dict[str, float]] = field(default_factory=list)
    by_opponent: dict[int, list[dict[str, float]]] = field(
        default_factory=lambda: defaultdict(list)
    )

    @property
    def matches_played(self) -> int:
        return len(self.samples)

    def averages(self) -> dict[str, float]:
        return _averages(self.samples)

    def matchups(self) -> list[dict[str, Any]]:
        return [
            {"opponent_id": opponent_id, "matches": len(samples), **_averages(samples)}
            for opponent_id, samples in self.by_opponent.items()
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "team_color": self.team_color,
            "matches_played": self.matches_played,
            **{f"avg_{name}": value for name, value in self.averages().items()},
            "matchups": self.matchups(),
        }


def _minutes_tip(match: MatchInfo, side: str) -> float:
    playing_time = match.raw.get(f"{side}_team_playing_time") or {}
    return playing_time.get("minutes_tip") or 0.0


def _kit_color(match: MatchInfo, side: str) -> str:
    kit = match.home_team_kit if side == "home" else match.away_team_kit
    return (kit.jersey_color if kit else None) or DEFAULT_TEAM_COLOR


def compute_team_performance(data_dir: Path) -> list[TeamPerformance]:
    """Per-team averages and matchups, most matches played first."""
    teams: dict[int, TeamPerformance] = {}

    for match in iter_matches(data_dir):
        try:
            rows = load_dynamic_event_rows(match.id, data_dir)
        except PitchReplayError as e:
            logger.warning(f"Skipping match {match.id}: {e}")
            continue

        home_tip = _minutes_tip(match, "home")
        away_tip = _minutes_tip(match, "away")
        sides = (
            ("home", match.home_team, home_tip, match.away_team.id),
            ("away", match.away_team, away_tip, match.home_team.id),
        )
        for side, team, tip, opponent_id in sides:
            performance = teams.get(team.id)
            if performance is None:
                performance = TeamPerformance(
                    team_id=team.id,
                    team_name=team.name,
                    team_color=_kit_color(match, side),
                )
                teams[team.id] = performance

            metrics = team_match_metrics(team.id, tip, home_tip + away_tip, rows)
            performance.samples.append(metrics)
            performance.by_opponent[opponent_id].append(metrics)

    result = sorted(teams.values(), key=lambda t: t.matches_played, reverse=True)
    logger.debug(f"Computed performance for {len(result)} teams")
    return result
