"""Season statistics endpoints.

Every request rescans the checkout; nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from ...stats import (
    aggregate_player_match_stats,
    compute_team_performance,
    list_event_types,
    load_physical_profiles,
    player_event_stats,
)
from ..dependencies import AppConfig

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/players")
def get_player_match_stats(config: AppConfig) -> list[dict[str, Any]]:
    """Minutes, goals and cards per player across all matches."""
    return [s.to_dict() for s in aggregate_player_match_stats(config.data_dir)]


@router.get("/players/physical")
def get_physical_profiles(config: AppConfig) -> list[dict[str, Any]]:
    """Normalised physical scores from the season aggregates CSV."""
    return [p.to_dict() for p in load_physical_profiles(config.physical_aggregates_path)]


@router.get("/players/{player_id}/events/{event_type}")
def get_player_events(
    player_id: int, event_type: str, config: AppConfig
) -> dict[str, Any]:
    """One player's events of a type, per 30 minutes out of possession."""
    return player_event_stats(config.data_dir, player_id, event_type).to_dict()


@router.get("/teams/performance")
def get_team_performance(config: AppConfig) -> list[dict[str, Any]]:
    """Per-team averages with head-to-head splits."""
    return [t.to_dict() for t in compute_team_performance(config.data_dir)]


@router.get("/event-types")
def get_event_types(config: AppConfig) -> list[dict[str, str]]:
    """Event types seen in a sample of the matches."""
    return list_event_types(
        config.data_dir, sample_matches=config.stats.event_type_sample_matches
    )
