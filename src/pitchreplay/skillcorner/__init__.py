"""SkillCorner open data records and file readers."""

from .loaders import (
    MatchBundle,
    list_match_ids,
    load_dynamic_event_rows,
    load_dynamic_events,
    load_match,
    load_match_bundle,
    load_matches_list,
    load_phases_of_play,
    load_tracking,
)
from .types import (
    BallSample,
    DynamicEvent,
    Kit,
    MatchInfo,
    MatchListItem,
    MatchPeriod,
    MatchPlayer,
    PhaseOfPlay,
    PlayerSample,
    Possession,
    Team,
    TrackingFrame,
)

__all__ = [
    "BallSample",
    "DynamicEvent",
    "Kit",
    "MatchBundle",
    "MatchInfo",
    "MatchListItem",
    "MatchPeriod",
    "MatchPlayer",
    "PhaseOfPlay",
    "PlayerSample",
    "Possession",
    "Team",
    "TrackingFrame",
    "list_match_ids",
    "load_dynamic_event_rows",
    "load_dynamic_events",
    "load_match",
    "load_match_bundle",
    "load_matches_list",
    "load_phases_of_play",
    "load_tracking",
]
