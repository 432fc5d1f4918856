"""Season statistics computed from a SkillCorner open data checkout."""

from .events import PlayerEventStats, list_event_types, player_event_stats
from .physical import PhysicalProfile, load_physical_profiles
from .players import PlayerMatchStats, aggregate_player_match_stats
from .team_performance import TeamPerformance, compute_team_performance

__all__ = [
    "PhysicalProfile",
    "PlayerEventStats",
    "PlayerMatchStats",
    "TeamPerformance",
    "aggregate_player_match_stats",
    "compute_team_performance",
    "list_event_types",
    "load_physical_profiles",
    "player_event_stats",
]
