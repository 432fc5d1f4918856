"""Record types for SkillCorner open data.

These mirror the fields of the SkillCorner files that the playback engine
and the API consume. Everything is immutable once loaded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PlayerSample:
    """One player's raw position in a tracking frame."""

    player_id: int
    x: float | None
    y: float | None
    is_detected: bool | None = None

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass(frozen=True)
class BallSample:
    """Raw ball position. None fields mean "not detected this frame"."""

    x: float | None = None
    y: float | None = None
    z: float | None = None
    is_detected: bool | None = None


@dataclass(frozen=True)
class Possession:
    player_id: int | None = None
    group: str | None = None  # "home team" / "away team" / None


@dataclass(frozen=True)
class TrackingFrame:
    """One sampled instant of broadcast tracking."""

    frame: int
    timestamp: str | None = None
    period: int | None = None
    players: tuple[PlayerSample, ...] = ()
    ball: BallSample = field(default_factory=BallSample)
    possession: Possession = field(default_factory=Possession)

    def has_valid_player(self) -> bool:
        """True if at least one player has both coordinates."""
        return any(p.has_position for p in self.players)


@dataclass(frozen=True)
class PhaseOfPlay:
    """A row of phases_of_play.csv."""

    index: int
    frame_start: int
    frame_end: int
    attacking_side: str
    team_in_possession_id: int | None
    phase_type: str | None  # team_in_possession_phase_type
    x_start: float | None = None
    x_end: float | None = None
    y_start: float | None = None
    y_end: float | None = None
    time_start: str | None = None
    time_end: str | None = None
    period: int | None = None
    attacking_side_id: int | None = None
    team_in_possession_shortname: str | None = None
    out_of_possession_phase_type: str | None = None
    lead_to_shot: bool | None = None
    lead_to_goal: bool | None = None

    def contains(self, frame_number: int) -> bool:
        return self.frame_start <= frame_number <= self.frame_end


@dataclass(frozen=True)
class DynamicEvent:
    """A row of dynamic_events.csv (fields used by the playback engine)."""

    event_id: str | None
    frame_start: int
    frame_end: int
    event_type: str | None
    end_type: str | None = None
    event_subtype: str | None = None
    attacking_side_id: int | None = None
    attacking_side: str | None = None
    period: int | None = None
    player_id: int | None = None
    player_name: str | None = None
    team_id: int | None = None
    team_shortname: str | None = None
    x_start: float | None = None
    y_start: float | None = None
    x_end: float | None = None
    y_end: float | None = None
    time_start: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return None not in (self.x_start, self.y_start, self.x_end, self.y_end)


@dataclass(frozen=True)
class Team:
    id: int
    name: str
    short_name: str | None = None
    acronym: str | None = None


@dataclass(frozen=True)
class Kit:
    id: int | None = None
    team_id: int | None = None
    name: str | None = None
    jersey_color: str | None = None
    number_color: str | None = None


@dataclass(frozen=True)
class MatchPlayer:
    id: int
    team_id: int
    number: int | None = None
    short_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    trackable_object: int | None = None


@dataclass(frozen=True)
class MatchPeriod:
    period: int
    name: str | None = None
    start_frame: int | None = None
    end_frame: int | None = None


@dataclass(frozen=True)
class MatchInfo:
    """Match metadata from <match_id>_match.json."""

    id: int
    home_team: Team
    away_team: Team
    home_team_kit: Kit | None = None
    away_team_kit: Kit | None = None
    players: tuple[MatchPlayer, ...] = ()
    periods: tuple[MatchPeriod, ...] = ()
    home_team_side: tuple[str, ...] = ()
    home_team_score: int | None = None
    away_team_score: int | None = None
    date_time: str | None = None
    status: str | None = None
    pitch_length: float | None = None
    pitch_width: float | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class MatchListItem:
    """Entry of data/matches.json."""

    id: int
    date_time: str | None
    home_team_id: int | None
    home_team_short_name: str | None
    away_team_id: int | None
    away_team_short_name: str | None
    status: str | None = None
    competition_id: int | None = None
    season_id: int | None = None
