"""Team and player display resolution from match metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .skillcorner.types import MatchInfo

HOME_DEFAULT_COLOR = "#ff4444"
AWAY_DEFAULT_COLOR = "#4444ff"
DEFAULT_NUMBER_COLOR = "#ffffff"
UNKNOWN_PLAYER_COLOR = "rgba(255, 255, 255, 0.8)"
UNKNOWN_NUMBER_COLOR = "#000000"


@dataclass(frozen=True)
class TeamInfo:
    id: int
    name: str
    short_name: str | None
    color: str
    number_color: str
    player_numbers: dict[int, int | None] = field(default_factory=dict)

    @property
    def player_ids(self) -> list[int]:
        return list(self.player_numbers)

    def has_player(self, player_id: int) -> bool:
        return player_id in self.player_numbers


@dataclass(frozen=True)
class PlayerDisplay:
    jersey_number: int | None
    team_color: str
    number_color: str
    is_home_team: bool


def build_team_info(side: Literal["home", "away"], match: MatchInfo) -> TeamInfo:
    """Team identity, kit colors and roster numbers for one side."""
    is_home = side == "home"
    team = match.home_team if is_home else match.away_team
    kit = match.home_team_kit if is_home else match.away_team_kit
    default_color = HOME_DEFAULT_COLOR if is_home else AWAY_DEFAULT_COLOR

    return TeamInfo(
        id=team.id,
        name=team.name,
        short_name=team.short_name,
        color=(kit.jersey_color if kit else None) or default_color,
        number_color=(kit.number_color if kit else None) or DEFAULT_NUMBER_COLOR,
        player_numbers={p.id: p.number for p in match.players if p.team_id == team.id},
    )


def resolve_jersey_number(
    player_id: int | None,
    home: TeamInfo | None = None,
    away: TeamInfo | None = None,
    match: MatchInfo | None = None,
) -> int | None:
    """Jersey number via the team rosters, falling back to a scan of the match."""
    if not player_id:
        return None

    if home is not None or away is not None:
        for team in (home, away):
            if team is not None and team.has_player(player_id):
                return team.player_numbers[player_id]
        return None

    if match is not None:
        for player in match.players:
            if player.id == player_id:
                return player.number
    return None


def resolve_team_color(
    player_id: int, home: TeamInfo | None = None, away: TeamInfo | None = None
) -> str:
    for team in (home, away):
        if team is not None and team.has_player(player_id):
            return team.color
    return UNKNOWN_PLAYER_COLOR


def resolve_number_color(
    player_id: int, home: TeamInfo | None = None, away: TeamInfo | None = None
) -> str:
    for team in (home, away):
        if team is not None and team.has_player(player_id):
            return team.number_color
    return UNKNOWN_NUMBER_COLOR


def is_home_player(player_id: int, home: TeamInfo | None = None) -> bool:
    return home is not None and home.has_player(player_id)


def resolve_player_display(
    player_id: int, home: TeamInfo | None = None, away: TeamInfo | None = None
) -> PlayerDisplay:
    return PlayerDisplay(
        jersey_number=resolve_jersey_number(player_id, home, away),
        team_color=resolve_team_color(player_id, home, away),
        number_color=resolve_number_color(player_id, home, away),
        is_home_team=is_home_player(player_id, home),
    )
