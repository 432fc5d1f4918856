"""Readers for a local checkout of the SkillCorner open data repository.

Layout expected under ``data_dir`` (the ``data/`` folder of the checkout)::

    matches.json
    matches/<id>/<id>_match.json
    matches/<id>/<id>_tracking_extrapolated.jsonl
    matches/<id>/<id>_dynamic_events.csv
    matches/<id>/<id>_phases_of_play.csv

Tracking files are stored with Git LFS; a checkout without ``git lfs pull``
contains small pointer files instead of the data.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from ..errors import MatchDataFormatError, MatchDataNotFoundError
from ..schema import validate_match_metadata
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

logger = logging.getLogger(__name__)

LFS_POINTER_PREFIX = "version https://git-lfs"
LFS_POINTER_MAX_BYTES = 1000


@dataclass(frozen=True)
class MatchBundle:
    """Everything loaded for one match."""

    match: MatchInfo
    events: list[DynamicEvent] = field(default_factory=list)
    phases: list[PhaseOfPlay] = field(default_factory=list)
    tracking: list[TrackingFrame] = field(default_factory=list)


def match_dir(match_id: int | str, data_dir: Path) -> Path:
    return Path(data_dir) / "matches" / str(match_id)


def _require(path: Path, match_id: int | str | None = None) -> Path:
    if not path.is_file():
        raise MatchDataNotFoundError(str(path), match_id)
    return path


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise MatchDataFormatError(str(path), f"invalid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise MatchDataFormatError(str(path), f"not UTF-8 text: {e}") from e


# CSV cells --------------------------------------------------------------------


def coerce_cell(value: str | None) -> Any:
    """Type a CSV cell the way the SkillCorner exports expect.

    Empty cells become None, "True"/"False" become booleans, integer and
    float literals become numbers, anything else stays a string.
    """
    if value is None:
        return None
    text = value.strip()
    if text == "":
        return None
    if text == "True":
        return True
    if text == "False":
        return False
    # int()/float() accept "1_000"; SkillCorner IDs like "12_3" must stay strings
    if "_" in text:
        return text
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return text
    return number if math.isfinite(number) else text


def read_csv_records(path: Path) -> list[dict[str, Any]]:
    """Read a headed CSV file into a list of typed dicts."""
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            return [
                {key: coerce_cell(val) for key, val in row.items() if key is not None}
                for row in reader
                if any((val or "").strip() for val in row.values() if isinstance(val, str))
            ]
    except (csv.Error, UnicodeDecodeError) as e:
        raise MatchDataFormatError(str(path), f"invalid CSV: {e}") from e


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_side(value: Any) -> str:
    """Attacking side in hyphenated form; the CSV exports use underscores."""
    if not value:
        return ""
    return str(value).replace("_", "-")


# Matches list and metadata ----------------------------------------------------


def load_matches_list(data_dir: Path) -> list[MatchListItem]:
    """Load data/matches.json."""
    path = _require(Path(data_dir) / "matches.json")
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise MatchDataFormatError(str(path), "expected a JSON array of matches")

    items = []
    for position, entry in enumerate(raw):
        try:
            items.append(parse_match_list_item(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed match entry {position} in {path.name}: {e!r}")
    return items


def parse_match_list_item(entry: dict[str, Any]) -> MatchListItem:
    home = entry.get("home_team") or {}
    away = entry.get("away_team") or {}
    return MatchListItem(
        id=int(entry["id"]),
        date_time=entry.get("date_time"),
        home_team_id=_as_int(home.get("id")),
        home_team_short_name=home.get("short_name"),
        away_team_id=_as_int(away.get("id")),
        away_team_short_name=away.get("short_name"),
        status=entry.get("status"),
        competition_id=_as_int(entry.get("competition_id")),
        season_id=_as_int(entry.get("season_id")),
    )


def list_match_ids(data_dir: Path) -> list[str]:
    """Names of the match directories under data/matches.

    Numeric names come first in numeric order, anything else after them.
    """
    root = Path(data_dir) / "matches"
    if not root.is_dir():
        raise MatchDataNotFoundError(str(root))
    names = [p.name for p in root.iterdir() if p.is_dir()]
    return sorted(names, key=lambda n: (not n.isdigit(), int(n) if n.isdigit() else 0, n))


def _team(data: dict[str, Any]) -> Team:
    return Team(
        id=int(data["id"]),
        name=data["name"],
        short_name=data.get("short_name"),
        acronym=data.get("acronym"),
    )


def _kit(data: dict[str, Any] | None) -> Kit | None:
    if not data:
        return None
    return Kit(
        id=_as_int(data.get("id")),
        team_id=_as_int(data.get("team_id")),
        name=data.get("name"),
        jersey_color=data.get("jersey_color"),
        number_color=data.get("number_color"),
    )


def parse_match_info(raw: dict[str, Any]) -> MatchInfo:
    """Convert validated match metadata into a MatchInfo."""
    players = tuple(
        MatchPlayer(
            id=int(p["id"]),
            team_id=int(p["team_id"]),
            number=_as_int(p.get("number")),
            short_name=p.get("short_name"),
            first_name=p.get("first_name"),
            last_name=p.get("last_name"),
            role=(p.get("player_role") or {}).get("acronym"),
            trackable_object=_as_int(p.get("trackable_object")),
        )
        for p in raw.get("players") or []
    )
    periods = tuple(
        MatchPeriod(
            period=int(p["period"]),
            name=p.get("name"),
            start_frame=_as_int(p.get("start_frame")),
            end_frame=_as_int(p.get("end_frame")),
        )
        for p in raw.get("match_periods") or []
    )
    return MatchInfo(
        id=int(raw["id"]),
        home_team=_team(raw["home_team"]),
        away_team=_team(raw["away_team"]),
        home_team_kit=_kit(raw.get("home_team_kit")),
        away_team_kit=_kit(raw.get("away_team_kit")),
        players=players,
        periods=periods,
        home_team_side=tuple(raw.get("home_team_side") or ()),
        home_team_score=_as_int(raw.get("home_team_score")),
        away_team_score=_as_int(raw.get("away_team_score")),
        date_time=raw.get("date_time"),
        status=raw.get("status"),
        pitch_length=_as_float(raw.get("pitch_length")),
        pitch_width=_as_float(raw.get("pitch_width")),
        raw=raw,
    )


def load_match(match_id: int | str, data_dir: Path) -> MatchInfo:
    """Load and validate <match_id>_match.json."""
    path = _require(
        match_dir(match_id, data_dir) / f"{match_id}_match.json", match_id
    )
    raw = _read_json(path)
    try:
        validate_match_metadata(raw)
    except (jsonschema.ValidationError, TypeError) as e:
        raise MatchDataFormatError(str(path), str(e)) from e
    return parse_match_info(raw)


# Tracking ---------------------------------------------------------------------


def _is_lfs_pointer(path: Path) -> bool:
    if path.stat().st_size >= LFS_POINTER_MAX_BYTES:
        return False
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.readline().startswith(LFS_POINTER_PREFIX)


def parse_tracking_frame(record: dict[str, Any]) -> TrackingFrame:
    """Convert one JSONL tracking record into a TrackingFrame."""
    ball_data = record.get("ball_data") or {}
    possession = record.get("possession") or {}
    players = tuple(
        PlayerSample(
            player_id=int(p["player_id"]),
            x=_as_float(p.get("x")),
            y=_as_float(p.get("y")),
            is_detected=p.get("is_detected"),
        )
        for p in record.get("player_data") or []
    )
    return TrackingFrame(
        frame=int(record["frame"]),
        timestamp=record.get("timestamp"),
        period=_as_int(record.get("period")),
        players=players,
        ball=BallSample(
            x=_as_float(ball_data.get("x")),
            y=_as_float(ball_data.get("y")),
            z=_as_float(ball_data.get("z")),
            is_detected=ball_data.get("is_detected"),
        ),
        possession=Possession(
            player_id=_as_int(possession.get("player_id")),
            group=possession.get("group"),
        ),
    )


def iter_jsonl(path: Path) -> Iterable[dict[str, Any]]:
    """Yield decoded records of a JSON Lines file, skipping blank lines."""
    line_no = 0
    with open(path, encoding="utf-8") as f:
        try:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    raise MatchDataFormatError(
                        str(path), f"invalid JSON on line {line_no}: {e}"
                    ) from e
        except UnicodeDecodeError as e:
            raise MatchDataFormatError(
                str(path), f"not UTF-8 text after line {line_no}: {e}"
            ) from e


def load_tracking(
    match_id: int | str, data_dir: Path, limit: int | None = None
) -> list[TrackingFrame]:
    """Load tracking frames sorted ascending by frame number.

    Frames without any player data are dropped.

    Args:
        match_id: SkillCorner match ID
        data_dir: The ``data/`` folder of the open data checkout
        limit: Keep only the first ``limit`` frames (after filtering)
    """
    path = _require(
        match_dir(match_id, data_dir) / f"{match_id}_tracking_extrapolated.jsonl",
        match_id,
    )
    if _is_lfs_pointer(path):
        logger.warning(f"Tracking file is a Git LFS pointer: {path}")
        raise MatchDataFormatError(
            str(path),
            "file is a Git LFS pointer, not tracking data",
            suggested_action="Run 'git lfs pull' inside the opendata checkout",
        )

    frames = []
    for record in iter_jsonl(path):
        if not record.get("player_data"):
            continue
        try:
            frames.append(parse_tracking_frame(record))
        except (KeyError, TypeError, ValueError) as e:
            raise MatchDataFormatError(str(path), f"malformed frame: {e}") from e

    frames.sort(key=lambda f: f.frame)
    if limit is not None:
        frames = frames[: max(0, limit)]

    logger.debug(f"Loaded {len(frames)} tracking frames for match {match_id}")
    return frames


# Events and phases ------------------------------------------------------------


def parse_dynamic_event(row: dict[str, Any]) -> DynamicEvent:
    return DynamicEvent(
        event_id=_as_str(row.get("event_id")),
        frame_start=int(row["frame_start"]),
        frame_end=int(row["frame_end"]),
        event_type=row.get("event_type"),
        end_type=row.get("end_type"),
        event_subtype=row.get("event_subtype"),
        attacking_side_id=_as_int(row.get("attacking_side_id")),
        attacking_side=_as_side(row.get("attacking_side")) or None,
        period=_as_int(row.get("period")),
        player_id=_as_int(row.get("player_id")),
        player_name=row.get("player_name"),
        team_id=_as_int(row.get("team_id")),
        team_shortname=row.get("team_shortname"),
        x_start=_as_float(row.get("x_start")),
        y_start=_as_float(row.get("y_start")),
        x_end=_as_float(row.get("x_end")),
        y_end=_as_float(row.get("y_end")),
        time_start=_as_str(row.get("time_start")),
    )


def parse_phase_of_play(row: dict[str, Any]) -> PhaseOfPlay:
    return PhaseOfPlay(
        index=int(row["index"]),
        frame_start=int(row["frame_start"]),
        frame_end=int(row["frame_end"]),
        attacking_side=_as_side(row.get("attacking_side")),
        team_in_possession_id=_as_int(row.get("team_in_possession_id")),
        phase_type=row.get("team_in_possession_phase_type"),
        x_start=_as_float(row.get("x_start")),
        x_end=_as_float(row.get("x_end")),
        y_start=_as_float(row.get("y_start")),
        y_end=_as_float(row.get("y_end")),
        time_start=_as_str(row.get("time_start")),
        time_end=_as_str(row.get("time_end")),
        period=_as_int(row.get("period")),
        attacking_side_id=_as_int(row.get("attacking_side_id")),
        team_in_possession_shortname=row.get("team_in_possession_shortname"),
        out_of_possession_phase_type=row.get("team_out_of_possession_phase_type"),
        lead_to_shot=row.get("team_possession_lead_to_shot"),
        lead_to_goal=row.get("team_possession_lead_to_goal"),
    )


def _parse_rows(path: Path, rows: list[dict[str, Any]], parse) -> list:
    parsed = []
    for line_no, row in enumerate(rows, start=2):
        try:
            parsed.append(parse(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed row {line_no} in {path.name}: {e}")
    return parsed


def _dynamic_events_path(match_id: int | str, data_dir: Path) -> Path:
    return _require(
        match_dir(match_id, data_dir) / f"{match_id}_dynamic_events.csv", match_id
    )


def load_dynamic_events(match_id: int | str, data_dir: Path) -> list[DynamicEvent]:
    """Load <match_id>_dynamic_events.csv in file order."""
    path = _dynamic_events_path(match_id, data_dir)
    return _parse_rows(path, read_csv_records(path), parse_dynamic_event)


def load_dynamic_event_rows(match_id: int | str, data_dir: Path) -> list[dict[str, Any]]:
    """Typed rows of <match_id>_dynamic_events.csv with every column kept.

    The statistics read columns (pass outcome, xthreat, pressing chains...)
    that DynamicEvent does not carry.
    """
    return read_csv_records(_dynamic_events_path(match_id, data_dir))


def load_phases_of_play(match_id: int | str, data_dir: Path) -> list[PhaseOfPlay]:
    """Load <match_id>_phases_of_play.csv in file order."""
    path = _require(
        match_dir(match_id, data_dir) / f"{match_id}_phases_of_play.csv", match_id
    )
    return _parse_rows(path, read_csv_records(path), parse_phase_of_play)


def load_match_bundle(
    match_id: int | str,
    data_dir: Path,
    include_tracking: bool = True,
    tracking_limit: int | None = None,
) -> MatchBundle:
    """Load metadata, events, phases and (optionally) tracking for a match."""
    match = load_match(match_id, data_dir)
    events = load_dynamic_events(match_id, data_dir)
    phases = load_phases_of_play(match_id, data_dir)
    tracking = (
        load_tracking(match_id, data_dir, limit=tracking_limit)
        if include_tracking
        else []
    )

    logger.info(
        f"Loaded match {match_id}: {len(events)} events, {len(phases)} phases, "
        f"{len(tracking)} tracking frames"
    )
    return MatchBundle(match=match, events=events, phases=phases, tracking=tracking)
