# src/pitchreplay/config.py
"""Configuration management for pitchreplay."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import tomllib


class ConfigError(Exception):
    """Configuration error."""

    pass


# SkillCorner broadcast tracking is recorded at 10 samples per second
DEFAULT_DATA_FPS = 10
DEFAULT_JUMP_SECONDS = 5
DEFAULT_SPEED_OPTIONS = [0.5, 1.0, 2.0, 4.0]
DEFAULT_TRACE_SAMPLE_EVERY = 5
DEFAULT_PHYSICAL_AGGREGATES_FILE = "aus1league_physicalaggregates_20242025_midfielders.csv"
# Event types are listed from the first few matches only
DEFAULT_EVENT_TYPE_SAMPLE_MATCHES = 5


@dataclass
class PathsConfig:
    opendata_dir: Path = field(default_factory=lambda: Path("~/opendata").expanduser())


@dataclass
class PlaybackConfig:
    data_fps: int = DEFAULT_DATA_FPS
    jump_seconds: int = DEFAULT_JUMP_SECONDS
    default_speed: float = 1.0
    speed_options: list[float] = field(
        default_factory=lambda: list(DEFAULT_SPEED_OPTIONS)
    )


@dataclass
class PhasesConfig:
    trace_sample_every: int = DEFAULT_TRACE_SAMPLE_EVERY


@dataclass
class StatsConfig:
    physical_aggregates_file: str = DEFAULT_PHYSICAL_AGGREGATES_FILE
    event_type_sample_matches: int = DEFAULT_EVENT_TYPE_SAMPLE_MATCHES


@dataclass
class PitchReplayConfig:
    paths: PathsConfig = field(default_factory=PathsConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    phases: PhasesConfig = field(default_factory=PhasesConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)

    @property
    def data_dir(self) -> Path:
        return self.paths.opendata_dir / "data"

    @property
    def physical_aggregates_path(self) -> Path:
        return self.data_dir / "aggregates" / self.stats.physical_aggregates_file

    def validate(self) -> None:
        """Validate configuration, raising ConfigError if invalid."""
        if not _is_positive_int(self.playback.data_fps):
            raise ConfigError(
                f"Invalid data_fps {self.playback.data_fps!r}. Must be a positive integer"
            )

        if not _is_positive_int(self.playback.jump_seconds):
            raise ConfigError(
                f"Invalid jump_seconds {self.playback.jump_seconds!r}. "
                "Must be a positive integer"
            )

        speeds = [self.playback.default_speed, *self.playback.speed_options]
        for speed in speeds:
            if not _is_positive_number(speed):
                raise ConfigError(
                    f"Invalid playback speed {speed!r}. Speeds must be positive numbers"
                )

        if self.playback.default_speed not in self.playback.speed_options:
            options = ", ".join(str(s) for s in self.playback.speed_options)
            raise ConfigError(
                f"default_speed {self.playback.default_speed} must be one of the "
                f"speed_options: {options}"
            )

        if not _is_positive_int(self.phases.trace_sample_every):
            raise ConfigError(
                f"Invalid trace_sample_every {self.phases.trace_sample_every}. "
                "Must be >= 1"
            )

        if not self.stats.physical_aggregates_file:
            raise ConfigError("physical_aggregates_file must not be empty")

        if not _is_positive_int(self.stats.event_type_sample_matches):
            raise ConfigError(
                f"Invalid event_type_sample_matches {self.stats.event_type_sample_matches!r}. "
                "Must be a positive integer"
            )


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_positive_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def default_config() -> PitchReplayConfig:
    """Configuration with every section at its default."""
    return PitchReplayConfig()


def load_config(config_path: Path) -> PitchReplayConfig:
    """Load configuration from TOML file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    paths_data = data.get("paths", {})
    paths = PathsConfig()
    if "opendata_dir" in paths_data:
        paths = PathsConfig(
            opendata_dir=Path(paths_data["opendata_dir"]).expanduser()
        )

    playback_data = data.get("playback", {})
    playback = PlaybackConfig(
        data_fps=playback_data.get("data_fps", DEFAULT_DATA_FPS),
        jump_seconds=playback_data.get("jump_seconds", DEFAULT_JUMP_SECONDS),
        default_speed=float(playback_data.get("default_speed", 1.0)),
        speed_options=[
            float(s)
            for s in playback_data.get("speed_options", DEFAULT_SPEED_OPTIONS)
        ],
    )

    phases_data = data.get("phases", {})
    phases = PhasesConfig(
        trace_sample_every=phases_data.get(
            "trace_sample_every", DEFAULT_TRACE_SAMPLE_EVERY
        ),
    )

    stats_data = data.get("stats", {})
    stats = StatsConfig(
        physical_aggregates_file=stats_data.get(
            "physical_aggregates_file", DEFAULT_PHYSICAL_AGGREGATES_FILE
        ),
        event_type_sample_matches=stats_data.get(
            "event_type_sample_matches", DEFAULT_EVENT_TYPE_SAMPLE_MATCHES
        ),
    )

    return PitchReplayConfig(
        paths=paths, playback=playback, phases=phases, stats=stats
    )


def get_default_config_path() -> Path:
    """Get the default config file path."""
    return Path.home() / ".pitchreplay" / "config.toml"
