"""Per-session match state.

A :class:`MatchSession` owns everything one viewer needs: the loaded match
bundle, the frame index over its tracking, the playback controller and the
timeline navigator. Sessions are explicit objects handed to whoever needs
them; there is no process-wide store.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable

from .config import PitchReplayConfig, default_config
from .coords import LEFT_TO_RIGHT
from .errors import MatchNotLoadedError
from .skillcorner.loaders import MatchBundle, load_match_bundle
from .skillcorner.types import DynamicEvent, MatchInfo, PhaseOfPlay, Possession, TrackingFrame
from .teams import TeamInfo, build_team_info, resolve_player_display
from .timeformat import format_timestamp
from .timeline.field_adapter import FieldBall, ball_to_field, players_to_field
from .timeline.frame_index import FrameIndex
from .timeline.navigator import TimelineNavigator
from .timeline.phases import PhaseData, build_phase_data, find_phase_at_frame
from .timeline.playback import PlaybackController
from .timeline.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewPlayer:
    player_id: int
    x: float
    y: float
    is_detected: bool
    jersey_number: int | None
    team_color: str
    number_color: str
    is_home_team: bool


@dataclass(frozen=True)
class FrameView:
    """Everything the pitch view draws for the current frame."""

    match_id: int
    frame_index: int
    frame: int | None
    timestamp: str | None
    clock: str
    period: int | None
    attacking_side: str
    players: list[ViewPlayer] = field(default_factory=list)
    ball: FieldBall = field(
        default_factory=lambda: FieldBall(x=None, y=None, z=None, is_detected=False)
    )
    possession: Possession = field(default_factory=Possession)
    phase: PhaseData | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class MatchSession:
    """Loaded match data plus its playback clock.

    Args:
        data_dir: The ``data/`` folder of a SkillCorner open data checkout.
        config: Playback and phase settings. Defaults apply when omitted.
        scheduler: Tick source for playback. Defaults to the running asyncio
            loop; pass a ManualScheduler for headless use.
        on_frame_change: Called with the new frame index whenever playback
            or navigation moves the pointer.
    """

    def __init__(
        self,
        data_dir: Path | str,
        config: PitchReplayConfig | None = None,
        scheduler: Scheduler | None = None,
        on_frame_change: Callable[[int], None] | None = None,
    ):
        self.data_dir = Path(data_dir)
        self.config = config or default_config()
        self.on_frame_change = on_frame_change
        self._scheduler = scheduler or AsyncioScheduler()

        self._bundle: MatchBundle | None = None
        self._frame_index = FrameIndex()
        self._home: TeamInfo | None = None
        self._away: TeamInfo | None = None

        self.playback = self._build_playback()
        self.navigator = TimelineNavigator(
            get_frame_index=lambda: self._frame_index,
            on_index_change=lambda index: self.playback.seek(index),
        )

    def _build_playback(self) -> PlaybackController:
        return PlaybackController(
            get_frame_index=lambda: self._frame_index,
            scheduler=self._scheduler,
            on_frame_change=self._frame_changed,
            data_fps=self.config.playback.data_fps,
            jump_seconds=self.config.playback.jump_seconds,
            speed=self.config.playback.default_speed,
        )

    def _frame_changed(self, index: int) -> None:
        if self.on_frame_change is not None:
            self.on_frame_change(index)

    # Loaded data ---------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._bundle is not None

    @property
    def match(self) -> MatchInfo | None:
        return self._bundle.match if self._bundle else None

    @property
    def match_id(self) -> int | None:
        return self._bundle.match.id if self._bundle else None

    @property
    def events(self) -> list[DynamicEvent]:
        return self._bundle.events if self._bundle else []

    @property
    def phases(self) -> list[PhaseOfPlay]:
        return self._bundle.phases if self._bundle else []

    @property
    def frame_index(self) -> FrameIndex:
        return self._frame_index

    @property
    def home_team(self) -> TeamInfo | None:
        return self._home

    @property
    def away_team(self) -> TeamInfo | None:
        return self._away

    # Lifecycle -----------------------------------------------------------

    def load(self, match_id: int | str, tracking_limit: int | None = None) -> MatchBundle:
        """Load a match and park the pointer on its first valid frame.

        Playback is paused before anything is read so no tick can observe a
        half-swapped match. If loading fails the session is left empty and
        the error propagates.
        """
        self.playback.pause()

        try:
            bundle = load_match_bundle(
                match_id, self.data_dir, tracking_limit=tracking_limit
            )
        except Exception:
            self.reset()
            raise

        self.attach(bundle)
        return bundle

    async def load_async(
        self, match_id: int | str, tracking_limit: int | None = None
    ) -> MatchBundle:
        """Like :meth:`load`, but the files are read on the default executor.

        The event loop keeps serving while a large tracking file is parsed.
        The bundle is attached back on the loop, so the playback tick only
        ever sees a fully loaded match.
        """
        self.playback.pause()

        loop = asyncio.get_running_loop()
        try:
            bundle = await loop.run_in_executor(
                None,
                lambda: load_match_bundle(
                    match_id, self.data_dir, tracking_limit=tracking_limit
                ),
            )
        except Exception:
            self.reset()
            raise

        self.attach(bundle)
        return bundle

    def attach(self, bundle: MatchBundle) -> None:
        """Swap in an already loaded bundle."""
        self.playback.pause()
        self._bundle = bundle
        self._frame_index = FrameIndex(bundle.tracking)
        self._home = build_team_info("home", bundle.match)
        self._away = build_team_info("away", bundle.match)
        self.navigator.navigate_to_first_valid_frame()

        logger.info(
            f"Session loaded match {bundle.match.id} "
            f"({len(self._frame_index)} frames, first valid index "
            f"{self.playback.current_frame_index})"
        )

    def reset(self) -> None:
        """Tear down playback and drop all loaded data."""
        self.playback.teardown()
        self._bundle = None
        self._frame_index = FrameIndex()
        self._home = None
        self._away = None
        self.playback = self._build_playback()
        logger.debug("Session reset")

    def close(self) -> None:
        """Stop playback for good; the session is unusable afterwards."""
        self.playback.teardown()
        self._bundle = None
        self._frame_index = FrameIndex()

    # Queries -------------------------------------------------------------

    def current_frame(self) -> TrackingFrame | None:
        return self._frame_index.frame_at(self.playback.current_frame_index)

    def current_phase(self) -> PhaseOfPlay | None:
        frame = self.current_frame()
        if frame is None:
            return None
        return find_phase_at_frame(self.phases, frame.frame)

    def current_phase_data(self) -> PhaseData | None:
        frame = self.current_frame()
        if frame is None:
            return None
        return build_phase_data(
            find_phase_at_frame(self.phases, frame.frame),
            self.events,
            self._frame_index,
            self.match,
            frame.frame,
            sample_every=self.config.phases.trace_sample_every,
        )

    def current_view(self) -> FrameView:
        """Build the frame view at the playback pointer.

        Raises:
            MatchNotLoadedError: If no match has been loaded.
        """
        if self._bundle is None:
            raise MatchNotLoadedError()

        frame = self.current_frame()
        phase = self.current_phase()
        attacking_side = phase.attacking_side if phase else LEFT_TO_RIGHT

        players = []
        for player in players_to_field(frame, attacking_side):
            display = resolve_player_display(player.player_id, self._home, self._away)
            players.append(
                ViewPlayer(
                    player_id=player.player_id,
                    x=player.x,
                    y=player.y,
                    is_detected=player.is_detected,
                    jersey_number=display.jersey_number,
                    team_color=display.team_color,
                    number_color=display.number_color,
                    is_home_team=display.is_home_team,
                )
            )

        return FrameView(
            match_id=self._bundle.match.id,
            frame_index=self.playback.current_frame_index,
            frame=frame.frame if frame else None,
            timestamp=frame.timestamp if frame else None,
            clock=format_timestamp(frame.timestamp if frame else None),
            period=frame.period if frame else None,
            attacking_side=attacking_side,
            players=players,
            ball=ball_to_field(frame, attacking_side),
            possession=frame.possession if frame else Possession(),
            phase=self.current_phase_data(),
        )

    def state_dict(self) -> dict[str, Any]:
        """Playback state plus the loaded match summary."""
        frame = self.current_frame()
        return {
            "match_id": self.match_id,
            "is_loaded": self.is_loaded,
            "frame_count": len(self._frame_index),
            "current_frame": frame.frame if frame else None,
            **asdict(self.playback.state),
            "speed_options": list(self.config.playback.speed_options),
        }
