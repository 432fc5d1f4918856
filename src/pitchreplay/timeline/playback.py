"""Playback clock over a match's tracking frames.

The controller owns the session's :class:`PlaybackState`. The current frame
index is the single source of truth for "where we are"; every move goes
through the controller and is clamped to the live frame index.

States are Paused (initial) and Playing. While Playing, a repeating tick
advances the index by one frame every ``base_interval_ms / speed`` ms and
falls back to Paused at the last frame. Manual steps and jumps always pause
first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

from ..config import DEFAULT_DATA_FPS, DEFAULT_JUMP_SECONDS
from .frame_index import FrameIndex
from .scheduler import RepeatingHandle, Scheduler

logger = logging.getLogger(__name__)

FrameChangeCallback = Callable[[int], None]


@dataclass
class PlaybackState:
    is_playing: bool = False
    speed_multiplier: float = 1.0
    current_frame_index: int = 0


class PlaybackController:
    """Play/pause/speed/step/jump over a frame index.

    Args:
        get_frame_index: Returns the session's current FrameIndex. Called on
            every operation so a reloaded match is picked up.
        scheduler: Source of the repeating playback tick.
        on_frame_change: Called with the new index after each move.
        data_fps: Sampling rate of the tracking data.
        jump_seconds: Span of a jump forward/backward.
        speed: Initial speed multiplier.
        start_index: Initial frame index (clamped).
    """

    def __init__(
        self,
        get_frame_index: Callable[[], FrameIndex],
        scheduler: Scheduler,
        on_frame_change: FrameChangeCallback | None = None,
        data_fps: int = DEFAULT_DATA_FPS,
        jump_seconds: int = DEFAULT_JUMP_SECONDS,
        speed: float = 1.0,
        start_index: int = 0,
    ):
        self._get_frame_index = get_frame_index
        self._scheduler = scheduler
        self._on_frame_change = on_frame_change
        self.base_interval_ms = 1000.0 / data_fps
        # Frame indices are integers whatever rates the caller passes
        self.jump_frames = int(round(data_fps * jump_seconds))

        self._state = PlaybackState(speed_multiplier=speed if _valid_speed(speed) else 1.0)
        self._state.current_frame_index = get_frame_index().clamp(start_index)
        self._handle: RepeatingHandle | None = None
        self._torn_down = False

    # State ---------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """Snapshot of the playback state."""
        return PlaybackState(
            is_playing=self._state.is_playing,
            speed_multiplier=self._state.speed_multiplier,
            current_frame_index=self._state.current_frame_index,
        )

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def speed_multiplier(self) -> float:
        return self._state.speed_multiplier

    @property
    def current_frame_index(self) -> int:
        return self._state.current_frame_index

    @property
    def tick_interval_ms(self) -> float:
        return self.base_interval_ms / self._state.speed_multiplier

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # Transitions ---------------------------------------------------------

    def play(self) -> None:
        """Start the playback tick. No-op when already playing or torn down."""
        if self._torn_down:
            logger.debug("play() ignored: controller torn down")
            return
        if self._state.is_playing:
            return

        self._state.is_playing = True
        self._handle = self._scheduler.schedule_repeating(
            self.tick_interval_ms, self._tick
        )
        logger.info(
            f"Playback started at index {self._state.current_frame_index} "
            f"({self._state.speed_multiplier}x)"
        )

    def pause(self) -> None:
        """Cancel the tick and go to Paused. Idempotent."""
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
        if self._state.is_playing:
            self._state.is_playing = False
            logger.info(f"Playback paused at index {self._state.current_frame_index}")

    def toggle_play_pause(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def set_speed(self, multiplier: float) -> None:
        """Change the speed; a running clock is restarted at the new period."""
        if self._torn_down:
            return
        if not _valid_speed(multiplier):
            logger.warning(f"Ignoring invalid playback speed {multiplier!r}")
            return

        was_playing = self._state.is_playing
        if was_playing:
            self.pause()
        self._state.speed_multiplier = float(multiplier)
        if was_playing:
            self.play()

    def step_forward(self) -> None:
        self._manual_move(1)

    def step_backward(self) -> None:
        self._manual_move(-1)

    def jump_forward(self) -> None:
        self._manual_move(self.jump_frames)

    def jump_backward(self) -> None:
        self._manual_move(-self.jump_frames)

    def seek(self, index: int) -> None:
        """Move to ``index`` (clamped) without changing play/pause."""
        if self._torn_down:
            return
        self._set_index(index)

    def teardown(self) -> None:
        """Pause for good. Later calls on the controller are no-ops."""
        self.pause()
        if not self._torn_down:
            self._torn_down = True
            logger.debug("Playback controller torn down")

    # Internals -----------------------------------------------------------

    def _manual_move(self, delta: int) -> None:
        if self._torn_down:
            return
        self.pause()
        self._set_index(self._state.current_frame_index + delta)

    def _set_index(self, index: int) -> None:
        new_index = self._get_frame_index().clamp(int(index))
        if new_index == self._state.current_frame_index:
            return
        self._state.current_frame_index = new_index
        if self._on_frame_change is not None:
            self._on_frame_change(new_index)

    def _tick(self) -> None:
        if not self._state.is_playing or self._handle is None:
            # A tick that raced a pause must not touch the state
            return

        frame_index = self._get_frame_index()
        current = frame_index.clamp(self._state.current_frame_index)
        if current < frame_index.last_index:
            self._set_index(current + 1)
        else:
            logger.info("Playback reached the last frame")
            self.pause()


def _valid_speed(multiplier: object) -> bool:
    if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)):
        return False
    return math.isfinite(multiplier) and multiplier > 0
