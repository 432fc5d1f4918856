"""Timeline navigation by frame number."""

from __future__ import annotations

from typing import Callable

from .frame_index import FrameIndex


class TimelineNavigator:
    """Translate frame numbers into frame-index moves.

    Holds no state of its own: the frame index is fetched on every call so
    navigation always runs against the currently loaded match.

    Example:
        navigator = TimelineNavigator(
            get_frame_index=lambda: session.frame_index,
            on_index_change=session.playback.seek,
        )
        navigator.navigate_to_frame(15000)
    """

    def __init__(
        self,
        get_frame_index: Callable[[], FrameIndex],
        on_index_change: Callable[[int], None],
    ):
        self._get_frame_index = get_frame_index
        self._on_index_change = on_index_change

    def navigate_to_frame(self, frame_number: int) -> None:
        """Go to the first frame at or after ``frame_number``."""
        self._on_index_change(self._get_frame_index().index_of_frame(frame_number))

    def navigate_to_first_valid_frame(self) -> None:
        self._on_index_change(self._get_frame_index().first_valid_frame_index())

    def navigate_to_start(self) -> None:
        self._on_index_change(0)

    def navigate_to_end(self) -> None:
        frame_index = self._get_frame_index()
        if not frame_index.is_empty:
            self._on_index_change(frame_index.last_index)
