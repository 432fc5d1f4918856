"""Frame-number lookups over an ordered tracking sequence.

Frame numbers increase monotonically but are not contiguous: broadcast
tracking has gaps wherever the camera loses the play. All lookups clamp
instead of failing so callers always get a usable index.
"""

from __future__ import annotations

from typing import Sequence

from ..skillcorner.types import TrackingFrame


def lower_bound(frames: Sequence[TrackingFrame], frame_number: int) -> int:
    """Smallest index whose frame number is >= frame_number.

    Returns the last index when frame_number is beyond every entry and 0 for
    an empty sequence.
    """
    if not frames:
        return 0

    low = 0
    high = len(frames) - 1
    while low < high:
        mid = (low + high) // 2
        if frames[mid].frame < frame_number:
            low = mid + 1
        else:
            high = mid
    return low


def first_valid_frame_index(frames: Sequence[TrackingFrame]) -> int:
    """Index of the first frame with a positioned player, or 0 if none."""
    for i, frame in enumerate(frames):
        if frame.has_valid_player():
            return i
    return 0


class FrameIndex:
    """Read-only index over a match's tracking frames.

    The sequence must be sorted ascending by frame number; it is copied into
    a tuple so later mutation of the caller's list cannot break the search.
    """

    def __init__(self, frames: Sequence[TrackingFrame] = ()):
        self._frames: tuple[TrackingFrame, ...] = tuple(frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> TrackingFrame:
        return self._frames[index]

    def __iter__(self):
        return iter(self._frames)

    @property
    def frames(self) -> tuple[TrackingFrame, ...]:
        return self._frames

    @property
    def is_empty(self) -> bool:
        return not self._frames

    @property
    def last_index(self) -> int:
        """Highest valid index (0 for an empty index)."""
        return max(0, len(self._frames) - 1)

    def clamp(self, index: int) -> int:
        return max(0, min(self.last_index, index))

    def frame_at(self, index: int) -> TrackingFrame | None:
        """Frame at a clamped index, or None when there is no data."""
        if not self._frames:
            return None
        return self._frames[self.clamp(index)]

    def index_of_frame(self, frame_number: int) -> int:
        """Lower-bound lookup; see :func:`lower_bound`."""
        return lower_bound(self._frames, frame_number)

    def index_of_exact_frame(self, frame_number: int) -> int | None:
        """Index holding exactly ``frame_number``, or None if it is absent."""
        if not self._frames:
            return None
        index = lower_bound(self._frames, frame_number)
        if self._frames[index].frame != frame_number:
            return None
        return index

    def first_valid_frame_index(self) -> int:
        return first_valid_frame_index(self._frames)

    def frames_between(self, frame_start: int, frame_end: int) -> Sequence[TrackingFrame]:
        """Frames whose number lies in [frame_start, frame_end]."""
        if not self._frames or frame_start > frame_end:
            return ()
        start = lower_bound(self._frames, frame_start)
        if self._frames[start].frame < frame_start:
            return ()
        end = start
        while end < len(self._frames) and self._frames[end].frame <= frame_end:
            end += 1
        return self._frames[start:end]
