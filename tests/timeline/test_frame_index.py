"""Tests for frame-number lookups over tracking frames."""

from pitchreplay.timeline.frame_index import FrameIndex, first_valid_frame_index, lower_bound
from tests.fixtures.builders import create_test_frame


def _frames(*numbers):
    return [create_test_frame(n) for n in numbers]


class TestLowerBound:
    """Tests for the binary-search lower bound."""

    def test_next_available_frame_in_gapped_sequence(self):
        frames = _frames(100, 105, 110, 120)
        assert lower_bound(frames, 107) == 2
        assert lower_bound(frames, 200) == 3

    def test_exact_match(self):
        frames = _frames(10, 20, 30)
        assert lower_bound(frames, 20) == 1

    def test_gap_returns_next_frame(self):
        # frame 15 falls into a gap: the next available frame is 20
        frames = _frames(10, 20, 30)
        assert lower_bound(frames, 15) == 1

    def test_before_first_frame(self):
        frames = _frames(10, 20, 30)
        assert lower_bound(frames, 0) == 0

    def test_beyond_last_frame_returns_last_index(self):
        frames = _frames(10, 20, 30)
        assert lower_bound(frames, 31) == 2

    def test_empty_returns_zero(self):
        assert lower_bound([], 100) == 0

    def test_single_frame(self):
        frames = _frames(5)
        assert lower_bound(frames, 1) == 0
        assert lower_bound(frames, 5) == 0
        assert lower_bound(frames, 9) == 0

    def test_result_is_smallest_index_at_or_after(self):
        frames = _frames(*range(0, 1000, 7))
        for target in range(0, 1000, 13):
            index = lower_bound(frames, target)
            if frames[-1].frame >= target:
                assert frames[index].frame >= target
                if index > 0:
                    assert frames[index - 1].frame < target
            else:
                assert index == len(frames) - 1


class TestFirstValidFrame:
    def test_first_positioned_player_after_empty_frames(self):
        frames = [create_test_frame(n, players=[]) for n in range(3)]
        frames.append(create_test_frame(3, players=[(11, 1.0, 2.0)]))
        assert first_valid_frame_index(frames) == 3
        assert first_valid_frame_index(frames[:3]) == 0

    def test_skips_frames_without_positioned_players(self):
        frames = [
            create_test_frame(1, players=[(11, None, None)]),
            create_test_frame(2, players=[(11, 3.0, None)]),
            create_test_frame(3, players=[(11, None, None), (12, 4.0, 5.0)]),
        ]
        assert first_valid_frame_index(frames) == 2

    def test_no_valid_frame_returns_zero(self):
        frames = [create_test_frame(1, players=[]), create_test_frame(2, players=[(11, None, 1.0)])]
        assert first_valid_frame_index(frames) == 0

    def test_empty(self):
        assert first_valid_frame_index([]) == 0


class TestFrameIndex:
    """Tests for the FrameIndex wrapper."""

    def test_exact_lookup_distinguishes_gaps(self):
        index = FrameIndex(_frames(100, 105, 110, 120))
        assert index.index_of_exact_frame(105) == 1
        assert index.index_of_exact_frame(107) is None
        assert index.index_of_frame(107) == 2

    def test_exact_lookup(self):
        index = FrameIndex(_frames(10, 20, 30))
        assert index.index_of_exact_frame(20) == 1
        assert index.index_of_exact_frame(25) is None
        assert index.index_of_exact_frame(99) is None

    def test_exact_lookup_on_empty_index(self):
        assert FrameIndex().index_of_exact_frame(1) is None

    def test_clamp(self):
        index = FrameIndex(_frames(10, 20, 30))
        assert index.clamp(-5) == 0
        assert index.clamp(1) == 1
        assert index.clamp(50) == 2

    def test_empty_index_clamps_to_zero(self):
        index = FrameIndex()
        assert index.is_empty
        assert index.last_index == 0
        assert index.clamp(10) == 0
        assert index.frame_at(0) is None

    def test_frame_at_clamps(self):
        index = FrameIndex(_frames(10, 20, 30))
        assert index.frame_at(100).frame == 30
        assert index.frame_at(-1).frame == 10

    def test_copies_input(self):
        frames = _frames(10, 20)
        index = FrameIndex(frames)
        frames.append(create_test_frame(5))
        assert len(index) == 2
        assert [f.frame for f in index] == [10, 20]

    def test_frames_between(self):
        index = FrameIndex(_frames(10, 20, 30, 40))
        assert [f.frame for f in index.frames_between(15, 30)] == [20, 30]
        assert [f.frame for f in index.frames_between(10, 10)] == [10]
        assert list(index.frames_between(41, 50)) == []
        assert list(index.frames_between(21, 29)) == []
        assert list(index.frames_between(30, 20)) == []

    def test_first_valid_frame_index(self):
        index = FrameIndex([create_test_frame(1, players=[]), create_test_frame(2)])
        assert index.first_valid_frame_index() == 1
