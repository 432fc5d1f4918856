"""Tests for phase-of-play resolution and display geometry."""

import pytest

from pitchreplay.timeline.frame_index import FrameIndex
from pitchreplay.timeline.phases import (
    AWAY_FALLBACK_COLOR,
    HOME_FALLBACK_COLOR,
    MISSING_EXTENT_X,
    NEUTRAL_POSSESSION_COLOR,
    build_phase_data,
    compute_ball_movement_range,
    extract_passes_in_phase,
    find_phase_at_frame,
    is_completed_pass,
    resolve_possession_color,
    sample_ball_trajectory,
)
from tests.fixtures.builders import (
    AWAY_COLOR,
    AWAY_TEAM_ID,
    HOME_COLOR,
    HOME_TEAM_ID,
    create_test_event,
    create_test_frame,
    create_test_frames,
    create_test_match,
    create_test_phase,
)


class TestFindPhaseAtFrame:
    def test_containment(self):
        phases = [create_test_phase(0, 99, index=0), create_test_phase(100, 199, index=1)]
        assert find_phase_at_frame(phases, 150).index == 1
        assert find_phase_at_frame(phases, 250) is None

    def test_bounds_are_inclusive(self):
        phases = [create_test_phase(0, 99, index=0), create_test_phase(100, 199, index=1)]
        assert find_phase_at_frame(phases, 0).index == 0
        assert find_phase_at_frame(phases, 99).index == 0
        assert find_phase_at_frame(phases, 100).index == 1
        assert find_phase_at_frame(phases, 199).index == 1

    def test_gap_between_phases(self):
        phases = [create_test_phase(0, 50), create_test_phase(60, 80)]
        assert find_phase_at_frame(phases, 55) is None

    def test_empty(self):
        assert find_phase_at_frame([], 10) is None

    def test_overlapping_phases_first_listed_wins(self):
        """Overlap is not repaired: the first listed phase is returned."""
        phases = [create_test_phase(100, 200, index=7), create_test_phase(50, 150, index=3)]
        assert find_phase_at_frame(phases, 120).index == 7
        assert find_phase_at_frame(phases, 60).index == 3


class TestBallMovementRange:
    def test_min_max_of_ball_x(self):
        tracking = [
            create_test_frame(10, ball=(5.0, 0.0)),
            create_test_frame(11, ball=(-3.0, 0.0)),
            create_test_frame(12, ball=(12.0, 0.0)),
            create_test_frame(30, ball=(50.0, 0.0)),  # outside the phase
        ]
        phase = create_test_phase(10, 20)
        result = compute_ball_movement_range(tracking, phase, "left-to-right")
        assert result.x_start == -3.0
        assert result.x_end == 12.0

    def test_right_to_left_is_mirrored(self):
        tracking = [create_test_frame(10, ball=(5.0, 0.0)), create_test_frame(11, ball=(-3.0, 0.0))]
        phase = create_test_phase(10, 20, attacking_side="right-to-left")
        result = compute_ball_movement_range(tracking, phase, "right-to-left")
        assert result.x_start == -5.0
        assert result.x_end == 3.0

    def test_ignores_missing_ball(self):
        tracking = [create_test_frame(10, ball=None), create_test_frame(11, ball=(7.0, 1.0))]
        result = compute_ball_movement_range(tracking, create_test_phase(10, 20), "left-to-right")
        assert (result.x_start, result.x_end) == (7.0, 7.0)

    def test_falls_back_to_phase_extent(self):
        tracking = [create_test_frame(10, ball=None), create_test_frame(11, ball=None)]
        phase = create_test_phase(10, 20, x_start=-20.0, x_end=15.0, attacking_side="right-to-left")
        result = compute_ball_movement_range(tracking, phase, "right-to-left")
        assert result.x_start == 20.0
        assert result.x_end == -15.0

    def test_fallback_with_no_frames_at_all(self):
        phase = create_test_phase(10, 20, x_start=1.0, x_end=2.0)
        result = compute_ball_movement_range([], phase, "left-to-right")
        assert (result.x_start, result.x_end) == (1.0, 2.0)

    def test_fallback_keeps_recorded_zero_and_mirrors_it(self):
        phase = create_test_phase(10, 20, x_start=0.0, x_end=30.0)
        result = compute_ball_movement_range([], phase, "right-to-left")
        assert (result.x_start, result.x_end) == (0.0, -30.0)

    def test_unrecorded_extent_is_halfway_line(self):
        phase = create_test_phase(10, 20, x_start=None, x_end=12.0)
        result = compute_ball_movement_range([], phase, "left-to-right")
        assert result.x_start == MISSING_EXTENT_X == 0.0
        assert result.x_end == 12.0

    def test_accepts_frame_index(self):
        index = FrameIndex(create_test_frames(0, 40, ball_x=4.0))
        result = compute_ball_movement_range(index, create_test_phase(10, 20), "left-to-right")
        assert (result.x_start, result.x_end) == (4.0, 4.0)


class TestPasses:
    def test_completed_pass_detection(self):
        assert is_completed_pass(create_test_event(10, 20))
        assert not is_completed_pass(create_test_event(10, 20, end_type="shot"))
        assert not is_completed_pass(create_test_event(10, 20, event_type="passing_option"))
        assert not is_completed_pass(create_test_event(10, 20, end=(None, 1.0)))

    def test_only_events_fully_inside_phase(self):
        phase = create_test_phase(100, 200)
        events = [
            create_test_event(90, 110),  # starts before
            create_test_event(120, 130),
            create_test_event(190, 210),  # ends after
            create_test_event(100, 200),
        ]
        passes = extract_passes_in_phase(events, phase)
        assert [p.frame_start for p in passes] == [120, 100]

    def test_uses_event_side_not_phase_side(self):
        # The phase attacks left-to-right but the event's own flag says its
        # team attacks right-to-left: the event flag decides.
        phase = create_test_phase(0, 100, attacking_side="left-to-right")
        events = [
            create_test_event(10, 20, start=(10.0, 5.0), end=(20.0, -5.0), attacking_side_id=2),
            create_test_event(30, 40, start=(10.0, 5.0), end=(20.0, -5.0), attacking_side_id=1),
        ]
        flipped, unflipped = extract_passes_in_phase(events, phase)
        assert (flipped.x_start, flipped.y_start, flipped.x_end, flipped.y_end) == (
            -10.0,
            -5.0,
            -20.0,
            5.0,
        )
        assert (unflipped.x_start, unflipped.y_start, unflipped.x_end, unflipped.y_end) == (
            10.0,
            5.0,
            20.0,
            -5.0,
        )

    def test_phase_side_does_not_flip_events(self):
        phase = create_test_phase(0, 100, attacking_side="right-to-left")
        passes = extract_passes_in_phase([create_test_event(10, 20, attacking_side_id=1)], phase)
        assert passes[0].x_start == 10.0

    def test_skips_incomplete_coordinates(self):
        phase = create_test_phase(0, 100)
        passes = extract_passes_in_phase([create_test_event(10, 20, start=(None, None))], phase)
        assert passes == []


class TestBallTrajectory:
    def test_samples_every_fifth_frame_number(self):
        tracking = create_test_frames(100, 120, ball_x=1.0)
        trace = sample_ball_trajectory(tracking, create_test_phase(100, 120), "left-to-right")
        assert [p.frame for p in trace] == [100, 105, 110, 115, 120]

    def test_sampling_keys_on_frame_number_not_position(self):
        # Gaps shift list positions but the sampled frame numbers stay put
        tracking = [create_test_frame(n, ball=(1.0, 1.0)) for n in (101, 102, 105, 107, 110)]
        trace = sample_ball_trajectory(tracking, create_test_phase(100, 120), "left-to-right")
        assert [p.frame for p in trace] == [105, 110]

    def test_skips_frames_without_ball(self):
        tracking = [create_test_frame(100, ball=None), create_test_frame(105, ball=(2.0, 3.0))]
        trace = sample_ball_trajectory(tracking, create_test_phase(100, 120), "right-to-left")
        assert len(trace) == 1
        assert (trace[0].x, trace[0].y) == (-2.0, -3.0)

    def test_custom_sample_rate(self):
        tracking = create_test_frames(0, 9)
        trace = sample_ball_trajectory(tracking, create_test_phase(0, 9), "left-to-right", sample_every=3)
        assert [p.frame for p in trace] == [0, 3, 6, 9]


class TestPossessionColor:
    def test_home_and_away_kit_colors(self):
        match = create_test_match()
        assert resolve_possession_color(create_test_phase(0, 1, team_in_possession_id=HOME_TEAM_ID), match) == HOME_COLOR
        assert resolve_possession_color(create_test_phase(0, 1, team_in_possession_id=AWAY_TEAM_ID), match) == AWAY_COLOR

    def test_fallback_colors_without_kits(self):
        match = create_test_match(with_kits=False)
        assert resolve_possession_color(create_test_phase(0, 1, team_in_possession_id=HOME_TEAM_ID), match) == HOME_FALLBACK_COLOR
        assert resolve_possession_color(create_test_phase(0, 1, team_in_possession_id=AWAY_TEAM_ID), match) == AWAY_FALLBACK_COLOR

    def test_neutral_for_unknown_team(self):
        match = create_test_match()
        phase = create_test_phase(0, 1, team_in_possession_id=999)
        assert resolve_possession_color(phase, match) == NEUTRAL_POSSESSION_COLOR

    def test_neutral_without_match(self):
        assert resolve_possession_color(create_test_phase(0, 1), None) == NEUTRAL_POSSESSION_COLOR


class TestBuildPhaseData:
    def test_none_phase(self):
        assert build_phase_data(None, [], [], None, 10) is None

    def test_assembles_geometry(self):
        phase = create_test_phase(
            100, 120, index=4, attacking_side="right-to-left", team_in_possession_id=AWAY_TEAM_ID, phase_type="direct"
        )
        tracking = FrameIndex(create_test_frames(95, 125, ball_x=10.0))
        events = [create_test_event(102, 110, attacking_side_id=2)]

        data = build_phase_data(phase, events, tracking, create_test_match(), 110)

        assert data.phase_name == "direct"
        assert data.team_color == AWAY_COLOR
        assert data.current_frame == 110
        assert (data.x_start, data.x_end) == (-10.0, -10.0)
        assert data.y_start == 0.0 and data.y_end == 0.0
        assert len(data.passes) == 1
        assert [p.frame for p in data.ball_trace] == [100, 105, 110, 115, 120]
        assert data.phase_index == 4
        assert data.attacking_side == "right-to-left"

    def test_is_pure(self):
        phase = create_test_phase(0, 20)
        tracking = create_test_frames(0, 20)
        first = build_phase_data(phase, [], tracking, None, 5)
        second = build_phase_data(phase, [], tracking, None, 5)
        assert first == second

    def test_to_dict(self):
        data = build_phase_data(create_test_phase(0, 10), [create_test_event(1, 5)], create_test_frames(0, 10), None, 3)
        result = data.to_dict()
        assert result["team_color"] == NEUTRAL_POSSESSION_COLOR
        assert result["passes"][0]["frame_start"] == 1
        assert result["ball_trace"][0] == {"x": 0.0, "y": 0.0, "frame": 0}


@pytest.mark.parametrize("side", ["right-to-left", "right"])
def test_short_and_full_tokens_flip_tracking(side):
    trace = sample_ball_trajectory([create_test_frame(0, ball=(3.0, 4.0))], create_test_phase(0, 0), side)
    assert (trace[0].x, trace[0].y) == (-3.0, -4.0)
