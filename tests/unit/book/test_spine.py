"""Unit tests for the page bone-chain maths."""

import math

import pytest

from book.spine import (
    BONE_COUNT,
    TURN_DURATION,
    bend_angles,
    damp_angle,
    spine_angles,
    target_rotation,
    turning_progress,
)


class TestTurningProgress:
    def test_zero_at_start_and_after_duration(self):
        assert turning_progress(10.0, 10.0) == pytest.approx(0.0)
        assert turning_progress(10.0 + TURN_DURATION, 10.0) == pytest.approx(0.0, abs=1e-9)
        assert turning_progress(100.0, 10.0) == pytest.approx(0.0, abs=1e-9)

    def test_peaks_mid_turn(self):
        assert turning_progress(10.0 + TURN_DURATION / 2, 10.0) == pytest.approx(1.0)

    def test_never_turned(self):
        assert turning_progress(5.0, float("-inf")) == pytest.approx(0.0, abs=1e-9)


class TestTargetRotation:
    def test_open_and_closed_directions(self):
        assert target_rotation(True, True, 3) == pytest.approx(-math.pi / 2)
        assert target_rotation(False, True, 3) == pytest.approx(math.pi / 2)

    def test_fan_out_only_when_book_open(self):
        assert target_rotation(False, False, 2) > target_rotation(False, False, 1)


class TestBendAngles:
    def test_closed_book_is_rigid(self):
        angles = spine_angles(opened=False, book_closed=True, physical_slot=0, turning=0.7)

        assert len(angles) == BONE_COUNT
        assert angles[0].yaw == pytest.approx(math.pi / 2)
        assert all(a.yaw == 0.0 and a.pitch == 0.0 for a in angles[1:])

    def test_no_fold_when_not_turning(self):
        angles = spine_angles(opened=True, book_closed=False, physical_slot=1, turning=0.0)

        assert all(a.pitch == 0.0 for a in angles)

    def test_fold_only_past_inside_segments(self):
        early = bend_angles(2, opened=True, book_closed=False, physical_slot=1, turning=1.0)
        late = bend_angles(20, opened=True, book_closed=False, physical_slot=1, turning=1.0)

        assert early.pitch == 0.0
        assert late.pitch != 0.0


class TestDampAngle:
    def test_moves_toward_target(self):
        value = damp_angle(0.0, 1.0, 0.5, 0.1)

        assert 0.0 < value < 1.0

    def test_zero_delta_is_noop(self):
        assert damp_angle(0.3, 1.0, 0.5, 0.0) == 0.3

    def test_frame_rate_independent(self):
        one_step = damp_angle(0.0, 1.0, 0.5, 0.2)
        two_steps = damp_angle(damp_angle(0.0, 1.0, 0.5, 0.1), 1.0, 0.5, 0.1)

        assert one_step == pytest.approx(two_steps)

    def test_takes_shortest_arc(self):
        value = damp_angle(math.pi - 0.1, -math.pi + 0.1, 0.5, 0.1)

        assert value > math.pi - 0.1
