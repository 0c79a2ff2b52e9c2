import pytest

from posepipe.preprocessing.geometry import Point
from posepipe.preprocessing.smoother import TemporalSmoother


def test_initial_state():
    smoother = TemporalSmoother(0.5)
    assert not smoother.is_initialized
    assert smoother.current is None
    assert smoother.get_previous_at(0) is None


def test_first_frame_is_returned_unchanged():
    smoother = TemporalSmoother(0.3)
    points = [Point(100, 200), Point(150, 250)]

    result = smoother.smooth(points)

    assert smoother.is_initialized
    assert result is points
    assert smoother.current == points


def test_ema_midpoint():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(0, 0)])

    result = smoother.smooth([Point(10, 20)])

    assert result[0].x == pytest.approx(5)
    assert result[0].y == pytest.approx(10)


def test_ema_recursion_uses_smoothed_history():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(0, 0)])
    smoother.smooth([Point(10, 0)])

    result = smoother.smooth([Point(10, 0)])

    # 5 -> 7.5, not the midpoint of the last two raw frames
    assert result[0].x == pytest.approx(7.5)


def test_missing_point_holds_last_value():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(10, 20), Point(30, 40)])

    result = smoother.smooth([Point(50, 60), None])

    assert result[0] == Point(30, 40)
    assert result[1] == Point(30, 40)

    # Keeps holding while the point stays missing
    assert smoother.smooth([Point(50, 60), None])[1] == Point(30, 40)


def test_new_point_ignores_absent_history():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([None, Point(0, 0)])

    result = smoother.smooth([Point(80, 90), Point(0, 0)])

    assert result[0] == Point(80, 90)


def test_both_absent_stays_absent():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([None])
    assert smoother.smooth([None]) == [None]


def test_set_alpha_clamps():
    smoother = TemporalSmoother()
    smoother.set_alpha(1.5)
    assert smoother.alpha == 1.0
    smoother.set_alpha(-0.2)
    assert smoother.alpha == 0.0
    assert TemporalSmoother(7).alpha == 1.0


def test_alpha_extremes():
    smoother = TemporalSmoother(0.0)
    smoother.smooth([Point(0, 0)])
    assert smoother.smooth([Point(10, 10)])[0] == Point(0, 0)

    smoother.set_alpha(1.0)
    assert smoother.smooth([Point(10, 10)])[0] == Point(10, 10)


def test_reset_returns_to_cold_start():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(0, 0)])
    smoother.reset()

    assert not smoother.is_initialized
    assert smoother.smooth([Point(10, 10)])[0] == Point(10, 10)


def test_get_previous_at():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(1, 2), None])

    assert smoother.get_previous_at(0) == Point(1, 2)
    assert smoother.get_previous_at(1) is None
    assert smoother.get_previous_at(5) is None
    assert smoother.get_previous_at(-1) is None


def test_returned_array_does_not_alias_state():
    smoother = TemporalSmoother(0.5)
    smoother.smooth([Point(0, 0)])
    result = smoother.smooth([Point(10, 10)])

    result[0] = None

    assert smoother.get_previous_at(0) == Point(5, 5)


def test_input_is_not_mutated():
    smoother = TemporalSmoother(0.5)
    first = [Point(0, 0)]
    smoother.smooth(first)
    second = [Point(10, 10)]
    smoother.smooth(second)

    assert first == [Point(0, 0)]
    assert second == [Point(10, 10)]
