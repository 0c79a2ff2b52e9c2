import math

import pytest

from posepipe.capture.landmarks import PoseLandmark as P
from posepipe.preprocessing.geometry import (
    Point, add, angle_between, angle_diff, compute_joint_angles, distance,
    is_collinear, lerp, lerp_point, normalize, points_to_array, scale, subtract
)


def test_distance():
    assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5)
    assert distance(None, Point(3, 4)) == 0


def test_vector_operations():
    p1, p2 = Point(10, 20), Point(5, 8)

    assert subtract(p1, p2) == Point(5, 12)
    assert add(p1, p2) == Point(15, 28)
    assert scale(p1, 0.5) == Point(5, 10)


def test_normalize():
    n = normalize(Point(3, 4))
    assert n.x == pytest.approx(0.6)
    assert n.y == pytest.approx(0.8)
    assert normalize(Point(0, 0)) == Point(0, 0)


def test_angle_diff_wraps():
    assert abs(angle_diff(0, math.pi)) == pytest.approx(math.pi)
    assert abs(angle_diff(math.pi * 1.8, math.pi * 0.2)) < math.pi
    assert angle_diff(math.pi * 1.8, math.pi * 0.2) == pytest.approx(0.4 * math.pi)


def test_lerp():
    assert lerp(0, 10, 0.5) == 5
    assert lerp(-10, 10, 0.25) == -5
    assert lerp(100, 200, 0) == 100
    assert lerp(100, 200, 1) == 200


def test_lerp_point_absence():
    p1, p2 = Point(0, 0), Point(10, 20)

    assert lerp_point(p1, p2, 0.5) == Point(5, 10)
    assert lerp_point(None, p2, 0.5) == p2
    assert lerp_point(p1, None, 0.5) == p1
    assert lerp_point(None, None, 0.5) is None


def test_collinearity():
    assert is_collinear(Point(0, 0), Point(50, 2), Point(100, 0), tolerance=25)
    assert not is_collinear(Point(0, 0), Point(50, 50), Point(100, 0), tolerance=25)


def test_angle_between():
    assert angle_between(Point(1, 0), Point(0, 0), Point(0, 1)) == pytest.approx(90)
    assert angle_between(Point(-1, 0), Point(0, 0), Point(1, 0)) == pytest.approx(180, abs=0.05)


def test_joint_angles(standing_pose):
    angles = compute_joint_angles(standing_pose)
    assert set(angles) == {'left_elbow', 'right_elbow', 'left_knee', 'right_knee',
                           'left_shoulder', 'right_shoulder'}
    assert angles['left_knee'] == pytest.approx(180, abs=1)

    standing_pose[P.LEFT_WRIST] = None
    assert compute_joint_angles(standing_pose)['left_elbow'] is None


def test_points_to_array(standing_pose):
    array = points_to_array(standing_pose)
    assert array.shape == (33, 3)
    assert list(array[P.NOSE]) == [320, 70, 1]
    assert list(array[P.LEFT_EYE]) == [0, 0, 0]
