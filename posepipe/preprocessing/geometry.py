"""Point Geometry Utilities"""
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from posepipe.capture.landmarks import NUM_LANDMARKS, PoseLandmark


@dataclass(frozen=True)
class Point:
    """A single landmark in pixel space."""
    x: float
    y: float


# A PointArray is a list of 33 Optional[Point]; absent slots are None.
PointArray = List[Optional[Point]]


def distance(p1: Optional[Point], p2: Optional[Point]) -> float:
    """Euclidean distance; 0 if either point is absent."""
    if p1 is None or p2 is None:
        return 0.0
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def subtract(p1: Point, p2: Point) -> Point:
    return Point(p1.x - p2.x, p1.y - p2.y)


def add(p1: Point, p2: Point) -> Point:
    return Point(p1.x + p2.x, p1.y + p2.y)


def scale(p: Point, scalar: float) -> Point:
    return Point(p.x * scalar, p.y * scalar)


def normalize(p: Point) -> Point:
    """Unit vector in the direction of p; the zero vector stays zero."""
    mag = math.hypot(p.x, p.y)
    if mag == 0:
        return Point(0.0, 0.0)
    return Point(p.x / mag, p.y / mag)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2.0, (p1.y + p2.y) / 2.0)


def angle_diff(a1: float, a2: float) -> float:
    """Signed difference a2 - a1 wrapped into [-pi, pi]."""
    diff = a2 - a1
    while diff < -math.pi:
        diff += 2 * math.pi
    while diff > math.pi:
        diff -= 2 * math.pi
    return diff


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_point(p1: Optional[Point], p2: Optional[Point], t: float) -> Optional[Point]:
    """
    Interpolate from p1 towards p2.

    With one side absent the other side is returned; with both absent
    the result is absent.
    """
    if p1 is None:
        return p2
    if p2 is None:
        return p1
    return Point(lerp(p1.x, p2.x, t), lerp(p1.y, p2.y, t))


def is_collinear(a: Point, b: Point, c: Point, tolerance: float) -> bool:
    """
    True if the path a -> b -> c is almost as short as the segment a -> c,
    i.e. b deviates only slightly from the a-c line.
    """
    return distance(a, b) + distance(b, c) - distance(a, c) < tolerance


def angle_between(p1: Point, p2: Point, p3: Point) -> float:
    """Calculate angle at p2 formed by p1-p2-p3, in degrees."""
    v1 = np.array([p1.x - p2.x, p1.y - p2.y])
    v2 = np.array([p3.x - p2.x, p3.y - p2.y])

    cos_angle = np.dot(v1, v2) / (np.linalg.norm(v1) * np.linalg.norm(v2) + 1e-8)
    return float(np.degrees(np.arccos(np.clip(cos_angle, -1.0, 1.0))))


_JOINT_TRIPLES = {
    'left_elbow': (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST),
    'right_elbow': (PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST),
    'left_knee': (PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE),
    'right_knee': (PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_KNEE, PoseLandmark.RIGHT_ANKLE),
    'left_shoulder': (PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW),
    'right_shoulder': (PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW),
}


def compute_joint_angles(points: Sequence[Optional[Point]]) -> Dict[str, Optional[float]]:
    """
    Compute angles at major joints.

    Args:
        points: PointArray

    Returns:
        Dictionary of angles in degrees, None where a joint is missing
    """
    angles = {}
    for name, (a, b, c) in _JOINT_TRIPLES.items():
        if max(a, b, c) >= len(points) or None in (points[a], points[b], points[c]):
            angles[name] = None
        else:
            angles[name] = angle_between(points[a], points[b], points[c])
    return angles


def points_to_array(points: Sequence[Optional[Point]]) -> np.ndarray:
    """
    Convert a PointArray to a (33, 3) array of [x, y, present].

    Absent slots become [0, 0, 0].
    """
    array = np.zeros((NUM_LANDMARKS, 3))
    for i, point in enumerate(points[:NUM_LANDMARKS]):
        if point is not None:
            array[i] = [point.x, point.y, 1.0]
    return array
