import pytest

from posepipe.capture.landmarks import NUM_LANDMARKS, PoseLandmark as P
from posepipe.preprocessing.geometry import Point

# Neutral standing pose in a 640x480 frame, subject facing the camera
STANDING = {
    P.NOSE: (320, 70),
    P.LEFT_SHOULDER: (370, 140), P.RIGHT_SHOULDER: (270, 140),
    P.LEFT_ELBOW: (385, 205), P.RIGHT_ELBOW: (255, 205),
    P.LEFT_WRIST: (405, 262), P.RIGHT_WRIST: (235, 262),
    P.LEFT_HIP: (350, 270), P.RIGHT_HIP: (290, 270),
    P.LEFT_KNEE: (352, 360), P.RIGHT_KNEE: (288, 360),
    P.LEFT_ANKLE: (354, 450), P.RIGHT_ANKLE: (286, 450),
}


def build_pose(overrides=None, base=STANDING, dy=0.0):
    """PointArray from the base pose, with per-landmark overrides (None removes)."""
    joints = dict(base)
    joints.update(overrides or {})
    points = [None] * NUM_LANDMARKS
    for index, xy in joints.items():
        if xy is not None:
            points[int(index)] = Point(float(xy[0]), float(xy[1]) + dy)
    return points


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def standing_pose():
    return build_pose()
