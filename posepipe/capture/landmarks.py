"""Pose Landmark Taxonomy

MediaPipe BlazePose reports 33 landmarks in a fixed order. Every component
indexes points by position using the table below.
"""
from enum import IntEnum
from typing import Dict, List, Optional, Sequence


class PoseLandmark(IntEnum):
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(PoseLandmark)

LANDMARK_NAMES: List[str] = [landmark.name.lower() for landmark in PoseLandmark]

# (shoulder, elbow, wrist) per side
ARM_CHAINS = {
    'left': (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST),
    'right': (PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST),
}

# Key body part groups
BODY_PARTS: Dict[str, List[int]] = {
    'face': list(range(0, 11)),
    'upper_body': [11, 12, 13, 14, 15, 16, 23, 24],
    'arms': [11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22],
    'lower_body': [23, 24, 25, 26, 27, 28, 29, 30, 31, 32],
}


def get_body_part_points(points: Sequence, body_part: str) -> List[Optional[object]]:
    """
    Get the entries of a PointArray belonging to one body part.

    Args:
        points: PointArray (33 entries, absent slots as None)
        body_part: 'face', 'upper_body', 'arms', or 'lower_body'

    Returns:
        Entries for the specified body part, in index order
    """
    if body_part not in BODY_PARTS:
        raise ValueError(f"Unknown body part: {body_part}")

    return [points[i] if i < len(points) else None for i in BODY_PARTS[body_part]]
