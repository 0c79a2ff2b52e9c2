"""
Landmark Mapping Module

Projects normalized landmarks from a pose-estimation model (MediaPipe
BlazePose or anything shaped like it) into pixel space.

Accepted landmark entries:
- None (landmark not observed)
- objects with .x / .y attributes (and optionally .visibility)
- mappings with 'x' / 'y' keys (and optionally 'visibility')
- sequences or numpy rows (x, y, ...); when a row has 3 or more values the
  last one is the visibility score, as in (33, 3) [x, y, visibility] and
  (33, 4) [x, y, z, visibility] keypoint arrays
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from posepipe.capture.landmarks import NUM_LANDMARKS
from posepipe.preprocessing.geometry import Point, PointArray

logger = logging.getLogger(__name__)


def _read_xy(landmark: Any) -> Optional[Tuple[float, float]]:
    if landmark is None:
        return None

    if isinstance(landmark, Mapping):
        if 'x' not in landmark or 'y' not in landmark:
            return None
        x, y = landmark['x'], landmark['y']
    elif hasattr(landmark, 'x') and hasattr(landmark, 'y'):
        x, y = landmark.x, landmark.y
    else:
        row = np.asarray(landmark, dtype=float).reshape(-1)
        if row.shape[0] < 2:
            return None
        x, y = row[0], row[1]

    x, y = float(x), float(y)
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return x, y


def _read_visibility(landmark: Any) -> float:
    if isinstance(landmark, Mapping):
        visibility = landmark.get('visibility')
        return 1.0 if visibility is None else float(visibility)
    if hasattr(landmark, 'x') and hasattr(landmark, 'y'):
        visibility = getattr(landmark, 'visibility', None)
        return 1.0 if visibility is None else float(visibility)

    row = np.asarray(landmark, dtype=float).reshape(-1)
    if row.shape[0] >= 3:
        return float(row[-1])
    return 1.0


def _as_entries(landmarks: Any) -> List[Any]:
    if landmarks is None:
        return []
    if isinstance(landmarks, np.ndarray):
        if landmarks.ndim != 2 or landmarks.shape[1] < 2:
            raise ValueError(f"Expected an (N, C>=2) landmark array, got shape {landmarks.shape}")
        return list(landmarks)
    # MediaPipe NormalizedLandmarkList
    if hasattr(landmarks, 'landmark'):
        return list(landmarks.landmark)
    return list(landmarks)


def filter_by_visibility(landmarks: Any, threshold: float = 0.5) -> List[Any]:
    """
    Replace low-visibility landmarks with None.

    Args:
        landmarks: landmark sequence or (N, C) array
        threshold: Min visibility threshold

    Returns:
        List of the same length, low-visibility entries set to None
    """
    filtered = []
    for landmark in _as_entries(landmarks):
        if landmark is None or _read_visibility(landmark) < threshold:
            filtered.append(None)
        else:
            filtered.append(landmark)
    return filtered


def map_landmarks(
    landmarks: Any,
    width: int,
    height: int,
    mirror: bool = True
) -> PointArray:
    """
    Convert normalized landmarks to pixel coordinates.

    Args:
        landmarks: Sequence of normalized landmarks (0-1), absent as None
        width: Canvas width in pixels
        height: Canvas height in pixels
        mirror: Flip horizontally for a natural selfie view

    Returns:
        PointArray of exactly 33 entries
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")

    entries = _as_entries(landmarks)
    if len(entries) > NUM_LANDMARKS:
        logger.debug("Truncating %d landmarks to %d", len(entries), NUM_LANDMARKS)

    points: PointArray = []
    for i in range(NUM_LANDMARKS):
        xy = _read_xy(entries[i]) if i < len(entries) else None
        if xy is None:
            points.append(None)
            continue

        x = xy[0] * width
        y = xy[1] * height
        if mirror:
            x = width - x
        # Huge normalized values overflow once scaled
        if not (math.isfinite(x) and math.isfinite(y)):
            points.append(None)
            continue
        points.append(Point(x, y))

    return points


def landmarks_from_sequence(frames: Sequence[Any]) -> List[List[Any]]:
    """Split a (T, 33, C) array or nested list into per-frame landmark lists."""
    return [_as_entries(frame) for frame in frames]
