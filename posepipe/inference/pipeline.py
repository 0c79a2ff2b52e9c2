"""
Per-Frame Pose Pipeline

raw landmarks -> confidence filter -> pixel mapping -> EMA smoothing
-> (optional) arm IK -> action label
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from posepipe.capture.landmark_mapper import filter_by_visibility, map_landmarks
from posepipe.inference.action_classifier import UNKNOWN, ActionClassifier
from posepipe.preprocessing.geometry import Point, PointArray
from posepipe.preprocessing.ik_solver import apply_ik
from posepipe.preprocessing.smoother import TemporalSmoother
from posepipe.utils.config import PipelineConfig

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round halves up: 10.5 -> 11, -10.5 -> -10."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class FrameResult:
    points: Optional[PointArray]
    action: str

    def to_record(self, timestamp_ms: int) -> Dict[str, Any]:
        """Per-frame entry for a recording log."""
        pose = None
        if self.points is not None:
            pose = [
                {'x': round_half_up(p.x), 'y': round_half_up(p.y)} if p is not None else None
                for p in self.points
            ]
        return {'timestamp': int(timestamp_ms), 'action': self.action, 'pose': pose}


class PosePipeline:
    """
    Runs one frame at a time through mapping, smoothing, IK and classification.

    Owns its smoother, so frames must be fed serially.
    """
    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.smoother = TemporalSmoother(self.config.alpha)
        self.classifier = ActionClassifier(self.config.ruleset, self.config.thresholds)

    def process(self, landmarks: Any, width: Optional[int] = None, height: Optional[int] = None) -> FrameResult:
        """
        Process one detection.

        Args:
            landmarks: 33 normalized landmarks, or None if no person was detected
            width: Canvas width (defaults to config)
            height: Canvas height (defaults to config)

        Returns:
            FrameResult with the final PointArray and action label
        """
        if landmarks is None:
            return FrameResult(points=None, action=UNKNOWN)

        visible = filter_by_visibility(landmarks, self.config.confidence_threshold)
        points = map_landmarks(
            visible,
            self.config.width if width is None else width,
            self.config.height if height is None else height,
            mirror=self.config.mirror
        )

        smoothed = self.smoother.smooth(points)
        pose = apply_ik(smoothed) if self.config.ik_enabled else list(smoothed)

        return FrameResult(points=pose, action=self.classifier.classify(pose))

    def set_alpha(self, value: float):
        self.smoother.set_alpha(value)

    def recalibrate(self):
        """Drop smoothing history; the next frame starts fresh."""
        logger.debug("Smoother reset")
        self.smoother.reset()

    def fallback_point(self, index: int) -> Optional[Point]:
        """Last smoothed position of one landmark, if any."""
        return self.smoother.get_previous_at(index)
