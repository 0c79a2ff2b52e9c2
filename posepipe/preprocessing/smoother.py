"""Temporal Smoothing"""
from typing import Optional, Sequence

from posepipe.preprocessing.geometry import Point, PointArray, lerp_point


class TemporalSmoother:
    """
    Exponential moving average over PointArrays.

    Higher alpha trusts the new frame more (more responsive, less smoothing).
    A point missing from the new frame holds its last smoothed position; a
    point missing from the history is adopted as-is.

    Not thread-safe: call smooth() from a single producer.
    """
    def __init__(self, alpha: float = 0.3):
        self.alpha = _clamp_alpha(alpha)
        self._previous: Optional[PointArray] = None

    @property
    def is_initialized(self) -> bool:
        return self._previous is not None

    @property
    def current(self) -> Optional[PointArray]:
        """Copy of the stored state, or None before the first frame."""
        if self._previous is None:
            return None
        return list(self._previous)

    def set_alpha(self, value: float):
        self.alpha = _clamp_alpha(value)

    def reset(self):
        """Return to cold start (used for recalibration)."""
        self._previous = None

    def get_previous_at(self, index: int) -> Optional[Point]:
        if self._previous is None or not 0 <= index < len(self._previous):
            return None
        return self._previous[index]

    def smooth(self, current: Sequence[Optional[Point]]) -> PointArray:
        """Blend a new frame against the smoothed history."""
        if self._previous is None:
            self._previous = list(current)
            return current

        previous = self._previous
        smoothed = [
            lerp_point(previous[i] if i < len(previous) else None, point, self.alpha)
            for i, point in enumerate(current)
        ]

        self._previous = smoothed
        return list(smoothed)


def _clamp_alpha(value: float) -> float:
    return max(0.0, min(1.0, float(value)))
