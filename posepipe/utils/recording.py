"""Action Recording"""
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from posepipe.inference.pipeline import FrameResult, round_half_up


class ActionRecorder:
    """
    In-memory per-frame log of poses and action labels.

    Timestamps are milliseconds since start(). Writing the export anywhere
    is up to the caller.
    """
    def __init__(self):
        self.frames: List[Dict[str, Any]] = []
        self._start_time: Optional[float] = None
        self._stop_time: Optional[float] = None

    @property
    def is_recording(self) -> bool:
        return self._start_time is not None and self._stop_time is None

    def start(self, start_time: Optional[float] = None):
        self.frames = []
        self._start_time = time.perf_counter() if start_time is None else start_time
        self._stop_time = None

    def stop(self, stop_time: Optional[float] = None):
        if not self.is_recording:
            raise RuntimeError("Recorder is not running")
        self._stop_time = time.perf_counter() if stop_time is None else stop_time

    def record(self, result: FrameResult, now: Optional[float] = None) -> Dict[str, Any]:
        if not self.is_recording:
            raise RuntimeError("Call start() before recording frames")

        now = time.perf_counter() if now is None else now
        entry = result.to_record(round_half_up((now - self._start_time) * 1000))
        self.frames.append(entry)
        return entry

    def duration_ms(self) -> int:
        if self._start_time is None:
            return 0
        end = self._stop_time if self._stop_time is not None else time.perf_counter()
        return round_half_up((end - self._start_time) * 1000)

    def export(self, source_resolution: str) -> Dict[str, Any]:
        """Recording as a JSON-serializable dict."""
        return {
            'metadata': {
                'date': datetime.now().isoformat(),
                'duration_ms': self.duration_ms(),
                'source_resolution': source_resolution,
                'frame_count': len(self.frames),
            },
            'frames': list(self.frames),
        }
