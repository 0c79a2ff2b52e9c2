import json

import pytest

from posepipe.inference.pipeline import FrameResult
from posepipe.preprocessing.geometry import Point
from posepipe.utils.recording import ActionRecorder


def test_record_and_export():
    recorder = ActionRecorder()
    recorder.start(start_time=100.0)

    assert recorder.is_recording
    recorder.record(FrameResult([Point(1.2, 2.7), None], 'standing'), now=100.0)
    entry = recorder.record(FrameResult(None, 'unknown'), now=100.5)
    recorder.stop(stop_time=102.0)

    assert not recorder.is_recording
    assert entry == {'timestamp': 500, 'action': 'unknown', 'pose': None}

    export = recorder.export('640x480')
    assert export['metadata']['duration_ms'] == 2000
    assert export['metadata']['source_resolution'] == '640x480'
    assert export['metadata']['frame_count'] == 2
    assert export['frames'][0] == {'timestamp': 0, 'action': 'standing', 'pose': [{'x': 1, 'y': 3}, None]}

    # Export is JSON-serializable as is
    assert json.loads(json.dumps(export))['frames'][1]['action'] == 'unknown'


def test_record_before_start():
    with pytest.raises(RuntimeError):
        ActionRecorder().record(FrameResult(None, 'unknown'))


def test_stop_without_start():
    with pytest.raises(RuntimeError):
        ActionRecorder().stop()


def test_restart_clears_frames():
    recorder = ActionRecorder()
    recorder.start(start_time=0.0)
    recorder.record(FrameResult(None, 'unknown'), now=0.1)
    recorder.stop(stop_time=1.0)

    recorder.start(start_time=5.0)

    assert recorder.frames == []
    assert recorder.is_recording


def test_duration_before_start():
    assert ActionRecorder().duration_ms() == 0


def test_timestamps_round_halves_up():
    recorder = ActionRecorder()
    recorder.start(start_time=0.0)

    entry = recorder.record(FrameResult(None, 'unknown'), now=0.0625)
    recorder.stop(stop_time=0.0625)

    assert entry['timestamp'] == 63
    assert recorder.duration_ms() == 63
