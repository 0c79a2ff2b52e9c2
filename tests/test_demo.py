import numpy as np
import pytest

from demo import mean_joint_angles, results_to_array, run_sequence
from posepipe.capture.landmarks import PoseLandmark as P
from posepipe.datasets.synthetic_poses import generate_sequence
from posepipe.inference.pipeline import FrameResult, PosePipeline
from posepipe.utils.recording import ActionRecorder


def test_run_sequence_records_every_frame():
    sequence = generate_sequence('t_pose', num_frames=12, rng=np.random.default_rng(2))
    sequence[5] = np.nan
    recorder = ActionRecorder()

    results = run_sequence(PosePipeline(), sequence, recorder, fps=10.0)

    assert len(results) == 12
    assert results[5].action == 'unknown'
    assert results[5].points is None
    assert sum(r.action == 't_pose' for r in results) >= 9
    assert [f['timestamp'] for f in recorder.frames[:3]] == [0, 100, 200]
    assert recorder.duration_ms() == 1200


def test_mean_joint_angles(standing_pose):
    results = [FrameResult(standing_pose, 'standing'), FrameResult(None, 'unknown')]

    angles = mean_joint_angles(results)

    assert angles['left_knee'] == pytest.approx(180, abs=1)
    assert set(angles) >= {'left_elbow', 'right_elbow'}


def test_results_to_array(standing_pose):
    array = results_to_array([FrameResult(standing_pose, 'standing'), FrameResult(None, 'unknown')])

    assert array.shape == (2, 33, 3)
    assert list(array[0, P.NOSE]) == [320, 70, 1]
    assert not array[1].any()
