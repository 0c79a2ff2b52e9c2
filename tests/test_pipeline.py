from collections import Counter

import numpy as np
import pytest

from posepipe.capture.landmarks import PoseLandmark as P
from posepipe.datasets.synthetic_poses import POSE_TEMPLATES, generate_sequence
from posepipe.inference.pipeline import FrameResult, PosePipeline, round_half_up
from posepipe.preprocessing.geometry import Point, distance
from posepipe.utils.config import PipelineConfig


def to_landmarks(points, width=640, height=480, visibility=0.9):
    return [
        {'x': p.x / width, 'y': p.y / height, 'visibility': visibility} if p is not None else None
        for p in points
    ]


@pytest.fixture
def pipeline():
    return PosePipeline(PipelineConfig(mirror=False))


def test_no_detection_is_unknown(pipeline):
    result = pipeline.process(None)
    assert result.points is None
    assert result.action == 'unknown'


def test_standing_frame(pipeline, standing_pose):
    result = pipeline.process(to_landmarks(standing_pose))

    assert result.action == 'standing'
    assert len(result.points) == 33
    assert result.points[P.NOSE].x == pytest.approx(320)
    assert result.points[P.LEFT_EYE] is None


def test_low_confidence_landmarks_are_dropped(pipeline, standing_pose):
    landmarks = to_landmarks(standing_pose)
    landmarks[P.NOSE]['visibility'] = 0.1

    result = pipeline.process(landmarks)

    assert result.points[P.NOSE] is None
    assert result.action == 'unknown'


def test_smoothing_holds_dropped_landmark(pipeline, standing_pose):
    pipeline.process(to_landmarks(standing_pose))
    landmarks = to_landmarks(standing_pose)
    landmarks[P.NOSE] = None

    result = pipeline.process(landmarks)

    assert result.points[P.NOSE].x == pytest.approx(320)
    assert result.action == 'standing'
    assert pipeline.fallback_point(P.NOSE).y == pytest.approx(70)


def test_smoothing_lags_behind_motion(standing_pose, make_pose):
    pipeline = PosePipeline(PipelineConfig(mirror=False, alpha=0.5))
    pipeline.process(to_landmarks(standing_pose))

    result = pipeline.process(to_landmarks(make_pose(dy=20)))

    assert result.points[P.NOSE].y == pytest.approx(80)


def test_mirror(standing_pose):
    pipeline = PosePipeline(PipelineConfig(mirror=True))
    result = pipeline.process(to_landmarks(standing_pose))

    assert result.points[P.LEFT_SHOULDER].x == pytest.approx(270)
    assert result.action == 'standing'


def test_canvas_override(pipeline, standing_pose):
    result = pipeline.process(to_landmarks(standing_pose), width=1280, height=960)
    assert result.points[P.NOSE].x == pytest.approx(640)


def test_ik_keeps_bone_lengths(standing_pose):
    pipeline = PosePipeline(PipelineConfig(mirror=False, ik_enabled=True))
    result = pipeline.process(to_landmarks(standing_pose))

    for shoulder, elbow, wrist in ((P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST),
                                   (P.RIGHT_SHOULDER, P.RIGHT_ELBOW, P.RIGHT_WRIST)):
        upper = distance(standing_pose[shoulder], standing_pose[elbow])
        lower = distance(standing_pose[elbow], standing_pose[wrist])
        assert distance(result.points[shoulder], result.points[elbow]) == pytest.approx(upper, abs=1e-6)
        assert distance(result.points[elbow], result.points[wrist]) == pytest.approx(lower, abs=1e-6)
        assert result.points[wrist].x == pytest.approx(standing_pose[wrist].x)


def test_result_does_not_alias_smoother_state(pipeline, standing_pose):
    result = pipeline.process(to_landmarks(standing_pose))
    result.points[P.NOSE] = None

    assert pipeline.fallback_point(P.NOSE) is not None


def test_recalibrate(standing_pose, make_pose):
    pipeline = PosePipeline(PipelineConfig(mirror=False, alpha=0.1))
    pipeline.process(to_landmarks(standing_pose))
    pipeline.recalibrate()

    assert pipeline.fallback_point(P.NOSE) is None
    result = pipeline.process(to_landmarks(make_pose(dy=20)))
    assert result.points[P.NOSE].y == pytest.approx(90)


def test_set_alpha(pipeline):
    pipeline.set_alpha(2.0)
    assert pipeline.smoother.alpha == 1.0


def test_minimal_ruleset(standing_pose):
    pipeline = PosePipeline(PipelineConfig(mirror=False, ruleset='minimal'))
    landmarks = to_landmarks(standing_pose)
    landmarks[P.NOSE] = None

    assert pipeline.process(landmarks).action == 'standing'


def test_accepts_keypoint_arrays():
    pipeline = PosePipeline()
    sequence = generate_sequence('standing', num_frames=1, rng=np.random.default_rng(0))

    result = pipeline.process(sequence[0])

    assert len(result.points) == 33
    assert result.action == 'standing'


@pytest.mark.parametrize('pose', sorted(POSE_TEMPLATES))
def test_synthetic_sequences_classify_as_template(pose):
    pipeline = PosePipeline()
    sequence = generate_sequence(pose, num_frames=30, rng=np.random.default_rng(7))

    labels = Counter(pipeline.process(frame).action for frame in sequence)

    assert labels[pose] >= 27


def test_to_record():
    result = FrameResult(points=[Point(10.4, 20.6), None], action='waving_left')

    assert result.to_record(1500) == {
        'timestamp': 1500,
        'action': 'waving_left',
        'pose': [{'x': 10, 'y': 21}, None],
    }
    assert FrameResult(points=None, action='unknown').to_record(0)['pose'] is None


def test_explicit_canvas_size_is_validated(pipeline, standing_pose):
    with pytest.raises(ValueError):
        pipeline.process(to_landmarks(standing_pose), width=0, height=480)
    with pytest.raises(ValueError):
        pipeline.process(to_landmarks(standing_pose), width=640, height=0)


def test_to_record_rounds_halves_up():
    result = FrameResult(points=[Point(10.5, 11.5), Point(0.49, 2.5)], action='standing')

    assert result.to_record(0)['pose'] == [{'x': 11, 'y': 12}, {'x': 0, 'y': 3}]
    assert round_half_up(-10.5) == -10
