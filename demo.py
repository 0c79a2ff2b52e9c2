"""
Offline Pose Pipeline Demo

Runs a recorded (or synthetic) landmark sequence through the pose pipeline:
- Confidence filtering and pixel mapping
- EMA smoothing
- Optional arm IK
- Rule-based action labels per frame
- Optional JSON export of the recording log and .npy export of the skeletons

Input sequences are .npy arrays of shape (T, 33, C) with normalized x, y and
visibility in the last column; all-NaN frames mean no person was detected.
"""

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

import numpy as np
from tqdm import tqdm

from posepipe.capture.landmark_mapper import landmarks_from_sequence
from posepipe.capture.landmarks import BODY_PARTS, get_body_part_points
from posepipe.datasets.synthetic_poses import POSE_TEMPLATES, generate_sequence
from posepipe.inference.pipeline import PosePipeline
from posepipe.preprocessing.geometry import compute_joint_angles, points_to_array
from posepipe.utils.config import AppConfig, load_config
from posepipe.utils.logger import setup_logger
from posepipe.utils.recording import ActionRecorder


def run_sequence(pipeline: PosePipeline, sequence: np.ndarray, recorder: ActionRecorder, fps: float = 30.0):
    """
    Feed every frame through the pipeline and record the results.

    Returns:
        List of FrameResult, one per frame
    """
    results = []
    recorder.start(start_time=0.0)

    frames = landmarks_from_sequence(sequence)
    for t, (raw, frame) in enumerate(tqdm(zip(sequence, frames), total=len(frames), desc="Frames")):
        landmarks = frame if np.isfinite(raw).any() else None
        result = pipeline.process(landmarks)
        recorder.record(result, now=t / fps)
        results.append(result)

    recorder.stop(stop_time=len(sequence) / fps)
    return results


def body_part_coverage(results) -> dict:
    """Fraction of frames in which each body part is fully present."""
    coverage = {}
    frames = [r.points for r in results if r.points is not None]
    for part in BODY_PARTS:
        if not frames:
            coverage[part] = 0.0
            continue
        complete = sum(all(p is not None for p in get_body_part_points(points, part)) for points in frames)
        coverage[part] = complete / len(frames)
    return coverage


def mean_joint_angles(results) -> dict:
    """Average angle per joint over the frames where the joint is present."""
    samples = {}
    for r in results:
        if r.points is None:
            continue
        for joint, angle in compute_joint_angles(r.points).items():
            if angle is not None:
                samples.setdefault(joint, []).append(angle)
    return {joint: float(np.mean(angles)) for joint, angles in samples.items()}


def results_to_array(results) -> np.ndarray:
    """Stack final PointArrays into a (T, 33, 3) [x, y, present] array."""
    return np.stack([points_to_array(r.points or []) for r in results])


def main():
    parser = argparse.ArgumentParser(description='Offline Pose Pipeline Demo')
    parser.add_argument('--config', type=str, default=None,
                       help='Path to config file')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--sequence', type=str,
                       help='Path to a (T, 33, C) .npy landmark sequence')
    source.add_argument('--synthetic', type=str, choices=sorted(POSE_TEMPLATES),
                       help='Generate a synthetic sequence for this pose')
    parser.add_argument('--frames', type=int, default=90,
                       help='Frames to generate for --synthetic')
    parser.add_argument('--fps', type=float, default=30.0,
                       help='Frame rate used for recording timestamps')
    parser.add_argument('--output', type=str, default=None,
                       help='Write the recording log as JSON')
    parser.add_argument('--points-output', type=str, default=None,
                       help='Save the final skeletons as a (T, 33, 3) .npy array')
    args = parser.parse_args()

    # Check if files exist
    if args.config and not Path(args.config).exists():
        print(f"❌ Config file not found: {args.config}")
        sys.exit(1)

    if args.sequence and not Path(args.sequence).exists():
        print(f"❌ Sequence file not found: {args.sequence}")
        sys.exit(1)

    config = load_config(args.config) if args.config else AppConfig()
    logger = setup_logger('Demo', config.logging.log_dir, config.logging.level)

    if args.sequence:
        sequence = np.load(args.sequence)
        logger.info(f"Loaded {len(sequence)} frames from {args.sequence}")
    else:
        sequence = generate_sequence(args.synthetic, num_frames=args.frames, dropout_rate=0.05)
        logger.info(f"Generated {len(sequence)} synthetic '{args.synthetic}' frames")

    pipeline_config = config.pipeline
    logger.info(f"Ruleset: {pipeline_config.ruleset}, alpha: {pipeline_config.alpha}, "
                f"mirror: {pipeline_config.mirror}, IK: {pipeline_config.ik_enabled}")

    pipeline = PosePipeline(pipeline_config)
    recorder = ActionRecorder()
    results = run_sequence(pipeline, sequence, recorder, fps=args.fps)

    # Summary
    counts = Counter(r.action for r in results)
    print("\n" + "="*60)
    print("📊 ACTION SUMMARY")
    print("="*60)
    for label, count in counts.most_common():
        print(f"{label:<25} {count:>6} ({count / len(results):.1%})")

    print("\n📋 Body part coverage:")
    for part, fraction in body_part_coverage(results).items():
        print(f"   {part:<12} {fraction:.1%}")

    print("\n📐 Mean joint angles:")
    for joint, angle in mean_joint_angles(results).items():
        print(f"   {joint:<15} {angle:6.1f}°")
    print("="*60 + "\n")

    if args.output:
        export = recorder.export(f"{pipeline_config.width}x{pipeline_config.height}")
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump(export, f, indent=2)
        logger.info(f"Recording saved: {args.output}")

    if args.points_output:
        Path(args.points_output).parent.mkdir(parents=True, exist_ok=True)
        np.save(args.points_output, results_to_array(results))
        logger.info(f"Skeletons saved: {args.points_output}")


if __name__ == '__main__':
    main()
