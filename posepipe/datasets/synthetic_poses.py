"""
Generate Synthetic Landmark Sequences for Testing

Creates fake but valid 33-landmark sequences for quick testing without a
camera or a pose model. Templates are drawn in a 640x480 reference frame
(subject facing the camera, unmirrored) and emitted as normalized
[x, y, visibility] rows, the layout the pose model hands to the pipeline.
"""

from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
from tqdm import tqdm

from posepipe.capture.landmarks import NUM_LANDMARKS, PoseLandmark as P

REFERENCE_SIZE = (640, 480)

# Base pose (standing neutral), pixel coordinates in the reference frame
_STANDING: Dict[int, Tuple[float, float]] = {
    P.NOSE: (320, 70),
    P.LEFT_EYE: (333, 60), P.RIGHT_EYE: (307, 60),
    P.LEFT_EAR: (345, 68), P.RIGHT_EAR: (295, 68),
    P.MOUTH_LEFT: (328, 85), P.MOUTH_RIGHT: (312, 85),
    P.LEFT_SHOULDER: (370, 140), P.RIGHT_SHOULDER: (270, 140),
    P.LEFT_ELBOW: (385, 205), P.RIGHT_ELBOW: (255, 205),
    P.LEFT_WRIST: (405, 262), P.RIGHT_WRIST: (235, 262),
    P.LEFT_HIP: (350, 270), P.RIGHT_HIP: (290, 270),
    P.LEFT_KNEE: (352, 360), P.RIGHT_KNEE: (288, 360),
    P.LEFT_ANKLE: (354, 450), P.RIGHT_ANKLE: (286, 450),
}

# Overrides applied on top of the standing pose
POSE_TEMPLATES: Dict[str, Dict[int, Tuple[float, float]]] = {
    'standing': {},
    'hands_up': {
        P.LEFT_ELBOW: (430, 90), P.RIGHT_ELBOW: (210, 90),
        P.LEFT_WRIST: (395, 25), P.RIGHT_WRIST: (245, 25),
    },
    't_pose': {
        P.LEFT_ELBOW: (420, 140), P.RIGHT_ELBOW: (220, 140),
        P.LEFT_WRIST: (470, 140), P.RIGHT_WRIST: (170, 140),
    },
    'sitting': {
        P.LEFT_KNEE: (352, 282), P.RIGHT_KNEE: (288, 282),
        P.LEFT_ANKLE: (358, 372), P.RIGHT_ANKLE: (282, 372),
    },
    'leaning_left': {
        P.NOSE: (380, 70),
        P.LEFT_EYE: (393, 60), P.RIGHT_EYE: (367, 60),
        P.LEFT_EAR: (405, 68), P.RIGHT_EAR: (355, 68),
        P.MOUTH_LEFT: (388, 85), P.MOUTH_RIGHT: (372, 85),
        P.LEFT_SHOULDER: (430, 140), P.RIGHT_SHOULDER: (330, 140),
    },
}


def template_pixels(pose: str) -> np.ndarray:
    """
    Pixel coordinates of a template.

    Returns:
        (33, 2) array; landmarks the template does not place are NaN
    """
    if pose not in POSE_TEMPLATES:
        raise ValueError(f"Unknown pose template: {pose}")

    pixels = np.full((NUM_LANDMARKS, 2), np.nan)
    for index, xy in {**_STANDING, **POSE_TEMPLATES[pose]}.items():
        pixels[int(index)] = xy
    return pixels


def generate_sequence(
    pose: str = 'standing',
    num_frames: int = 60,
    noise_px: float = 1.5,
    dropout_rate: float = 0.0,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Generate a synthetic landmark sequence.

    Args:
        pose: Template name (see POSE_TEMPLATES)
        num_frames: Number of frames in sequence
        noise_px: Std of the Gaussian jitter, in reference pixels
        dropout_rate: Per-landmark probability of a low-visibility frame
        rng: Random generator (for reproducible sequences)

    Returns:
        Sequence array of shape (num_frames, 33, 3): normalized x, y, visibility.
        Landmarks the template does not place are NaN with visibility 0.
    """
    rng = rng if rng is not None else np.random.default_rng()
    width, height = REFERENCE_SIZE
    base = template_pixels(pose)
    placed = np.isfinite(base[:, 0])

    sequence = np.zeros((num_frames, NUM_LANDMARKS, 3))
    for t in range(num_frames):
        frame = base + rng.normal(0.0, noise_px, size=base.shape)

        sequence[t, :, 0] = frame[:, 0] / width
        sequence[t, :, 1] = frame[:, 1] / height

        # High confidence values, with random dropouts
        visibility = rng.uniform(0.85, 0.98, NUM_LANDMARKS)
        dropped = rng.random(NUM_LANDMARKS) < dropout_rate
        visibility[dropped] = rng.uniform(0.0, 0.3, int(dropped.sum()))
        visibility[~placed] = 0.0
        sequence[t, :, 2] = visibility

    return sequence


def generate_dataset(
    output_dir: str = 'data/synthetic',
    samples_per_pose: int = 10,
    num_frames: int = 60,
    dropout_rate: float = 0.05,
    seed: Optional[int] = None
) -> Dict[str, int]:
    """
    Generate labelled synthetic sequences as .npy files.

    Files are named <pose>_<sample>.npy.

    Returns:
        Number of files written per pose
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(seed)

    counts = {}
    for pose in POSE_TEMPLATES:
        for sample_id in tqdm(range(samples_per_pose), desc=f"  {pose:<12}"):
            sequence = generate_sequence(pose, num_frames, dropout_rate=dropout_rate, rng=rng)
            np.save(output_path / f"{pose}_{sample_id:04d}.npy", sequence)
        counts[pose] = samples_per_pose

    return counts


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Generate Synthetic Landmark Sequences')
    parser.add_argument('--output', type=str, default='data/synthetic',
                       help='Output directory')
    parser.add_argument('--samples', type=int, default=10,
                       help='Samples per pose')
    parser.add_argument('--frames', type=int, default=60,
                       help='Frames per sample')
    parser.add_argument('--seed', type=int, default=None,
                       help='Random seed')
    args = parser.parse_args()

    counts = generate_dataset(
        output_dir=args.output,
        samples_per_pose=args.samples,
        num_frames=args.frames,
        seed=args.seed
    )
    print(f"Generated {sum(counts.values())} sequences in {args.output}")
