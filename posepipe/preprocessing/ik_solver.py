"""
Two-Bone Inverse Kinematics

Closed-form shoulder -> elbow -> wrist solve. Bone lengths are measured from
the current frame, so the solver tracks whatever skeleton the detector sees.
"""

import math
from typing import NamedTuple, Optional, Sequence

import numpy as np

from posepipe.capture.landmarks import ARM_CHAINS, NUM_LANDMARKS
from posepipe.preprocessing.geometry import (
    Point, PointArray, add, distance, normalize, scale, subtract
)

EPSILON = 1e-6


class ArmSolution(NamedTuple):
    elbow: Point
    wrist: Point


def solve_arm_ik(
    shoulder: Optional[Point],
    elbow: Optional[Point],
    wrist: Optional[Point],
    target: Optional[Point] = None
) -> Optional[ArmSolution]:
    """
    Solve a 2-bone IK chain.

    Args:
        shoulder: Root joint
        elbow: Middle joint
        wrist: End effector; with `target` it only defines the forearm length
        target: Position the wrist reaches for (defaults to `wrist`)

    Returns:
        New elbow and wrist positions, or None if any joint is absent or
        the solve overflows
    """
    if shoulder is None or elbow is None or wrist is None:
        return None

    l1 = distance(shoulder, elbow)  # Upper arm
    l2 = distance(elbow, wrist)  # Forearm

    if target is None:
        target = wrist
    dist = distance(shoulder, target)
    if not (math.isfinite(l1 + l2) and math.isfinite(dist)):
        return None

    # Unreachable: reach as far as possible towards the target
    if dist > l1 + l2:
        direction = normalize(subtract(target, shoulder))
        target = add(shoulder, scale(direction, l1 + l2))
        dist = l1 + l2

    if dist < EPSILON or l1 < EPSILON:
        return _finite_or_none(ArmSolution(elbow=Point(shoulder.x + l1, shoulder.y), wrist=target))

    # Law of cosines
    cos_offset = (l1 * l1 + dist * dist - l2 * l2) / (2 * l1 * dist)
    offset = float(np.arccos(np.clip(cos_offset, -1.0, 1.0)))
    heading = math.atan2(target.y - shoulder.y, target.x - shoulder.x)

    new_elbow = Point(
        shoulder.x + l1 * math.cos(heading - offset),
        shoulder.y + l1 * math.sin(heading - offset)
    )
    return _finite_or_none(ArmSolution(elbow=new_elbow, wrist=target))


def _finite_or_none(solution: ArmSolution) -> Optional[ArmSolution]:
    # Squared bone lengths can still overflow near the float limit
    if all(math.isfinite(v) for p in solution for v in (p.x, p.y)):
        return solution
    return None


def apply_ik(points: Sequence[Optional[Point]]) -> PointArray:
    """
    Apply IK to both arm chains.

    Args:
        points: PointArray

    Returns:
        New PointArray with elbows and wrists replaced where a solve succeeded
    """
    result = list(points)
    if len(result) < NUM_LANDMARKS:
        return result

    for shoulder_idx, elbow_idx, wrist_idx in ARM_CHAINS.values():
        solution = solve_arm_ik(points[shoulder_idx], points[elbow_idx], points[wrist_idx])
        if solution is not None:
            result[elbow_idx] = solution.elbow
            result[wrist_idx] = solution.wrist

    return result
