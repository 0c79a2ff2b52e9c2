"""
Rule-Based Action Classification

Maps one PointArray (pixel space, larger y = lower on screen) to a single
action label. Rules are evaluated top to bottom and the first match wins, so
specific poses are listed before general ones. If nothing matches the pose is
'standing'; if a required landmark is missing it is 'unknown'.

Two rulesets are available:
- 'full': whole-body actions, then upper-body gestures, then posture
- 'minimal': sitting / kicking / picking / hands up / turned sideways
"""

from functools import partial
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from posepipe.capture.landmarks import NUM_LANDMARKS, PoseLandmark as P
from posepipe.inference.thresholds import ActionThresholds
from posepipe.preprocessing.geometry import (
    Point, angle_between, distance, is_collinear, midpoint
)

UNKNOWN = 'unknown'
STANDING = 'standing'


class Limb(NamedTuple):
    """Joints of one body side."""
    shoulder: Point
    elbow: Optional[Point]
    wrist: Point
    hip: Point
    knee: Point
    ankle: Optional[Point]
    outward: float  # +1/-1: image x direction pointing away from the body midline


class Body:
    """Named view of a PointArray with derived measurements."""
    def __init__(self, pose: Sequence[Optional[Point]]):
        self.nose = pose[P.NOSE]
        left_shoulder, right_shoulder = pose[P.LEFT_SHOULDER], pose[P.RIGHT_SHOULDER]

        # Body-relative left/right, so mirroring the image does not change labels
        self.left_sign = 1.0 if left_shoulder.x >= right_shoulder.x else -1.0

        self.left = Limb(
            left_shoulder, pose[P.LEFT_ELBOW], pose[P.LEFT_WRIST],
            pose[P.LEFT_HIP], pose[P.LEFT_KNEE], pose[P.LEFT_ANKLE], self.left_sign
        )
        self.right = Limb(
            right_shoulder, pose[P.RIGHT_ELBOW], pose[P.RIGHT_WRIST],
            pose[P.RIGHT_HIP], pose[P.RIGHT_KNEE], pose[P.RIGHT_ANKLE], -self.left_sign
        )

        self.shoulder_mid = midpoint(self.left.shoulder, self.right.shoulder)
        self.hip_mid = midpoint(self.left.hip, self.right.hip)
        self.shoulder_width = abs(self.left.shoulder.x - self.right.shoulder.x)
        self.hip_width = abs(self.left.hip.x - self.right.hip.x)
        self.torso_height = self.hip_mid.y - self.shoulder_mid.y

    def limbs(self, side: str) -> Tuple[Limb, Limb]:
        """(this side, other side)"""
        if side == 'left':
            return self.left, self.right
        return self.right, self.left

    @property
    def ankle_spread(self) -> float:
        return abs(self.left.ankle.x - self.right.ankle.x)

    @property
    def wrist_gap(self) -> float:
        return distance(self.left.wrist, self.right.wrist)


Predicate = Callable[[Body, ActionThresholds], bool]


# ---------- Shared measurements ----------

def _thigh_drop(limb: Limb) -> float:
    return limb.knee.y - limb.hip.y


def _arm_straight(limb: Limb, t: ActionThresholds) -> bool:
    return is_collinear(limb.shoulder, limb.elbow, limb.wrist, t.collinear_tolerance)


def _arm_level(limb: Limb, t: ActionThresholds) -> bool:
    return abs(limb.wrist.y - limb.shoulder.y) < t.arm_level_tolerance


def _arm_extended(b: Body, limb: Limb, t: ActionThresholds) -> bool:
    return _arm_straight(limb, t) and _arm_level(limb, t)


def _arm_sideways(b: Body, limb: Limb, t: ActionThresholds) -> bool:
    reach = abs(limb.wrist.x - limb.shoulder.x)
    return _arm_extended(b, limb, t) and reach >= t.arm_extension_ratio * b.shoulder_width


def _arm_forward(b: Body, limb: Limb, t: ActionThresholds) -> bool:
    reach = abs(limb.wrist.x - limb.shoulder.x)
    return _arm_extended(b, limb, t) and reach < t.arm_extension_ratio * b.shoulder_width


def _wrist_above_head(b: Body, limb: Limb) -> bool:
    return limb.wrist.y < b.nose.y


def _wrist_raised(limb: Limb, t: ActionThresholds) -> bool:
    return limb.wrist.y < limb.shoulder.y - t.hand_raise_margin


def _wrist_in_torso_band(b: Body, limb: Limb) -> bool:
    return b.shoulder_mid.y <= limb.wrist.y <= b.hip_mid.y


def _both(check, b: Body, *args) -> bool:
    return check(b, b.left, *args) and check(b, b.right, *args)


# ---------- Whole body ----------

def _is_lying_down(b: Body, t: ActionThresholds) -> bool:
    return (abs(b.torso_height) < t.lying_torso_vertical
            and abs(b.hip_mid.x - b.shoulder_mid.x) > t.lying_torso_horizontal)


def _is_inverted(b: Body, t: ActionThresholds) -> bool:
    return (b.nose.y > b.hip_mid.y
            and b.left.ankle.y < b.hip_mid.y
            and b.right.ankle.y < b.hip_mid.y)


def _is_jumping_jack(b: Body, t: ActionThresholds) -> bool:
    return (_both(lambda b, limb: _wrist_above_head(b, limb), b)
            and b.ankle_spread > t.wide_stance_ratio * b.hip_width)


def _knee_raised(limb: Limb, t: ActionThresholds) -> bool:
    return limb.knee.y < limb.hip.y - t.kicking_knee_hip_threshold


def _is_tuck_jump(b: Body, t: ActionThresholds) -> bool:
    return _knee_raised(b.left, t) and _knee_raised(b.right, t)


def _is_kicking(b: Body, t: ActionThresholds, side: str) -> bool:
    leg, other = b.limbs(side)
    return (is_collinear(leg.hip, leg.knee, leg.ankle, t.collinear_tolerance)
            and leg.ankle.y < other.knee.y)


def _is_knee_raise(b: Body, t: ActionThresholds, side: str) -> bool:
    leg, _ = b.limbs(side)
    return _knee_raised(leg, t)


def _is_squatting(b: Body, t: ActionThresholds) -> bool:
    knee_spread = abs(b.left.knee.x - b.right.knee.x)
    return (_thigh_drop(b.left) < t.squat_thigh_drop
            and _thigh_drop(b.right) < t.squat_thigh_drop
            and knee_spread > t.squat_knee_spread_ratio * b.hip_width)


def _is_sitting(b: Body, t: ActionThresholds) -> bool:
    return all(
        _thigh_drop(leg) < t.sitting_thigh_drop and leg.ankle.y - leg.knee.y > t.sitting_shin_drop
        for leg in (b.left, b.right)
    )


def _is_kneeling(b: Body, t: ActionThresholds, side: str) -> bool:
    leg, other = b.limbs(side)
    return (leg.knee.y > other.knee.y + t.kneel_knee_offset
            and _thigh_drop(other) < t.squat_thigh_drop)


def _is_bending_over(b: Body, t: ActionThresholds) -> bool:
    return b.torso_height < t.bend_torso_height


def _is_touching_toes(b: Body, t: ActionThresholds) -> bool:
    return (_is_bending_over(b, t)
            and distance(b.left.wrist, b.left.ankle) < t.toe_touch_distance
            and distance(b.right.wrist, b.right.ankle) < t.toe_touch_distance)


def _is_picking(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return arm.wrist.y > arm.hip.y + t.picking_hand_hip_threshold


def _is_balancing(b: Body, t: ActionThresholds, side: str) -> bool:
    # Standing on `side`: the other foot is lifted
    leg, other = b.limbs(side)
    return other.ankle.y < leg.ankle.y - t.foot_lift


# ---------- Upper body ----------

def _is_t_pose(b: Body, t: ActionThresholds) -> bool:
    return _both(_arm_sideways, b, t)


def _is_victory(b: Body, t: ActionThresholds) -> bool:
    return (_both(lambda b, limb: _wrist_above_head(b, limb) and _arm_straight(limb, t), b)
            and abs(b.left.wrist.x - b.right.wrist.x) > t.victory_spread_ratio * b.shoulder_width)


def _is_hands_together_overhead(b: Body, t: ActionThresholds) -> bool:
    return (_both(lambda b, limb: _wrist_above_head(b, limb), b)
            and b.wrist_gap < t.hands_together_distance)


def _is_crossed_arms(b: Body, t: ActionThresholds) -> bool:
    # Each wrist has crossed the midline to the opposite side
    crossed = all(
        (limb.wrist.x - b.shoulder_mid.x) * limb.outward < 0
        for limb in (b.left, b.right)
    )
    return crossed and _both(_wrist_in_torso_band, b)


def _is_covering_face(b: Body, t: ActionThresholds) -> bool:
    return _both(lambda b, limb: distance(limb.wrist, b.nose) < t.face_touch_distance, b)


def _is_hands_on_head(b: Body, t: ActionThresholds) -> bool:
    return _both(
        lambda b, limb: _wrist_above_head(b, limb) and distance(limb.wrist, b.nose) < t.head_touch_distance,
        b
    )


def _is_hands_on_hips(b: Body, t: ActionThresholds) -> bool:
    return _both(
        lambda b, limb: (distance(limb.wrist, limb.hip) < t.hip_touch_distance
                         and (limb.elbow.x - limb.shoulder.x) * limb.outward > 0),
        b
    )


def _is_flexing(b: Body, t: ActionThresholds) -> bool:
    return _both(
        lambda b, limb: (abs(limb.elbow.y - limb.shoulder.y) < t.elbow_level_tolerance
                         and limb.wrist.y < limb.elbow.y - t.hand_raise_margin
                         and angle_between(limb.shoulder, limb.elbow, limb.wrist) < t.flex_elbow_angle),
        b
    )


def _is_hands_together(b: Body, t: ActionThresholds) -> bool:
    return b.wrist_gap < t.hands_together_distance and _both(_wrist_in_torso_band, b)


def _is_arms_forward(b: Body, t: ActionThresholds) -> bool:
    return _both(_arm_forward, b, t)


def _is_saluting(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, other = b.limbs(side)
    return (arm.wrist.y < b.nose.y
            and distance(arm.wrist, b.nose) < t.salute_distance
            and abs(arm.elbow.y - arm.shoulder.y) < t.elbow_level_tolerance
            and other.wrist.y > other.shoulder.y)


def _is_hands_up(b: Body, t: ActionThresholds) -> bool:
    top_shoulder = min(b.left.shoulder.y, b.right.shoulder.y)
    return _both(
        lambda b, limb: (limb.wrist.y < top_shoulder
                         and limb.elbow.y <= limb.shoulder.y + t.hands_up_elbow_tolerance),
        b
    )


def _is_pointing_up(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return _wrist_above_head(b, arm) and _arm_straight(arm, t)


def _is_waving(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, other = b.limbs(side)
    return (_wrist_raised(arm, t)
            and arm.elbow.y > arm.wrist.y
            and abs(arm.wrist.x - arm.elbow.x) > t.wave_forearm_tilt
            and other.wrist.y > other.shoulder.y)


def _is_raising_hand(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return _wrist_raised(arm, t)


def _is_punching(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return _arm_forward(b, arm, t)


def _is_pointing(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return _arm_sideways(b, arm, t)


def _is_thinking(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return distance(arm.wrist, b.nose) < t.face_touch_distance


def _is_hand_on_hip(b: Body, t: ActionThresholds, side: str) -> bool:
    arm, _ = b.limbs(side)
    return distance(arm.wrist, arm.hip) < t.hip_touch_distance


def _is_hand_on_chest(b: Body, t: ActionThresholds) -> bool:
    chest = Point(b.shoulder_mid.x, b.shoulder_mid.y + t.chest_drop_ratio * b.torso_height)
    return min(distance(b.left.wrist, chest), distance(b.right.wrist, chest)) < t.chest_touch_distance


def _is_arms_out(b: Body, t: ActionThresholds) -> bool:
    return _both(
        lambda b, limb: ((limb.wrist.x - limb.hip.x) * limb.outward > t.arms_out_margin
                         and limb.wrist.y > limb.shoulder.y),
        b
    )


def _is_shrugging(b: Body, t: ActionThresholds) -> bool:
    neck = b.shoulder_mid.y - b.nose.y
    return 0 < neck < t.shrug_ratio * b.shoulder_width


# ---------- Posture ----------

def _is_bowing(b: Body, t: ActionThresholds) -> bool:
    return b.nose.y > b.shoulder_mid.y


def _is_leaning(b: Body, t: ActionThresholds, side: str) -> bool:
    limb, _ = b.limbs(side)
    return (b.shoulder_mid.x - b.hip_mid.x) * limb.outward > t.lean_offset


def _is_walking(b: Body, t: ActionThresholds) -> bool:
    return t.step_height < abs(b.left.ankle.y - b.right.ankle.y) < t.foot_lift


def _is_wide_stance(b: Body, t: ActionThresholds) -> bool:
    return b.ankle_spread > t.wide_stance_ratio * b.hip_width


def _is_turned_sideways(b: Body, t: ActionThresholds) -> bool:
    return b.shoulder_width < b.hip_width * t.turned_shoulder_hip_ratio


def _is_looking(b: Body, t: ActionThresholds, side: str) -> bool:
    limb, _ = b.limbs(side)
    return (b.nose.x - b.shoulder_mid.x) * limb.outward > t.head_turn_ratio * b.shoulder_width


# ---------- Minimal ruleset ----------

def _is_sitting_minimal(b: Body, t: ActionThresholds) -> bool:
    return all(leg.hip.y > leg.knee.y + t.sitting_hip_knee_threshold for leg in (b.left, b.right))


def _is_hands_up_minimal(b: Body, t: ActionThresholds) -> bool:
    # Elbows are optional here; when present they must be at or above the shoulders
    return all(
        arm.wrist.y < arm.shoulder.y
        and (arm.elbow is None or arm.elbow.y <= arm.shoulder.y + t.hands_up_elbow_tolerance)
        for arm in (b.left, b.right)
    )


Rule = Tuple[str, Predicate]


def _sided(label: str, predicate) -> List[Rule]:
    return [
        (label.format('left'), partial(predicate, side='left')),
        (label.format('right'), partial(predicate, side='right')),
    ]


FULL_RULES: List[Rule] = [
    # Whole body
    ('lying_down', _is_lying_down),
    ('inverted', _is_inverted),
    ('jumping_jack', _is_jumping_jack),
    ('tuck_jump', _is_tuck_jump),
    *_sided('kicking_{}', _is_kicking),
    *_sided('knee_raise_{}', _is_knee_raise),
    ('squatting', _is_squatting),
    ('sitting', _is_sitting),
    *_sided('kneeling_{}', _is_kneeling),
    ('touching_toes', _is_touching_toes),
    ('bending_over', _is_bending_over),
    *_sided('picking_{}', _is_picking),
    *_sided('balancing_{}', _is_balancing),
    # Upper body, specific first
    ('t_pose', _is_t_pose),
    ('victory', _is_victory),
    ('hands_together_overhead', _is_hands_together_overhead),
    ('crossed_arms', _is_crossed_arms),
    ('covering_face', _is_covering_face),
    ('hands_on_head', _is_hands_on_head),
    ('hands_on_hips', _is_hands_on_hips),
    ('flexing', _is_flexing),
    ('hands_together', _is_hands_together),
    ('arms_forward', _is_arms_forward),
    *_sided('saluting_{}', _is_saluting),
    ('hands_up', _is_hands_up),
    *_sided('pointing_up_{}', _is_pointing_up),
    *_sided('waving_{}', _is_waving),
    *_sided('raising_{}_hand', _is_raising_hand),
    *_sided('punching_{}', _is_punching),
    *_sided('pointing_{}', _is_pointing),
    *_sided('thinking_{}', _is_thinking),
    *_sided('hand_on_hip_{}', _is_hand_on_hip),
    ('hand_on_chest', _is_hand_on_chest),
    ('arms_out', _is_arms_out),
    ('shrugging', _is_shrugging),
    # Posture
    ('bowing', _is_bowing),
    *_sided('leaning_{}', _is_leaning),
    ('walking', _is_walking),
    ('wide_stance', _is_wide_stance),
    ('turned_sideways', _is_turned_sideways),
    *_sided('looking_{}', _is_looking),
]

MINIMAL_RULES: List[Rule] = [
    ('sitting', _is_sitting_minimal),
    *_sided('kicking_{}', _is_knee_raise),
    *_sided('picking_{}', _is_picking),
    ('hands_up', _is_hands_up_minimal),
    ('turned_sideways', _is_turned_sideways),
]

FULL_REQUIRED = (
    P.NOSE,
    P.LEFT_SHOULDER, P.RIGHT_SHOULDER,
    P.LEFT_ELBOW, P.RIGHT_ELBOW,
    P.LEFT_WRIST, P.RIGHT_WRIST,
    P.LEFT_HIP, P.RIGHT_HIP,
    P.LEFT_KNEE, P.RIGHT_KNEE,
    P.LEFT_ANKLE, P.RIGHT_ANKLE,
)

MINIMAL_REQUIRED = (
    P.LEFT_SHOULDER, P.RIGHT_SHOULDER,
    P.LEFT_WRIST, P.RIGHT_WRIST,
    P.LEFT_HIP, P.RIGHT_HIP,
    P.LEFT_KNEE, P.RIGHT_KNEE,
)

RULESETS = {
    'full': (FULL_REQUIRED, FULL_RULES),
    'minimal': (MINIMAL_REQUIRED, MINIMAL_RULES),
}


class ActionClassifier:
    """
    Stateless first-match rule evaluator.

    Args:
        ruleset: 'full' or 'minimal'
        thresholds: Geometric constants (defaults tuned for 640x480)
    """
    def __init__(self, ruleset: str = 'full', thresholds: Optional[ActionThresholds] = None):
        if ruleset not in RULESETS:
            raise ValueError(f"Unknown ruleset: {ruleset} (expected one of {', '.join(RULESETS)})")

        self.ruleset = ruleset
        self.thresholds = thresholds or ActionThresholds()
        self.required, self.rules = RULESETS[ruleset]

    @property
    def labels(self) -> List[str]:
        """Taxonomy in evaluation order, ending with the default label."""
        return [label for label, _ in self.rules] + [STANDING]

    def has_required(self, pose: Optional[Sequence[Optional[Point]]]) -> bool:
        if pose is None or len(pose) < NUM_LANDMARKS:
            return False
        return all(pose[i] is not None for i in self.required)

    def classify(self, pose: Optional[Sequence[Optional[Point]]]) -> str:
        """
        Classify one pose.

        Args:
            pose: PointArray of 33 entries

        Returns:
            Action label, 'unknown' if required landmarks are missing
        """
        if not self.has_required(pose):
            return UNKNOWN

        body = Body(pose)
        for label, predicate in self.rules:
            if predicate(body, self.thresholds):
                return label

        return STANDING
