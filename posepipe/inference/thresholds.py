"""Action Recognition Thresholds"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict


@dataclass(frozen=True)
class ActionThresholds:
    """
    Geometric constants for the action rules.

    Distances are in pixels and tuned for a 640x480 capture; ratios are
    relative to the measured shoulder or hip width. Retune per resolution.
    """
    # Minimal ruleset
    sitting_hip_knee_threshold: float = 20.0  # hips this much lower than knees
    kicking_knee_hip_threshold: float = 40.0  # knee this much higher than hip
    picking_hand_hip_threshold: float = 50.0  # wrist this much lower than hip
    turned_shoulder_hip_ratio: float = 0.6

    # Full ruleset: whole body
    collinear_tolerance: float = 25.0
    lying_torso_vertical: float = 40.0
    lying_torso_horizontal: float = 80.0
    wide_stance_ratio: float = 2.0
    squat_thigh_drop: float = 30.0
    squat_knee_spread_ratio: float = 1.3
    sitting_thigh_drop: float = 20.0
    sitting_shin_drop: float = 30.0
    kneel_knee_offset: float = 40.0
    bend_torso_height: float = 60.0
    toe_touch_distance: float = 80.0
    foot_lift: float = 60.0

    # Full ruleset: upper body
    arm_level_tolerance: float = 40.0
    arm_extension_ratio: float = 0.8
    victory_spread_ratio: float = 1.5
    hands_together_distance: float = 50.0
    face_touch_distance: float = 60.0
    head_touch_distance: float = 70.0
    hip_touch_distance: float = 50.0
    elbow_level_tolerance: float = 40.0
    flex_elbow_angle: float = 120.0  # degrees
    hand_raise_margin: float = 40.0
    hands_up_elbow_tolerance: float = 10.0
    salute_distance: float = 70.0
    wave_forearm_tilt: float = 20.0
    chest_touch_distance: float = 60.0
    chest_drop_ratio: float = 0.3
    arms_out_margin: float = 80.0
    shrug_ratio: float = 0.35

    # Full ruleset: posture
    lean_offset: float = 40.0
    step_height: float = 15.0
    head_turn_ratio: float = 0.25

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"Threshold '{f.name}' must be a number, got {value!r}")
            if value < 0:
                raise ValueError(f"Threshold '{f.name}' must be non-negative, got {value}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'ActionThresholds':
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown thresholds: {', '.join(sorted(unknown))}")
        return cls().with_overrides(**values)

    def with_overrides(self, **overrides) -> 'ActionThresholds':
        return replace(self, **overrides)
