"""Target pose planning for the push and draw primitives.

Every planner maps an object-relative description (centroid, approach angle,
radius, optional pull distance) into end-effector poses in the robot root
frame.  The chain always ends with the inverse of the tool frame so that the
*tool tip*, not the hand, lands on the computed target.

Frames used throughout:

- ``H0``: object frame at the centroid, x-axis rightward (root -y), y-axis
  forward (root x), z-axis up.
- ``HR``: hand axes with the palm facing down and the fingers pointing
  forward, shared by the draw and pose-mode planners.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from karma.motor.components.operator.operator_types import (
    Arm,
    ArmHint,
    DrawPlan,
    HandPose,
    PushCandidate,
    PushPlan,
)
from karma.motor.configs.constants import motion
from karma.motor.utils.frames import (
    Pose,
    compose,
    from_axis_angle,
    invert,
    make_transform,
    normalize_angle_deg,
    pose_from_transform,
    rotation_about_axis,
    translation,
)

logger = logging.getLogger(__name__)

HAND_AXES = np.array(
    [
        [-1.0, 0.0, 0.0],
        [0.0, 0.0, -1.0],
        [0.0, -1.0, 0.0],
    ]
)

# (arm, hand pose) -> (fi, psi) in degrees
HAND_POSE_ANGLES: Dict[Tuple[Arm, HandPose], Tuple[float, float]] = {
    (Arm.RIGHT, HandPose.NEUTRAL): (0.0, -50.0),
    (Arm.LEFT, HandPose.NEUTRAL): (0.0, -50.0),
    (Arm.RIGHT, HandPose.PRONATION): (120.0, -30.0),
    (Arm.LEFT, HandPose.PRONATION): (-120.0, -30.0),
}

INWARD = "inward"
OUTWARD = "outward"


def _tool(tool_frame: Optional[np.ndarray]) -> np.ndarray:
    return np.eye(4) if tool_frame is None else np.asarray(tool_frame, dtype=np.float64)


def object_frame(centroid: Sequence[float]) -> np.ndarray:
    """``H0`` centered at ``centroid``."""
    return make_transform(
        rotation=[
            [0.0, -1.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        position=centroid,
    )


def hand_rotation(arm: Arm, hand_pose: HandPose) -> np.ndarray:
    """``HR * Ax(fi) * Az(psi)`` for the pose-mode planners (3x3)."""
    fi_deg, psi_deg = HAND_POSE_ANGLES[(arm, HandPose(hand_pose))]
    fi, psi = np.deg2rad(fi_deg), np.deg2rad(psi_deg)
    ax = np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, np.cos(fi), np.sin(fi)],
            [0.0, -np.sin(fi), np.cos(fi)],
        ]
    )
    az = np.array(
        [
            [np.cos(psi), np.sin(psi), 0.0],
            [-np.sin(psi), np.cos(psi), 0.0],
            [0.0, 0.0, 1.0],
        ]
    )
    return HAND_AXES @ ax @ az


# ---------------------------------------------------------------------------
# Push
# ---------------------------------------------------------------------------

def _push_local_frame(theta_rad: float, radius: float, outward: bool, epsilon: float = 0.0) -> np.ndarray:
    """Frame at (radius + epsilon) along theta in ``H0``; the tool working axis (z) points at the centroid or away."""
    c, s = np.cos(theta_rad), np.sin(theta_rad)
    if outward:
        rotation = [[s, 0.0, c], [-c, 0.0, s], [0.0, -1.0, 0.0]]
    else:
        rotation = [[-s, 0.0, -c], [c, 0.0, -s], [0.0, -1.0, 0.0]]
    return make_transform(rotation=rotation, position=((radius + epsilon) * c, (radius + epsilon) * s, 0.0))


def plan_push(
    centroid: Sequence[float],
    theta_deg: float,
    radius: float,
    tool_frame: Optional[np.ndarray] = None,
) -> PushPlan:
    """Two candidate poses for pushing from (theta, radius) around ``centroid``.

    - inward ("palm"): tool z-axis pointing toward the centroid.
    - outward ("back of the hand"): tool z-axis pointing away from it.

    Each candidate carries a twin moved ``PUSH_EPSILON`` further out along
    the radial direction, used when the selector increases the radius.
    """
    theta_rad = np.deg2rad(theta_deg)
    h0 = object_frame(centroid)
    inv_tool = invert(_tool(tool_frame))

    candidates = []
    for label, outward in ((INWARD, False), (OUTWARD, True)):
        transform = compose(h0, _push_local_frame(theta_rad, radius, outward), inv_tool)
        offset = compose(h0, _push_local_frame(theta_rad, radius, outward, motion.PUSH_EPSILON), inv_tool)
        candidates.append(
            PushCandidate(
                label=label,
                pose=pose_from_transform(transform),
                transform=transform,
                offset_pose=pose_from_transform(offset),
            )
        )

    plan = PushPlan(theta_deg=normalize_angle_deg(theta_deg), inward=candidates[0], outward=candidates[1])
    logger.debug(f"Identified push locations: {plan.inward.pose} / {plan.outward.pose}")
    return plan


def push_contact_position(
    centroid: Sequence[float],
    orientation: Sequence[float],
    tool_frame: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Hand position that puts the tool tip on ``centroid`` with the given orientation."""
    h = from_axis_angle(orientation, centroid)
    tip = _tool(tool_frame)[:3, 3]
    return (h @ np.append(-tip, 1.0))[:3]


def plan_push2(
    hand_pose: HandPose,
    centroid: Sequence[float],
    theta_deg: float,
    radius: float,
    arm: Arm,
    tool_frame: Optional[np.ndarray] = None,
) -> List[Pose]:
    """Pose-mode push: above the start, start, opposite side, above the opposite side.

    The hand keeps the same orientation along the whole sweep across the
    centroid.
    """
    theta = normalize_angle_deg(theta_deg)
    o2r = translation(*np.asarray(centroid, dtype=np.float64).reshape(3))
    h2p = make_transform(rotation=hand_rotation(arm, hand_pose))
    inv_tool = invert(_tool(tool_frame))

    def _waypoint(angle_deg: float, height: float) -> np.ndarray:
        alpha = np.deg2rad(angle_deg)
        return translation(radius * np.cos(alpha), radius * np.sin(alpha), height)

    in_place = compose(o2r, _waypoint(theta, 0.0), h2p)
    logger.debug(f"In-place push location: {pose_from_transform(in_place)}")

    waypoints = [
        pose_from_transform(compose(o2r, _waypoint(angle, height), h2p, inv_tool))
        for angle, height in (
            (theta, motion.PUSH_APPROACH_HEIGHT),
            (theta, 0.0),
            (theta + 180.0, 0.0),
            (theta + 180.0, motion.PUSH_APPROACH_HEIGHT),
        )
    ]
    logger.debug(f"Tool applied, push start at {waypoints[1]}")
    return waypoints


# ---------------------------------------------------------------------------
# Draw
# ---------------------------------------------------------------------------

def _sagittal_waypoints(centroid: np.ndarray, theta_deg: float, radius: float, pull_distance: float):
    c_sag = centroid.copy()
    c_sag[1] = 0.0
    h0 = object_frame(c_sag)
    theta_rad = np.deg2rad(theta_deg)
    h1 = compose(h0, translation(radius * np.cos(theta_rad), radius * np.sin(theta_rad)))
    h2 = compose(h1, translation(0.0, -pull_distance))
    return h1, h2


def _reproject(h: np.ndarray, lateral: float, angle_rad: float) -> np.ndarray:
    """Rotate the orientation about -z by ``angle_rad`` and shift the position by ``lateral`` in y."""
    rotated = rotation_about_axis((0.0, 0.0, -1.0), angle_rad)
    out = make_transform(rotation=rotated[:3, :3] @ h[:3, :3], position=h[:3, 3])
    out[1, 3] += lateral
    return out


def plan_draw(
    centroid: Sequence[float],
    theta_deg: float,
    radius: float,
    pull_distance: float,
    arm_hint: ArmHint = ArmHint.AUTO,
    tool_frame: Optional[np.ndarray] = None,
) -> DrawPlan:
    """Approach and pull-end poses for drawing the object toward the robot.

    Planning happens on the sagittal projection of the centroid; the arm is
    picked there (by the side of the first waypoint) before the poses are
    moved back to the real centroid.
    """
    c = np.asarray(centroid, dtype=np.float64).reshape(3)
    h1, h2 = _sagittal_waypoints(c, theta_deg, radius, pull_distance)
    h1[:3, :3] = HAND_AXES
    h2[:3, :3] = HAND_AXES
    logger.debug(f"Identified draw locations on the sagittal plane: {h1[:3, 3]} -> {h2[:3, 3]}")

    arm = arm_hint.resolve() or (Arm.RIGHT if h1[1, 3] >= 0.0 else Arm.LEFT)

    if c[1] != 0.0:
        angle = np.arctan2(c[1], abs(c[0]))
        h1 = _reproject(h1, c[1], angle)
        h2 = _reproject(h2, c[1], angle)
        logger.debug(f"In-place draw locations: {h1[:3, 3]} -> {h2[:3, 3]}")

    inv_tool = invert(_tool(tool_frame))
    return DrawPlan(
        arm=arm,
        approach=pose_from_transform(compose(h1, inv_tool)),
        act=pose_from_transform(compose(h2, inv_tool)),
    )


def plan_draw2(
    hand_pose: HandPose,
    centroid: Sequence[float],
    theta_deg: float,
    radius: float,
    pull_distance: float,
    arm: Arm,
    tool_frame: Optional[np.ndarray] = None,
) -> DrawPlan:
    """Pose-mode draw: theta is measured from the pull direction and the hand
    rotation comes from :data:`HAND_POSE_ANGLES`.  The lateral re-projection
    only translates."""
    c = np.asarray(centroid, dtype=np.float64).reshape(3)
    h1, h2 = _sagittal_waypoints(c, theta_deg + motion.DRAW2_THETA_SHIFT, radius, pull_distance)
    rotation = hand_rotation(arm, hand_pose)
    h1[:3, :3] = rotation
    h2[:3, :3] = rotation

    if c[1] != 0.0:
        h1 = _reproject(h1, c[1], 0.0)
        h2 = _reproject(h2, c[1], 0.0)
    logger.debug(f"In-place draw locations: {h1[:3, 3]} -> {h2[:3, 3]}")

    inv_tool = invert(_tool(tool_frame))
    return DrawPlan(
        arm=arm,
        approach=pose_from_transform(compose(h1, inv_tool)),
        act=pose_from_transform(compose(h2, inv_tool)),
    )
