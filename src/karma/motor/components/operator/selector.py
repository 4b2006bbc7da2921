import logging
from typing import Dict, List, Sequence, Tuple

from karma.motor.components.interface.interface_base import MotionEndpoint
from karma.motor.components.operator.operator_types import (
    Arm,
    ArmHint,
    PushCandidate,
    PushPlan,
)
from karma.motor.components.operator.planner import INWARD, OUTWARD
from karma.motor.configs.constants import motion
from karma.motor.utils.frames import Pose, from_axis_angle, transform_distance

logger = logging.getLogger(__name__)

# Empirical calibration: around theta = +-90 deg the residual comparison is
# unreliable, so the candidate is forced per arm.
SINGULARITY_TABLE: List[Tuple[float, Dict[Arm, str]]] = [
    (90.0, {Arm.RIGHT: INWARD, Arm.LEFT: OUTWARD}),
    (-90.0, {Arm.RIGHT: OUTWARD, Arm.LEFT: INWARD}),
]

# Candidates that move to their radially offset twin for theta < 0.
OFFSET_FALLBACK = {Arm.RIGHT: OUTWARD, Arm.LEFT: INWARD}


def select_arm_for_point(point: Sequence[float], arm_hint: ArmHint = ArmHint.AUTO) -> Arm:
    """Right arm for points with y >= 0, unless the hint pins an arm."""
    return arm_hint.resolve() or (Arm.RIGHT if float(point[1]) >= 0.0 else Arm.LEFT)


def select_arm(plan: PushPlan, arm_hint: ArmHint = ArmHint.AUTO) -> Arm:
    """Arm for a push, decided on the side of the inward candidate."""
    return select_arm_for_point(plan.inward.pose.position, arm_hint)


def _residual(candidate: PushCandidate, endpoint: MotionEndpoint) -> float:
    answer = endpoint.ask_pose(candidate.pose.position, candidate.pose.orientation)
    achieved = from_axis_angle(answer.orientation, answer.position_m)
    return transform_distance(candidate.transform, achieved)


def _forced_label(theta_deg: float, arm: Arm):
    for center, mapping in SINGULARITY_TABLE:
        if abs(theta_deg - center) < motion.SINGULARITY_HALF_WIDTH:
            return mapping[arm]
    return None


def choose_candidate(plan: PushPlan, arm: Arm, endpoint: MotionEndpoint) -> Tuple[Pose, bool]:
    """Pick the push start pose for ``arm``.

    Both candidates are submitted to the solver and scored by the Frobenius
    norm of requested minus achieved transform; the lower residual wins and
    ties go to the outward candidate.  Near theta = +-90 deg the choice comes
    from :data:`SINGULARITY_TABLE` instead.

    Returns the pose and whether the radially offset twin was used.
    """
    d_in = _residual(plan.inward, endpoint)
    d_out = _residual(plan.outward, endpoint)
    logger.info(f"Candidate residuals on {arm.value} arm: {INWARD}={d_in:.3f} {OUTWARD}={d_out:.3f}")

    label = _forced_label(plan.theta_deg, arm)
    if label is not None:
        logger.info(f"Detected singularity at theta={plan.theta_deg:.1f}, forcing {label}")
    else:
        label = INWARD if d_in < d_out else OUTWARD

    candidate = plan.inward if label == INWARD else plan.outward
    if plan.theta_deg < 0.0 and OFFSET_FALLBACK[arm] == label:
        logger.info(f"Selected {label} with increased radius: {candidate.offset_pose}")
        return candidate.offset_pose, True

    logger.info(f"Selected {label}: {candidate.pose}")
    return candidate.pose, False
