import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from karma.motor.common.state import MotorState
from karma.motor.components.interface.interface_base import MotionEndpoint
from karma.motor.components.operator.operator_types import ActionResult, Arm, DrawPlan, PushPlan
from karma.motor.components.operator.planner import push_contact_position
from karma.motor.components.operator.selector import choose_candidate
from karma.motor.configs.constants import motion
from karma.motor.configs.constants.models import ElbowConfig, MotionConfig
from karma.motor.utils.frames import Pose, normalize_angle_deg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """One blocking move: go to ``pose`` in ``duration`` s, wait at most ``timeout`` s."""

    label: str
    pose: Pose
    duration: float
    timeout: float


def dof_mask(length: int, disabled: Sequence[int]) -> List[int]:
    """All joints enabled except the indices in ``disabled``."""
    return [0 if i in disabled else 1 for i in range(length)]


@contextmanager
def stored_config(endpoint) -> Iterator[object]:
    """Save the endpoint configuration and always restore and release it on exit.

    Works for any endpoint exposing ``store_config``/``restore_config``/
    ``release_config`` (arm or gaze).
    """
    token = endpoint.store_config()
    try:
        yield token
    finally:
        try:
            endpoint.restore_config(token)
        finally:
            endpoint.release_config(token)


def trajectory_time(theta_deg: float, radius: float, tool_attached: bool) -> float:
    """Duration of the push contact segment.

    Linear in the radius over ``TRAJ_RADIUS_RANGE`` and clamped to the
    profile; pushes along the lateral axis (theta near 0 or 180) are faster.
    """
    theta = normalize_angle_deg(theta_deg)
    half_width = motion.TRAJ_FAST_HALF_WIDTH
    if abs(theta) < half_width or abs(theta) > 180.0 - half_width:
        tmin, tmax = motion.TRAJ_FAST_PROFILE
    else:
        tmin, tmax = motion.TRAJ_SLOW_PROFILE

    if tool_attached:
        tmin *= motion.TRAJ_TOOL_SCALE
        tmax *= motion.TRAJ_TOOL_SCALE

    rmin, rmax = motion.TRAJ_RADIUS_RANGE
    t = tmin + (tmax - tmin) / (rmax - rmin) * (radius - rmin)
    return float(np.clip(t, tmin, tmax))


class ActionSequencer:
    """Runs push and draw waypoint sequences on one arm at a time.

    The shared cancellation flag is checked before every segment; once it
    is set no further motion command is issued and the remaining segments
    are reported as skipped.
    """

    def __init__(
        self,
        arms: Dict[Arm, MotionEndpoint],
        state: MotorState,
        elbow: Optional[ElbowConfig] = None,
        config: Optional[MotionConfig] = None,
    ):
        self._arms = arms
        self._state = state
        self._elbow = elbow or ElbowConfig()
        self._config = config or MotionConfig()

    @contextmanager
    def arm_context(self, arm: Arm, straightness: float, use_elbow: bool = True) -> Iterator[MotionEndpoint]:
        """Configured endpoint for one action; its previous configuration is restored on exit."""
        endpoint = self._arms[arm]
        with stored_config(endpoint):
            endpoint.set_tweaks({"straightness": float(straightness)})
            if use_elbow and self._elbow.enabled:
                endpoint.set_tweaks(self._elbow.tweak())
            endpoint.set_dof(dof_mask(len(endpoint.get_dof()), motion.ACTION_DISABLED_DOF))
            yield endpoint

    def _run(self, endpoint: MotionEndpoint, segments: List[Segment], result: ActionResult) -> ActionResult:
        for segment in segments:
            if self._state.cancelled:
                result.cancelled = True
                logger.warning(
                    f"Action on {result.arm.value} arm interrupted before '{segment.label}' "
                    f"({result.completed_segments}/{result.total_segments} segments done)"
                )
                break

            logger.info(f"Moving to ({segment.label}): {segment.pose}")
            endpoint.go_to_pose(segment.pose.position, segment.pose.orientation, segment.duration)
            if not endpoint.wait_motion_done(self._config.poll_period, segment.timeout):
                logger.warning(f"Motion '{segment.label}' not done within {segment.timeout:.1f}s, continuing")
            result.completed_segments += 1
        return result

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def execute_push(
        self,
        plan: PushPlan,
        arm: Arm,
        centroid: Sequence[float],
        radius: float,
        tool_frame: Optional[np.ndarray] = None,
        tool_attached: bool = False,
    ) -> ActionResult:
        """Choose the start pose among the plan candidates and push through the centroid.

        Segments: approach from above, reach the start, contact (tool tip
        on the centroid), retreat to the start.
        """
        with self.arm_context(arm, motion.PUSH_STRAIGHTNESS) as endpoint:
            pose, used_offset = choose_candidate(plan, arm, endpoint)
            contact = Pose(push_contact_position(centroid, pose.orientation, tool_frame), pose.orientation)
            segments = [
                Segment("approach", pose.offset((0.0, 0.0, motion.PUSH_APPROACH_HEIGHT)), *motion.PUSH_APPROACH),
                Segment("reach", pose, *motion.PUSH_REACH),
                Segment(
                    "contact",
                    contact,
                    trajectory_time(plan.theta_deg, radius, tool_attached),
                    motion.PUSH_CONTACT_TIMEOUT,
                ),
                Segment("retreat", pose, *motion.PUSH_RETREAT),
            ]
            result = ActionResult(arm=arm, total_segments=len(segments), used_offset=used_offset)
            return self._run(endpoint, segments, result)

    def execute_push_sequence(
        self,
        waypoints: List[Pose],
        arm: Arm,
        contact_duration: Optional[float] = None,
    ) -> ActionResult:
        """Pose-mode push through the four waypoints of :func:`plan_push2`."""
        if len(waypoints) != 4:
            raise ValueError(f"expected 4 push waypoints, got {len(waypoints)}")
        contact_duration = self._config.mov_time if contact_duration is None else contact_duration
        approach, start, end, lift = waypoints
        segments = [
            Segment("approach", approach, *motion.PUSH_APPROACH),
            Segment("reach", start, *motion.PUSH_REACH),
            Segment("contact", end, contact_duration, motion.PUSH_CONTACT_TIMEOUT),
            Segment("retreat", lift, *motion.PUSH_RETREAT),
        ]
        with self.arm_context(arm, motion.PUSH_STRAIGHTNESS, use_elbow=False) as endpoint:
            result = ActionResult(arm=arm, total_segments=len(segments))
            return self._run(endpoint, segments, result)

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def execute_draw(
        self,
        plan: DrawPlan,
        simulate: bool = False,
        pull_duration: float = motion.DRAW_PULL_DURATION,
        use_elbow: bool = True,
    ) -> ActionResult:
        """Execute a draw plan, or only score it when ``simulate`` is set."""
        with self.arm_context(plan.arm, motion.DRAW_STRAIGHTNESS, use_elbow=use_elbow) as endpoint:
            if simulate:
                quality = self._simulate_draw(endpoint, plan)
                return ActionResult(arm=plan.arm, total_segments=0, quality=quality)

            segments = [
                Segment("approach", plan.approach.offset((0.0, 0.0, motion.DRAW_APPROACH_HEIGHT)), *motion.DRAW_APPROACH),
                Segment("reach", plan.approach, *motion.DRAW_REACH),
                Segment("pull", plan.act, pull_duration, motion.DRAW_PULL_TIMEOUT),
            ]
            result = ActionResult(arm=plan.arm, total_segments=len(segments))
            return self._run(endpoint, segments, result)

    def _simulate_draw(self, endpoint: MotionEndpoint, plan: DrawPlan) -> float:
        """Sum of position and orientation errors over both waypoints, plus a
        penalty when either solution brings the hand too close to the body."""
        first = endpoint.ask_pose(plan.approach.position, plan.approach.orientation)
        second = endpoint.ask_pose(plan.act.position, plan.act.orientation, seed=first.joints)

        quality = 0.0
        for target, answer in ((plan.approach, first), (plan.act, second)):
            e_x = float(np.linalg.norm(target.position - answer.position_m))
            e_o = float(np.linalg.norm(target.orientation - answer.orientation))
            logger.debug(f"Testing {target} => |e_x|={e_x:.4f} |e_o|={e_o:.4f}")
            quality += e_x + e_o

        if min(np.linalg.norm(first.position_m), np.linalg.norm(second.position_m)) < motion.NEARNESS_RADIUS:
            logger.info(f"Nearness penalty applied ({motion.NEARNESS_PENALTY})")
            quality += motion.NEARNESS_PENALTY

        logger.info(f"Simulated draw on {plan.arm.value} arm, quality={quality:.4f}")
        return quality
