import logging
from typing import Callable, Dict, Optional

from karma.motor.common.errors import KarmaMotorError
from karma.motor.common.state import MotorState
from karma.motor.components.interface.interface_base import (
    GazeEndpoint,
    MotionEndpoint,
    PixelFeed,
    ToolSolver,
)
from karma.motor.components.operator.exploration import ToolExplorer
from karma.motor.components.operator.operator_types import (
    ActionResult,
    Arm,
    DrawRequest,
    Eye,
    ExplorationResult,
    PushRequest,
)
from karma.motor.components.operator.planner import plan_draw, plan_draw2, plan_push, plan_push2
from karma.motor.components.operator.selector import select_arm, select_arm_for_point
from karma.motor.components.operator.sequencer import ActionSequencer
from karma.motor.configs.constants import motion
from karma.motor.configs.constants.models import ElbowConfig, MotionConfig

logger = logging.getLogger(__name__)


class KarmaOperator:
    """Runs push, draw and tool exploration requests against the robot.

    Resolves the current tool frame and arm hint from the shared
    :class:`MotorState`, plans, selects the arm, and hands the result to the
    sequencers.  One request runs at a time; :meth:`interrupt` may be called
    from any thread.
    """

    def __init__(
        self,
        arms: Dict[Arm, MotionEndpoint],
        gaze: GazeEndpoint,
        pixels: PixelFeed,
        solver: ToolSolver,
        state: Optional[MotorState] = None,
        elbow: Optional[ElbowConfig] = None,
        config: Optional[MotionConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        missing = [arm.value for arm in Arm if arm not in arms]
        if missing:
            raise ValueError(f"Missing motion endpoint for arm(s): {missing}")

        self.state = state or MotorState()
        self._arms = arms
        self._gaze = gaze
        self._config = config or MotionConfig()
        self.sequencer = ActionSequencer(arms, self.state, elbow=elbow, config=self._config)
        self.explorer = ToolExplorer(
            arms, gaze, pixels, solver, self.state, config=self._config, clock=clock, sleep=sleep
        )

    def push(self, request: PushRequest) -> ActionResult:
        hint = request.arm or self.state.arm_hint
        tool_frame = self.state.tool_frame

        if request.hand_pose is None:
            plan = plan_push(request.centroid, request.theta_deg, request.radius, tool_frame)
            arm = select_arm(plan, hint)
            logger.info(f"Push at theta={plan.theta_deg:.1f} radius={request.radius:.3f} with {arm.value} arm")
            return self.sequencer.execute_push(
                plan,
                arm,
                request.centroid,
                request.radius,
                tool_frame=tool_frame,
                tool_attached=self.state.tool_attached,
            )

        arm = select_arm_for_point(request.centroid, hint)
        waypoints = plan_push2(
            request.hand_pose, request.centroid, request.theta_deg, request.radius, arm, tool_frame
        )
        logger.info(f"Push ({request.hand_pose.name.lower()} hand) with {arm.value} arm")
        return self.sequencer.execute_push_sequence(waypoints, arm, self._config.mov_time)

    def draw(self, request: DrawRequest) -> ActionResult:
        hint = request.arm or self.state.arm_hint
        tool_frame = self.state.tool_frame

        if request.hand_pose is None:
            plan = plan_draw(
                request.centroid, request.theta_deg, request.radius, request.pull_distance, hint, tool_frame
            )
            pull_duration = motion.DRAW_PULL_DURATION
            use_elbow = True
        else:
            arm = select_arm_for_point(request.centroid, hint)
            plan = plan_draw2(
                request.hand_pose,
                request.centroid,
                request.theta_deg,
                request.radius,
                request.pull_distance,
                arm,
                tool_frame,
            )
            pull_duration = self._config.mov_time
            use_elbow = False

        mode = "Simulating" if request.simulate else "Executing"
        logger.info(f"{mode} draw of {request.pull_distance:.3f} m with {plan.arm.value} arm")
        return self.sequencer.execute_draw(
            plan, simulate=request.simulate, pull_duration=pull_duration, use_elbow=use_elbow
        )

    def find(self, arm: Arm, eye: Eye) -> ExplorationResult:
        logger.info(f"Looking for the tool tip held by the {arm.value} arm with the {eye.value} eye")
        return self.explorer.explore(arm, eye)

    def interrupt(self) -> None:
        """Raise the cancellation flag and stop every endpoint.

        Stop failures are logged; the flag is set regardless so the running
        sequence aborts at its next check.
        """
        self.state.cancel()
        logger.warning("Interrupt requested, stopping gaze and arms")
        for name, endpoint in [("gaze", self._gaze)] + [(arm.value, self._arms[arm]) for arm in Arm]:
            try:
                endpoint.stop()
            except KarmaMotorError as e:
                logger.error(f"Failed to stop {name}: {e}")
