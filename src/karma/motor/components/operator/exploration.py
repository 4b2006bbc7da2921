import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from karma.motor.common.state import MotorState
from karma.motor.components.interface.interface_base import (
    GazeEndpoint,
    MotionEndpoint,
    PixelFeed,
    ToolSolver,
)
from karma.motor.components.interface.interface_types import GAZE_STARTUP_CONTEXT, PixelSample
from karma.motor.components.operator.operator_types import Arm, Eye, ExplorationResult
from karma.motor.components.operator.planner import HAND_AXES
from karma.motor.components.operator.sequencer import dof_mask, stored_config
from karma.motor.configs.constants import motion
from karma.motor.configs.constants.models import MotionConfig
from karma.motor.utils.frames import Pose, compose, make_transform, pose_from_transform, rotation_about_axis
from karma.motor.utils.timer import PollingTicker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplorationPose:
    """Arm pose shown to the cameras, where to fixate, and how many solver samples to collect."""

    pose: Pose
    fixation_offset: np.ndarray
    quota: int


@dataclass
class ExplorationSample:
    """Pixel accumulator for one convergence window."""

    window_start: float
    pixel_sum: np.ndarray = field(default_factory=lambda: np.zeros(2))
    count: int = 0

    def add(self, pixel: np.ndarray) -> None:
        self.pixel_sum += pixel
        self.count += 1

    @property
    def mean_v(self) -> float:
        return float(self.pixel_sum[1] / self.count) if self.count else float("nan")

    def converged(self) -> bool:
        """Enough samples whose mean vertical pixel sits near the target row."""
        if self.count <= motion.CONVERGENCE_MIN_SAMPLES:
            return False
        return abs(self.mean_v - motion.CONVERGENCE_TARGET_V) < motion.CONVERGENCE_TOLERANCE_PX

    def reset(self, now: float) -> None:
        self.window_start = now
        self.pixel_sum = np.zeros(2)
        self.count = 0


def exploration_poses(arm: Arm) -> List[ExplorationPose]:
    """Six viewpoints of the tool, mirrored between the arms."""
    s = 1.0 if arm is Arm.LEFT else -1.0

    def _about_minus_x(angle_deg: float) -> np.ndarray:
        return compose(rotation_about_axis((-1.0, 0.0, 0.0), np.deg2rad(angle_deg)), make_transform(HAND_AXES))

    last = compose(
        rotation_about_axis((s, 0.0, 0.0), np.deg2rad(45.0)),
        rotation_about_axis((0.0, 0.0, -s), np.deg2rad(45.0)),
        make_transform(HAND_AXES),
    )
    table = [
        # rotation, position, fixation offset, quota
        (_about_minus_x(0.0), (-0.35, 0.0, 0.0), (0.0, 0.0, 0.1), 25),
        (_about_minus_x(30.0 * s), (-0.35, -0.15 * s, 0.0), (0.0, 0.1 * s, 0.1), 25),
        (_about_minus_x(20.0 * s), (-0.35, -0.15 * s, 0.15), (0.0, 0.2 * s, 0.1), 25),
        (_about_minus_x(10.0 * s), (-0.3, -0.05 * s, -0.05), (0.0, 0.2 * s, 0.1), 25),
        (_about_minus_x(45.0 * s), (-0.35, -0.05 * s, 0.1), (0.0, 0.1 * s, 0.1), 25),
        (last, (-0.35, -0.1 * s, 0.0), (0.0, -0.05 * s, 0.1), 50),
    ]
    poses = []
    for rotation, position, offset, quota in table:
        orientation = pose_from_transform(rotation).orientation
        poses.append(
            ExplorationPose(
                pose=Pose(position, orientation),
                fixation_offset=np.asarray(offset, dtype=np.float64),
                quota=quota,
            )
        )
    return poses


class ToolExplorer:
    """Shows the held tool to the cameras from six viewpoints and lets the
    external solver estimate the tool-tip position.

    At each viewpoint the gaze first locks on the tip through the pixel feed
    (convergence loop), then solver samples are collected until the pose
    quota is reached.  The convergence loop has no deadline; it ends on
    convergence or on cancellation.
    """

    def __init__(
        self,
        arms,
        gaze: GazeEndpoint,
        pixels: PixelFeed,
        solver: ToolSolver,
        state: MotorState,
        config: Optional[MotionConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._arms = arms
        self._gaze = gaze
        self._pixels = pixels
        self._solver = solver
        self._state = state
        self._config = config or MotionConfig()
        self._convergence_ticker = PollingTicker(motion.CONVERGENCE_TICK_S, clock=clock, sleep=sleep)
        self._collection_ticker = PollingTicker(motion.COLLECTION_TICK_S, clock=clock, sleep=sleep)

    def explore(self, arm: Arm, eye: Eye) -> ExplorationResult:
        endpoint: MotionEndpoint = self._arms[arm]
        visited = 0
        dimensions = None

        with stored_config(endpoint), stored_config(self._gaze):
            endpoint.set_dof(dof_mask(len(endpoint.get_dof()), motion.EXPLORATION_DISABLED_DOF))
            self._solver.clear()
            self._solver.select(arm.value, eye.value)

            for index, target in enumerate(exploration_poses(arm), start=1):
                if self._state.cancelled:
                    break
                logger.info(f"Exploring tool from viewpoint {index}/6 on {arm.value} arm")
                self.move_tool(endpoint, eye, target)
                visited += 1

            if self._state.cancelled:
                logger.warning(f"Tool exploration interrupted after {visited} viewpoints")
            else:
                dimensions = self._solver.find()
                logger.info(f"Tool tip found at {np.round(dimensions, 3).tolist()}")

        return ExplorationResult(
            arm=arm,
            eye=eye,
            poses_visited=visited,
            cancelled=self._state.cancelled,
            dimensions=dimensions,
        )

    def move_tool(self, endpoint: MotionEndpoint, eye: Eye, target: ExplorationPose) -> None:
        self._gaze.restore_config(GAZE_STARTUP_CONTEXT)
        if self._state.cancelled:
            return

        self._gaze.set_tracking_mode(True)
        self._gaze.look_at_point(target.pose.position + target.fixation_offset)
        if self._state.cancelled:
            return
        endpoint.go_to_pose(target.pose.position, target.pose.orientation, motion.EXPLORE_MOVE[0])
        if not endpoint.wait_motion_done(self._config.poll_period, motion.EXPLORE_MOVE[1]):
            logger.warning(f"Exploration move not done within {motion.EXPLORE_MOVE[1]:.1f}s, continuing")

        self._gaze.set_saccades(False)
        self._gaze.set_traj_times(motion.GAZE_NECK_TRAJ_TIME, motion.GAZE_EYES_TRAJ_TIME)

        if self.converge(eye):
            self.collect(eye, target.quota)

    def _track_tip(self, eye: Eye) -> Optional[np.ndarray]:
        sample: Optional[PixelSample] = self._pixels.read()
        if sample is None:
            return None
        pixel = np.array([sample.u, sample.v + motion.PIXEL_VERTICAL_OFFSET])
        self._gaze.look_at_pixel(eye.index, pixel)
        return pixel

    def converge(self, eye: Eye) -> bool:
        """Fixate the tool tip until the mean vertical pixel of a full window
        is on target.  Returns False when cancelled."""
        ticker = self._convergence_ticker
        window = ExplorationSample(window_start=ticker.now())
        while not self._state.cancelled:
            ticker.start_loop()
            now = ticker.now()
            pixel = self._track_tip(eye)
            if pixel is not None:
                window.add(pixel)

            if now - window.window_start >= motion.CONVERGENCE_WINDOW_S:
                done = window.converged()
                logger.debug(f"Convergence window: {window.count} samples, mean v={window.mean_v:.1f}")
                window.reset(now)
                if done:
                    return True
            ticker.end_loop()
        return False

    def collect(self, eye: Eye, quota: int) -> None:
        """Let the solver gather ``quota`` new samples while the gaze keeps tracking."""
        ticker = self._collection_ticker
        self._solver.enable()
        try:
            target = self._solver.count() + quota
            while not self._state.cancelled:
                ticker.start_loop()
                if self._solver.count() >= target:
                    break
                self._track_tip(eye)
                ticker.end_loop()
        finally:
            self._solver.disable()
