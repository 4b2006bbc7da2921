import logging
import threading
from typing import Sequence, Tuple

import numpy as np

from karma.motor.components.operator.operator_types import ArmHint
from karma.motor.utils.frames import make_transform, rotation_about_axis

logger = logging.getLogger(__name__)


class MotorState:
    """Process-wide motor state shared by the dispatcher and the operators.

    - tool_frame: hand -> tool tip transform, identity when no tool is attached.
    - arm_hint: arm the attached tool lives on, AUTO when none.
    - cancellation: set asynchronously by the stop channel, polled by the
      sequencers between every blocking step.

    Only the tool commands mutate the tool frame and the arm hint; the
    cancellation flag is the only field written from another thread.
    """

    def __init__(self):
        self._tool_frame = np.eye(4, dtype=np.float64)
        self._arm_hint = ArmHint.AUTO
        self._cancelled = threading.Event()

    # ------------------------------------------------------------------
    # Tool frame
    # ------------------------------------------------------------------

    @property
    def tool_frame(self) -> np.ndarray:
        return self._tool_frame.copy()

    @property
    def arm_hint(self) -> ArmHint:
        return self._arm_hint

    @property
    def tool_attached(self) -> bool:
        return self._arm_hint is not ArmHint.AUTO

    def attach_tool(self, arm: ArmHint, tip: Sequence[float]) -> None:
        """Attach a tool whose tip is at ``tip`` in the hand frame.

        The tool frame is rotated about -z so that its x-axis points along the
        projection of the tip on the hand x-y plane.
        """
        x, y, z = (float(v) for v in tip)
        frame = rotation_about_axis((0.0, 0.0, -1.0), np.arctan2(-y, x))
        frame[:3, 3] = (x, y, z)
        self._set_tool(arm, frame)

    def attach_tool_translation(self, arm: ArmHint, tip: Sequence[float]) -> None:
        """Attach a tool whose frame is the hand frame translated to ``tip``."""
        self._set_tool(arm, make_transform(position=tip))

    def remove_tool(self) -> None:
        self._tool_frame = np.eye(4, dtype=np.float64)
        self._arm_hint = ArmHint.AUTO
        logger.info("Tool removed")

    def get_tool(self) -> Tuple[ArmHint, Tuple[float, float, float]]:
        tip = self._tool_frame[:3, 3]
        return self._arm_hint, (float(tip[0]), float(tip[1]), float(tip[2]))

    def _set_tool(self, arm: ArmHint, frame: np.ndarray) -> None:
        self._tool_frame = frame
        self._arm_hint = arm
        logger.info(f"Tool attached to {arm.value} arm, tip at {np.round(frame[:3, 3], 3).tolist()}")

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def clear_cancel(self) -> None:
        self._cancelled.clear()
