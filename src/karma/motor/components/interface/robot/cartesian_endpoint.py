import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from karma.motor.components.interface.interface_base import MotionEndpoint
from karma.motor.components.interface.interface_types import AskPoseResult, ConfigToken
from karma.motor.components.interface.remote import RemoteEndpoint

logger = logging.getLogger(__name__)


def _as_list(values: Sequence[float]) -> List[float]:
    return [float(v) for v in np.asarray(values, dtype=np.float64).reshape(-1)]


class CartesianEndpointClient(RemoteEndpoint, MotionEndpoint):
    """Cartesian controller of one arm reached over ZeroMQ.

    ``wait_motion_done`` polls ``check_motion_done`` on the client side so
    that no single request outlives the endpoint timeout.
    """

    def __init__(self, name: str, host: str, port: int, timeout: float = 5.0):
        super().__init__(name, host, port, timeout)

    def store_config(self) -> ConfigToken:
        return self._call("store_context")

    def restore_config(self, token: ConfigToken) -> None:
        self._call("restore_context", token)

    def release_config(self, token: ConfigToken) -> None:
        self._call("delete_context", token)

    def set_tweaks(self, options: Dict[str, Any]) -> None:
        self._call("tweak_set", options)

    def get_dof(self) -> List[int]:
        return [int(v) for v in self._call("get_dof")]

    def set_dof(self, mask: Sequence[int]) -> None:
        self._call("set_dof", [int(v) for v in mask])

    def ask_pose(
        self,
        position: Sequence[float],
        orientation: Sequence[float],
        seed: Optional[Sequence[float]] = None,
    ) -> AskPoseResult:
        seed = None if seed is None else _as_list(seed)
        value = self._call("ask_for_pose", _as_list(position), _as_list(orientation), seed)
        return AskPoseResult(
            position_m=value["position"],
            orientation=value["orientation"],
            joints=value.get("joints"),
        )

    def go_to_pose(self, position: Sequence[float], orientation: Sequence[float], duration: float) -> None:
        self._call("go_to_pose", _as_list(position), _as_list(orientation), float(duration))

    def wait_motion_done(self, period: float, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while True:
            if self._call("check_motion_done"):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(period)

    def stop(self) -> None:
        self._call_stop()
