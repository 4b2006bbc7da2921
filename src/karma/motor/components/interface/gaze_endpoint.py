import logging
from typing import Sequence

import numpy as np

from karma.motor.components.interface.interface_base import GazeEndpoint
from karma.motor.components.interface.interface_types import ConfigToken
from karma.motor.components.interface.remote import RemoteEndpoint

logger = logging.getLogger(__name__)


class GazeEndpointClient(RemoteEndpoint, GazeEndpoint):
    """Head/eyes controller reached over ZeroMQ."""

    def __init__(self, host: str, port: int, timeout: float = 5.0, name: str = "gaze"):
        super().__init__(name, host, port, timeout)

    def store_config(self) -> ConfigToken:
        return self._call("store_context")

    def restore_config(self, token: ConfigToken) -> None:
        self._call("restore_context", token)

    def release_config(self, token: ConfigToken) -> None:
        self._call("delete_context", token)

    def set_tracking_mode(self, enabled: bool) -> None:
        self._call("set_tracking_mode", bool(enabled))

    def look_at_point(self, point: Sequence[float]) -> None:
        self._call("look_at_fixation_point", np.asarray(point, dtype=np.float64).reshape(3).tolist())

    def look_at_pixel(self, eye_index: int, pixel: Sequence[float]) -> None:
        self._call("look_at_mono_pixel", int(eye_index), [float(p) for p in pixel])

    def set_saccades(self, enabled: bool) -> None:
        self._call("set_saccades_mode", bool(enabled))

    def set_traj_times(self, neck: float, eyes: float) -> None:
        self._call("set_traj_times", float(neck), float(eyes))

    def stop(self) -> None:
        self._call_stop()
