from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from karma.motor.components.interface.interface_types import (
    AskPoseResult,
    ConfigToken,
    PixelSample,
    ToolDimensions,
)


class MotionEndpoint(ABC):
    """Cartesian controller of a single arm.

    Implementations run the inverse kinematics and the trajectory servo; the
    operators only ever talk to this surface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def store_config(self) -> ConfigToken:
        pass

    @abstractmethod
    def restore_config(self, token: ConfigToken) -> None:
        pass

    @abstractmethod
    def release_config(self, token: ConfigToken) -> None:
        pass

    @abstractmethod
    def set_tweaks(self, options: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def get_dof(self) -> List[int]:
        pass

    @abstractmethod
    def set_dof(self, mask: Sequence[int]) -> None:
        pass

    @abstractmethod
    def ask_pose(
        self,
        position: Sequence[float],
        orientation: Sequence[float],
        seed: Optional[Sequence[float]] = None,
    ) -> AskPoseResult:
        """Solve for a pose without moving the arm."""
        pass

    @abstractmethod
    def go_to_pose(self, position: Sequence[float], orientation: Sequence[float], duration: float) -> None:
        pass

    @abstractmethod
    def wait_motion_done(self, period: float, timeout: float) -> bool:
        """Block until the motion completes; False when ``timeout`` elapsed first."""
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class GazeEndpoint(ABC):
    """Head/eyes controller."""

    @abstractmethod
    def store_config(self) -> ConfigToken:
        pass

    @abstractmethod
    def restore_config(self, token: ConfigToken) -> None:
        pass

    @abstractmethod
    def release_config(self, token: ConfigToken) -> None:
        pass

    @abstractmethod
    def set_tracking_mode(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def look_at_point(self, point: Sequence[float]) -> None:
        pass

    @abstractmethod
    def look_at_pixel(self, eye_index: int, pixel: Sequence[float]) -> None:
        pass

    @abstractmethod
    def set_saccades(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def set_traj_times(self, neck: float, eyes: float) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class PixelFeed(ABC):
    @abstractmethod
    def read(self) -> Optional[PixelSample]:
        """Latest unread tool-tip observation, None when nothing new arrived."""
        pass


class ToolSolver(ABC):
    """External estimator of the tool dimensions."""

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def select(self, arm: str, eye: str) -> None:
        pass

    @abstractmethod
    def enable(self) -> None:
        pass

    @abstractmethod
    def disable(self) -> None:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def find(self) -> ToolDimensions:
        pass


__all__ = [
    "MotionEndpoint",
    "GazeEndpoint",
    "PixelFeed",
    "ToolSolver",
]
