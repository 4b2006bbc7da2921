from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

# Collaborator -> operator payloads.

# Opaque saved-configuration token handed out by an endpoint.
ConfigToken = Any

# Gaze configuration saved by the gaze controller at its own startup.
GAZE_STARTUP_CONTEXT: ConfigToken = 0


@dataclass(frozen=True, eq=False)
class AskPoseResult:
    """Non-committal solver answer for a requested pose.

    - position_m, orientation: achieved pose (axis-angle 4-vector).
    - joints: joint solution, usable as a seed for the next query.
    """

    position_m: np.ndarray
    orientation: np.ndarray
    joints: Optional[np.ndarray] = None

    def __post_init__(self):
        object.__setattr__(self, "position_m", np.asarray(self.position_m, dtype=np.float64).reshape(3))
        object.__setattr__(self, "orientation", np.asarray(self.orientation, dtype=np.float64).reshape(4))
        if self.joints is not None:
            object.__setattr__(self, "joints", np.asarray(self.joints, dtype=np.float64))


@dataclass(frozen=True)
class PixelSample:
    """Tool-tip observation in image coordinates."""

    u: float
    v: float

    @classmethod
    def from_sequence(cls, data: List[float]) -> Optional["PixelSample"]:
        if data is None or len(data) < 2:
            return None
        return cls(u=float(data[0]), v=float(data[1]))


ToolDimensions = Tuple[float, float, float]


__all__ = [
    "ConfigToken",
    "GAZE_STARTUP_CONTEXT",
    "AskPoseResult",
    "PixelSample",
    "ToolDimensions",
]
