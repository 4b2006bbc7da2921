from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

import numpy as np

from karma.motor.utils.frames import Pose

# Dispatcher -> operator contracts.
# Units: positions in meters, theta in degrees, durations in seconds,
# orientations as axis-angle 4-vectors [ax, ay, az, angle_rad].


class Arm(Enum):
    """Physical arm executing an action."""

    LEFT = "left"
    RIGHT = "right"


class ArmHint(Enum):
    """Arm requested by the caller; AUTO lets the planner decide by laterality."""

    AUTO = "selectable"
    LEFT = "left"
    RIGHT = "right"

    def resolve(self) -> Optional[Arm]:
        if self is ArmHint.AUTO:
            return None
        return Arm(self.value)


class HandPose(IntEnum):
    """Hand rotation used by the pose-mode planners (wire values 0/1)."""

    NEUTRAL = 0
    PRONATION = 1


class Eye(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def index(self) -> int:
        return 0 if self is Eye.LEFT else 1


@dataclass(frozen=True)
class PushRequest:
    """Push the object at ``centroid`` from the point at (theta, radius).

    - hand_pose: None selects the two-candidate planner, otherwise the
      pose-mode sequence with the given hand rotation.
    """

    centroid: Tuple[float, float, float]
    theta_deg: float
    radius: float
    hand_pose: Optional[HandPose] = None
    arm: Optional[ArmHint] = None


@dataclass(frozen=True)
class DrawRequest:
    """Draw the object closer by ``pull_distance`` starting from (theta, radius).

    - simulate: only query the controller and return a quality score.
    """

    centroid: Tuple[float, float, float]
    theta_deg: float
    radius: float
    pull_distance: float
    hand_pose: Optional[HandPose] = None
    arm: Optional[ArmHint] = None
    simulate: bool = False


@dataclass(frozen=True, eq=False)
class PushCandidate:
    """One way of reaching the push start point and its radially offset twin."""

    label: str
    pose: Pose
    transform: np.ndarray = field(repr=False)
    offset_pose: Pose = field(repr=False)


@dataclass(frozen=True, eq=False)
class PushPlan:
    theta_deg: float
    inward: PushCandidate
    outward: PushCandidate

    @property
    def candidates(self) -> List[PushCandidate]:
        return [self.inward, self.outward]


@dataclass(frozen=True, eq=False)
class DrawPlan:
    arm: Arm
    approach: Pose
    act: Pose


@dataclass
class ActionResult:
    """Outcome of one sequenced action.

    - cancelled: the stop signal was observed; remaining segments were skipped.
    - quality: simulate-mode score only (lower is better).
    """

    arm: Arm
    total_segments: int
    completed_segments: int = 0
    cancelled: bool = False
    quality: Optional[float] = None
    used_offset: bool = False

    @property
    def completed(self) -> bool:
        return not self.cancelled and self.completed_segments == self.total_segments


@dataclass(frozen=True)
class ExplorationResult:
    arm: Arm
    eye: Eye
    poses_visited: int
    cancelled: bool = False
    dimensions: Optional[Tuple[float, float, float]] = None


__all__ = [
    "Arm",
    "ArmHint",
    "HandPose",
    "Eye",
    "PushRequest",
    "DrawRequest",
    "PushCandidate",
    "PushPlan",
    "DrawPlan",
    "ActionResult",
    "ExplorationResult",
]
