from .operator_types import (
    ActionResult,
    Arm,
    ArmHint,
    DrawRequest,
    Eye,
    ExplorationResult,
    HandPose,
    PushRequest,
)

__all__ = [
    "Arm",
    "ArmHint",
    "HandPose",
    "Eye",
    "PushRequest",
    "DrawRequest",
    "ActionResult",
    "ExplorationResult",
]
