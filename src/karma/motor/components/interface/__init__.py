from .interface_base import GazeEndpoint, MotionEndpoint, PixelFeed, ToolSolver
from .interface_types import AskPoseResult, PixelSample

__all__ = [
    "MotionEndpoint",
    "GazeEndpoint",
    "PixelFeed",
    "ToolSolver",
    "AskPoseResult",
    "PixelSample",
]
