import socket
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from karma.motor.common.errors import EndpointFault
from karma.motor.common.state import MotorState
from karma.motor.components.dispatcher import CommandDispatcher
from karma.motor.components.interface.interface_base import (
    GazeEndpoint,
    MotionEndpoint,
    PixelFeed,
    ToolSolver,
)
from karma.motor.components.interface.interface_types import AskPoseResult, PixelSample
from karma.motor.components.operator.karma_operator import KarmaOperator
from karma.motor.components.operator.operator_types import Arm


class FakeClock:
    """Manual clock: time only moves when ``sleep`` is called.

    ``on_sleep`` runs after every sleep with the new time, which lets a test
    raise the stop flag at a chosen instant.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: List[float] = []
        self.on_sleep: Optional[Callable[[float], None]] = None

    def __call__(self) -> float:
        return self.now

    def sleep(self, dt: float) -> None:
        self.sleeps.append(dt)
        self.now += dt
        if self.on_sleep is not None:
            self.on_sleep(self.now)


class FakeMotionEndpoint(MotionEndpoint):
    """In-memory arm controller recording every call.

    - ask_pose echoes the request unless ``ask_pose_fn`` is set.
    - wait_motion_done returns ``motion_done``; ``on_wait`` is invoked with
      the 1-based wait count before returning.
    - ``fail_on`` names a method that raises :class:`EndpointFault`.
    """

    def __init__(self, name: str = "arm", dof: int = 10) -> None:
        self._name = name
        self._dof = [1] * dof
        self._next_token = 0
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.moves: List[Tuple[np.ndarray, np.ndarray, float]] = []
        self.waits: List[Tuple[float, float]] = []
        self.tweaks: List[Dict[str, Any]] = []
        self.dof_masks: List[List[int]] = []
        self.asks: List[Tuple[np.ndarray, np.ndarray, Optional[np.ndarray]]] = []
        self.motion_done = True
        self.ask_pose_fn: Optional[Callable[..., AskPoseResult]] = None
        self.on_wait: Optional[Callable[[int], None]] = None
        self.fail_on: Optional[str] = None
        self.stops = 0

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self.fail_on == method:
            raise EndpointFault(self._name, method)

    def names(self) -> List[str]:
        return [method for method, _ in self.calls]

    @property
    def name(self) -> str:
        return self._name

    def store_config(self):
        self._record("store_config")
        self._next_token += 1
        return self._next_token

    def restore_config(self, token) -> None:
        self._record("restore_config", token)

    def release_config(self, token) -> None:
        self._record("release_config", token)

    def set_tweaks(self, options: Dict[str, Any]) -> None:
        self._record("set_tweaks", options)
        self.tweaks.append(options)

    def get_dof(self) -> List[int]:
        self._record("get_dof")
        return list(self._dof)

    def set_dof(self, mask: Sequence[int]) -> None:
        self._record("set_dof", list(mask))
        self.dof_masks.append(list(mask))

    def ask_pose(self, position, orientation, seed=None) -> AskPoseResult:
        self._record("ask_pose", position, orientation, seed)
        position = np.asarray(position, dtype=np.float64)
        orientation = np.asarray(orientation, dtype=np.float64)
        self.asks.append((position, orientation, None if seed is None else np.asarray(seed)))
        if self.ask_pose_fn is not None:
            return self.ask_pose_fn(position, orientation, seed)
        return AskPoseResult(position, orientation, joints=np.full(7, float(len(self.asks))))

    def go_to_pose(self, position, orientation, duration: float) -> None:
        self._record("go_to_pose", position, orientation, duration)
        self.moves.append((np.asarray(position, dtype=np.float64), np.asarray(orientation, dtype=np.float64), duration))

    def wait_motion_done(self, period: float, timeout: float) -> bool:
        self._record("wait_motion_done", period, timeout)
        self.waits.append((period, timeout))
        if self.on_wait is not None:
            self.on_wait(len(self.waits))
        return self.motion_done

    def stop(self) -> None:
        self._record("stop")
        self.stops += 1


class FakeGazeEndpoint(GazeEndpoint):
    """In-memory gaze controller; tokens start at 100 to tell them from the startup context."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._next_token = 100
        self.stops = 0

    def names(self) -> List[str]:
        return [method for method, _ in self.calls]

    def args_of(self, method: str) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def store_config(self):
        self.calls.append(("store_config", ()))
        self._next_token += 1
        return self._next_token

    def restore_config(self, token) -> None:
        self.calls.append(("restore_config", (token,)))

    def release_config(self, token) -> None:
        self.calls.append(("release_config", (token,)))

    def set_tracking_mode(self, enabled: bool) -> None:
        self.calls.append(("set_tracking_mode", (enabled,)))

    def look_at_point(self, point) -> None:
        self.calls.append(("look_at_point", (np.asarray(point, dtype=np.float64),)))

    def look_at_pixel(self, eye_index: int, pixel) -> None:
        self.calls.append(("look_at_pixel", (eye_index, np.asarray(pixel, dtype=np.float64))))

    def set_saccades(self, enabled: bool) -> None:
        self.calls.append(("set_saccades", (enabled,)))

    def set_traj_times(self, neck: float, eyes: float) -> None:
        self.calls.append(("set_traj_times", (neck, eyes)))

    def stop(self) -> None:
        self.calls.append(("stop", ()))
        self.stops += 1


class FakePixelFeed(PixelFeed):
    """Queued samples first, then ``steady`` (None means nothing new)."""

    def __init__(self, steady: Optional[PixelSample] = None) -> None:
        self.queue: deque = deque()
        self.steady = steady
        self.reads = 0

    def read(self) -> Optional[PixelSample]:
        self.reads += 1
        if self.queue:
            return self.queue.popleft()
        return self.steady


class FakeToolSolver(ToolSolver):
    """Sample counter that grows by ``step`` on every ``count`` while enabled."""

    def __init__(self, dimensions=(0.1, -0.05, 0.02), step: int = 5) -> None:
        self.dimensions = dimensions
        self.step = step
        self.enabled = False
        self.samples = 0
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def names(self) -> List[str]:
        return [method for method, _ in self.calls]

    def clear(self) -> None:
        self.calls.append(("clear", ()))
        self.samples = 0

    def select(self, arm: str, eye: str) -> None:
        self.calls.append(("select", (arm, eye)))

    def enable(self) -> None:
        self.calls.append(("enable", ()))
        self.enabled = True

    def disable(self) -> None:
        self.calls.append(("disable", ()))
        self.enabled = False

    def count(self) -> int:
        self.calls.append(("count", ()))
        if self.enabled:
            self.samples += self.step
        return self.samples

    def find(self):
        self.calls.append(("find", ()))
        return self.dimensions


# Pixel whose shifted row (v + 50) sits exactly on the convergence target.
ON_TARGET_PIXEL = PixelSample(u=160.0, v=70.0)


@pytest.fixture
def state() -> MotorState:
    return MotorState()


@pytest.fixture
def arms() -> Dict[Arm, FakeMotionEndpoint]:
    return {Arm.LEFT: FakeMotionEndpoint("left_arm"), Arm.RIGHT: FakeMotionEndpoint("right_arm")}


@pytest.fixture
def gaze() -> FakeGazeEndpoint:
    return FakeGazeEndpoint()


@pytest.fixture
def pixels() -> FakePixelFeed:
    return FakePixelFeed(steady=ON_TARGET_PIXEL)


@pytest.fixture
def solver() -> FakeToolSolver:
    return FakeToolSolver()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def operator(arms, gaze, pixels, solver, state, clock) -> KarmaOperator:
    return KarmaOperator(arms, gaze, pixels, solver, state=state, clock=clock, sleep=clock.sleep)


@pytest.fixture
def dispatcher(operator) -> CommandDispatcher:
    return CommandDispatcher(operator)


@pytest.fixture
def free_port() -> Callable[[], int]:
    """Returns a new unused local TCP port on every call."""
    taken = set()

    def _next() -> int:
        while True:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("127.0.0.1", 0))
                port = s.getsockname()[1]
            if port not in taken:
                taken.add(port)
                return port

    return _next
