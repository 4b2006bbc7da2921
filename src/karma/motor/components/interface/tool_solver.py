import logging
from typing import Any, List

from karma.motor.common.errors import EndpointFault
from karma.motor.common.messaging import RequestClient
from karma.motor.components.interface.interface_base import ToolSolver
from karma.motor.components.interface.interface_types import ToolDimensions
from karma.motor.configs.constants import network

logger = logging.getLogger(__name__)


class ToolSolverClient(ToolSolver):
    """Tool dimension solver reached over ZeroMQ.

    Requests are verb lists; replies start with ``ack`` or ``nack``.
    """

    def __init__(self, host: str, port: int, timeout: float = 5.0, name: str = "finder"):
        self._name = name
        self._client = RequestClient(host, port, name=name, timeout=timeout)

    def _call(self, *command: Any) -> List[Any]:
        verb = str(command[0])
        reply = self._client.request(list(command), verb=verb)
        if not isinstance(reply, (list, tuple)) or not reply or reply[0] != network.ACK:
            raise EndpointFault(self._name, verb, f"refused with {reply!r}")
        return list(reply[1:])

    def clear(self) -> None:
        self._call("clear")

    def select(self, arm: str, eye: str) -> None:
        self._call("select", arm, eye)

    def enable(self) -> None:
        self._call("enable")

    def disable(self) -> None:
        self._call("disable")

    def count(self) -> int:
        values = self._call("num")
        if not values:
            raise EndpointFault(self._name, "num", "missing sample count")
        return int(values[0])

    def find(self) -> ToolDimensions:
        values = self._call("find")
        if len(values) < 3:
            raise EndpointFault(self._name, "find", f"expected 3 dimensions, got {values!r}")
        return float(values[0]), float(values[1]), float(values[2])

    def close(self):
        self._client.close()
