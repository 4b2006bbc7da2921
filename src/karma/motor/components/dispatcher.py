import logging
import math
from typing import Any, Callable, Dict, List, Sequence

from karma.motor.common.errors import InvalidParameter, KarmaMotorError
from karma.motor.components.operator.karma_operator import KarmaOperator
from karma.motor.components.operator.operator_types import (
    Arm,
    ArmHint,
    DrawRequest,
    Eye,
    HandPose,
    PushRequest,
)
from karma.motor.configs.constants.network import ACK, NACK

logger = logging.getLogger(__name__)

"""Command boundary of the motor module.

Requests are lists ``[verb, *args]`` (a whitespace separated string is
accepted too); replies always start with ``ack`` or ``nack``:

========================================  ==================
request                                   reply
========================================  ==================
push cx cy cz theta radius                ack
pusp pose cx cy cz theta radius           ack
draw cx cy cz theta radius dist           ack
vdra cx cy cz theta radius dist           ack quality
drap pose cx cy cz theta radius dist      ack
vdrp pose cx cy cz theta radius dist      ack quality
find arm eye                              ack x y z
tool attach arm x y z                     ack
toop attach arm x y z                     ack
tool get | toop get                       ack arm x y z
tool remove | toop remove                 ack
========================================  ==================
"""


def _floats(args: Sequence[Any], count: int, verb: str) -> List[float]:
    if len(args) < count:
        raise InvalidParameter(f"'{verb}' expects {count} numeric fields, got {len(args)}")
    try:
        values = [float(a) for a in args[:count]]
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"'{verb}' has a non-numeric field: {e}") from e
    if not all(math.isfinite(v) for v in values):
        raise InvalidParameter(f"'{verb}' has a non-finite field: {values}")
    return values


def _hand_pose(value: Any) -> HandPose:
    try:
        return HandPose(int(float(value)))
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"Unknown hand pose {value!r}") from e


def _radius(radius: float) -> float:
    if radius <= 0.0:
        raise InvalidParameter(f"radius must be positive, got {radius}")
    return radius


def _arm(value: Any) -> Arm:
    try:
        return Arm(str(value).lower())
    except ValueError as e:
        raise InvalidParameter(f"arm must be 'left' or 'right', got {value!r}") from e


def _eye(value: Any) -> Eye:
    try:
        return Eye(str(value).lower())
    except ValueError as e:
        raise InvalidParameter(f"eye must be 'left' or 'right', got {value!r}") from e


class CommandDispatcher:
    """Parses wire commands, runs them on the operator and builds the reply.

    The cancellation flag is cleared when a motion request is accepted, so
    a stop that arrives between two requests does not leak into the next.
    """

    def __init__(self, operator: KarmaOperator):
        self._operator = operator
        self._state = operator.state
        self._handlers: Dict[str, Callable[[List[Any]], List[Any]]] = {
            "push": self._push,
            "pusp": self._push_pose,
            "draw": self._draw,
            "vdra": self._draw,
            "drap": self._draw_pose,
            "vdrp": self._draw_pose,
            "find": self._find,
            "tool": self._tool,
            "toop": self._tool,
        }

    def respond(self, command: Any) -> List[Any]:
        if isinstance(command, str):
            command = command.split()
        if not isinstance(command, (list, tuple)) or not command:
            logger.warning(f"Rejecting malformed command {command!r}")
            return [NACK]

        verb = str(command[0]).lower()
        handler = self._handlers.get(verb)
        if handler is None:
            logger.warning(f"Unknown command '{verb}'")
            return [NACK]

        try:
            return handler([verb] + list(command[1:]))
        except InvalidParameter as e:
            logger.warning(f"Invalid '{verb}' request: {e}")
        except KarmaMotorError as e:
            logger.error(f"'{verb}' failed: {e}")
        except Exception:
            logger.exception(f"Unexpected error while handling '{verb}'")
        return [NACK]

    def interrupt(self) -> None:
        self._operator.interrupt()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _accept(self) -> None:
        self._state.clear_cancel()

    def _push(self, command: List[Any]) -> List[Any]:
        cx, cy, cz, theta, radius = _floats(command[1:], 5, command[0])
        request = PushRequest(centroid=(cx, cy, cz), theta_deg=theta, radius=_radius(radius))
        self._accept()
        self._operator.push(request)
        return [ACK]

    def _push_pose(self, command: List[Any]) -> List[Any]:
        _floats(command[1:], 6, command[0])
        pose = _hand_pose(command[1])
        cx, cy, cz, theta, radius = _floats(command[2:], 5, command[0])
        request = PushRequest(centroid=(cx, cy, cz), theta_deg=theta, radius=_radius(radius), hand_pose=pose)
        self._accept()
        self._operator.push(request)
        return [ACK]

    def _draw(self, command: List[Any]) -> List[Any]:
        verb = command[0]
        cx, cy, cz, theta, radius, dist = _floats(command[1:], 6, verb)
        request = DrawRequest(
            centroid=(cx, cy, cz),
            theta_deg=theta,
            radius=_radius(radius),
            pull_distance=dist,
            simulate=verb == "vdra",
        )
        return self._run_draw(request)

    def _draw_pose(self, command: List[Any]) -> List[Any]:
        verb = command[0]
        _floats(command[1:], 7, verb)
        pose = _hand_pose(command[1])
        cx, cy, cz, theta, radius, dist = _floats(command[2:], 6, verb)
        request = DrawRequest(
            centroid=(cx, cy, cz),
            theta_deg=theta,
            radius=_radius(radius),
            pull_distance=dist,
            hand_pose=pose,
            simulate=verb == "vdrp",
        )
        return self._run_draw(request)

    def _run_draw(self, request: DrawRequest) -> List[Any]:
        self._accept()
        result = self._operator.draw(request)
        if request.simulate:
            return [ACK, float(result.quality)]
        return [ACK]

    def _find(self, command: List[Any]) -> List[Any]:
        if len(command) < 3:
            raise InvalidParameter("'find' expects an arm and an eye")
        arm, eye = _arm(command[1]), _eye(command[2])
        self._accept()
        result = self._operator.find(arm, eye)
        if result.dimensions is None:
            return [ACK]
        return [ACK] + [float(v) for v in result.dimensions]

    # ------------------------------------------------------------------
    # Tool frame
    # ------------------------------------------------------------------

    def _tool(self, command: List[Any]) -> List[Any]:
        verb = command[0]
        if len(command) < 2:
            raise InvalidParameter(f"'{verb}' expects a subcommand")
        sub = str(command[1]).lower()

        if sub == "attach":
            if len(command) < 6:
                raise InvalidParameter(f"'{verb} attach' expects an arm and 3 coordinates")
            hint = ArmHint(_arm(command[2]).value)
            tip = _floats(command[3:], 3, f"{verb} attach")
            if verb == "tool":
                self._state.attach_tool(hint, tip)
            else:
                self._state.attach_tool_translation(hint, tip)
            return [ACK]

        if sub == "get":
            hint, (x, y, z) = self._state.get_tool()
            return [ACK, hint.value, x, y, z]

        if sub == "remove":
            self._state.remove_tool()
            return [ACK]

        raise InvalidParameter(f"Unknown '{verb}' subcommand {sub!r}")
