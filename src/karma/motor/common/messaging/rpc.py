from __future__ import annotations

import logging
import threading
from time import monotonic
from typing import Any, Callable, Optional

import zmq

from karma.motor.common.errors import EndpointFault, SerializationError

from .serialization import PickleSerializer, Serializer
from .utils import create_request_socket, create_response_socket

logger = logging.getLogger(__name__)

"""Request/reply helpers for the command boundary and the collaborators.

A REQ socket that misses its reply is stuck in the "expect reply" state, so
:class:`RequestClient` closes and recreates its socket after every timeout
before raising :class:`EndpointFault`.

>>> client = RequestClient("127.0.0.1", 9411, name="right_arm")
>>> reply = client.request({"verb": "stop", "args": []}, timeout=1.0)

>>> server = ReplyServer("*", 9400)
>>> while running:
...     server.poll_once(handler, timeout_ms=100)
"""

__all__ = [
    "RequestClient",
    "ReplyServer",
]


class RequestClient:
    """Blocking REQ client with a bounded wait and socket reset on timeout."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        name: str = "",
        timeout: float = 5.0,
        serializer: Optional[Serializer] = None,
    ):
        self._host = host
        self._port = port
        self.name = name or f"{host}:{port}"
        self._timeout = timeout
        self._serializer = serializer or PickleSerializer()
        self._lock = threading.Lock()
        self._socket: Optional[zmq.Socket] = None

    def _ensure_socket(self) -> zmq.Socket:
        if self._socket is None:
            self._socket = create_request_socket(self._host, self._port)
        return self._socket

    def _reset(self):
        if self._socket is not None:
            self._socket.close(linger=0)
            self._socket = None

    def request(self, payload: Any, *, verb: str = "", timeout: Optional[float] = None) -> Any:
        """Send ``payload`` and return the decoded reply.

        Raises:
            EndpointFault: no reply within ``timeout`` seconds, or the
                transport refused the message.
        """
        timeout = self._timeout if timeout is None else timeout
        verb = verb or _verb_of(payload)
        with self._lock:
            socket = self._ensure_socket()
            try:
                socket.send(self._serializer.encode(payload))
            except zmq.ZMQError as e:
                self._reset()
                raise EndpointFault(self.name, verb, str(e)) from e

            poller = zmq.Poller()
            poller.register(socket, zmq.POLLIN)
            t0 = monotonic()
            remaining_ms = int(timeout * 1000)
            while remaining_ms > 0:
                socks = dict(poller.poll(remaining_ms))
                if socks.get(socket) == zmq.POLLIN:
                    buffer = socket.recv()
                    try:
                        return self._serializer.decode(buffer)
                    except SerializationError as e:
                        raise EndpointFault(self.name, verb, f"bad reply ({e})") from e
                remaining_ms = int((timeout - (monotonic() - t0)) * 1000)

            logger.error(f"No reply from {self.name} to '{verb}' within {timeout:.1f}s")
            self._reset()
            raise EndpointFault(self.name, verb)

    def close(self):
        with self._lock:
            self._reset()


class ReplyServer:
    """REP socket that answers one request per :meth:`poll_once`."""

    def __init__(self, host: str, port: int, *, serializer: Optional[Serializer] = None, error_reply: Any = None):
        self._socket = create_response_socket(host, port)
        self._serializer = serializer or PickleSerializer()
        self._error_reply = error_reply
        self._poller = zmq.Poller()
        self._poller.register(self._socket, zmq.POLLIN)

    def poll_once(self, handler: Callable[[Any], Any], *, timeout_ms: int = 0) -> bool:
        """Wait up to ``timeout_ms`` for a request, reply with ``handler(request)``.

        Undecodable requests are answered with ``error_reply``. Returns True
        when a request was handled.
        """
        socks = dict(self._poller.poll(timeout_ms))
        if socks.get(self._socket) != zmq.POLLIN:
            return False

        buffer = self._socket.recv()
        try:
            request = self._serializer.decode(buffer)
        except SerializationError as e:
            logger.warning(f"Rejecting undecodable request: {e}")
            reply = self._error_reply
        else:
            reply = handler(request)
        self._socket.send(self._serializer.encode(reply))
        return True

    def close(self):
        self._poller.unregister(self._socket)
        self._socket.close(linger=0)


def _verb_of(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("verb", ""))
    if isinstance(payload, (list, tuple)) and payload:
        return str(payload[0])
    return ""
