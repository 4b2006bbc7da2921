import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

import zmq

from karma.motor.common.errors import SerializationError

from .serialization import PickleSerializer, Serializer
from .utils import get_global_context, tcp_address

logger = logging.getLogger(__name__)


class BaseSubscriber(threading.Thread, ABC):
    """Background SUB socket delivering decoded ``[topic, payload]`` messages.

    The socket is created and used only by the worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        topic: str = "",
        serializer: Optional[Serializer] = None,
        context: Optional[zmq.Context] = None,
        poll_ms: int = 100,
    ):
        super().__init__(daemon=True, name=f"sub-{topic or 'all'}-{port}")
        self._host = host
        self._port = port
        self._topic = topic
        self._serializer = serializer or PickleSerializer()
        self._zmq_context = context or get_global_context()
        self._poll_ms = poll_ms
        self._running = threading.Event()
        self._running.set()

    def _init_socket(self) -> zmq.Socket:
        socket = self._zmq_context.socket(zmq.SUB)
        socket.setsockopt(zmq.RCVHWM, 5)
        socket.setsockopt(zmq.LINGER, 0)
        socket.connect(tcp_address(self._host, self._port))
        socket.setsockopt_string(zmq.SUBSCRIBE, self._topic)
        return socket

    def stop(self):
        """Stop the subscriber thread gracefully."""
        self._running.clear()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout=2)
            if self.is_alive():
                logger.warning(f"Subscriber {self.name} did not stop gracefully")

    @abstractmethod
    def process_message(self, message: Any) -> None:
        """Handle one decoded payload."""
        pass

    def run(self):
        try:
            socket = self._init_socket()
        except zmq.ZMQError as e:
            logger.error(f"Failed to initialize subscriber on port {self._port}: {e}")
            return

        poller = zmq.Poller()
        poller.register(socket, zmq.POLLIN)
        try:
            while self._running.is_set():
                events = dict(poller.poll(self._poll_ms))
                if socket not in events:
                    continue
                try:
                    _, payload = socket.recv_multipart(zmq.NOBLOCK)
                except zmq.Again:
                    continue
                except ValueError:
                    logger.warning(f"Dropping malformed message on port {self._port}")
                    continue
                try:
                    self.process_message(self._serializer.decode(payload))
                except SerializationError as e:
                    logger.error(f"Failed to decode message: {e}")
        except zmq.ZMQError as e:
            if self._running.is_set():
                logger.error(f"Error in subscriber loop: {e}")
        finally:
            poller.unregister(socket)
            socket.close()
