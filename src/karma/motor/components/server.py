import logging
import threading
from typing import Any, Optional

from karma.motor.common.messaging import BaseSubscriber, ReplyServer
from karma.motor.components.component import Component
from karma.motor.components.dispatcher import CommandDispatcher
from karma.motor.configs.constants import network
from karma.motor.configs.constants.models import MotorConfig

logger = logging.getLogger(__name__)


class StopSubscriber(BaseSubscriber):
    """Interrupts the running action whenever anything arrives on the stop channel."""

    def __init__(self, host: str, port: int, dispatcher: CommandDispatcher, topic: str = network.STOP_TOPIC):
        super().__init__(host, port, topic)
        self._dispatcher = dispatcher

    def process_message(self, message: Any) -> None:
        logger.info(f"Stop received: {message!r}")
        self._dispatcher.interrupt()


class KarmaMotorServer(Component):
    """Service loop: one request at a time on the rpc port, stop on its own thread."""

    def __init__(self, config: MotorConfig, dispatcher: CommandDispatcher):
        self._config = config
        self._dispatcher = dispatcher
        self._running = threading.Event()
        self._rpc: Optional[ReplyServer] = None
        self._stop_subscriber: Optional[StopSubscriber] = None

    def start(self):
        net, ports = self._config.network, self._config.ports
        self._rpc = ReplyServer(net.bind_address, ports.rpc_port, error_reply=[network.NACK])
        self._stop_subscriber = StopSubscriber(net.host_address, ports.stop_port, self._dispatcher)
        self._stop_subscriber.start()
        self._running.set()
        logger.info(f"📡 {self._config.name} listening on rpc port {ports.rpc_port}, stop port {ports.stop_port}")

    def stream(self):
        self.notify_component_start(self._config.name)
        if self._rpc is None:
            self.start()
        try:
            while self._running.is_set():
                self._rpc.poll_once(self._dispatcher.respond, timeout_ms=network.RPC_POLL_MS)
        finally:
            self.close()

    def shutdown(self):
        """Ask the loop to exit after the current request."""
        self._running.clear()

    def close(self):
        self._running.clear()
        if self._stop_subscriber is not None:
            self._stop_subscriber.stop()
            self._stop_subscriber = None
        if self._rpc is not None:
            self._rpc.close()
            self._rpc = None
        logger.info(f"🏁 {self._config.name} closed")
