import logging
import threading
from typing import Any, Optional

from karma.motor.common.messaging import BaseSubscriber
from karma.motor.components.interface.interface_base import PixelFeed
from karma.motor.components.interface.interface_types import PixelSample

logger = logging.getLogger(__name__)


class PixelFeedSubscriber(BaseSubscriber, PixelFeed):
    """Latest tool-tip pixel published by the vision module.

    Each sample is handed out by :meth:`read` at most once.
    """

    def __init__(self, host: str, port: int, topic: str):
        super().__init__(host, port, topic)
        self._lock = threading.Lock()
        self._latest: Optional[PixelSample] = None
        self.start()

    def process_message(self, message: Any) -> None:
        sample = PixelSample.from_sequence(message)
        if sample is None:
            logger.debug(f"Ignoring pixel message {message!r}")
            return
        with self._lock:
            self._latest = sample

    def read(self) -> Optional[PixelSample]:
        with self._lock:
            sample, self._latest = self._latest, None
        return sample
