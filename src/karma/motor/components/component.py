import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class Component(ABC):
    """Long-running part of the motor module, driven by :meth:`stream` until closed."""

    @abstractmethod
    def stream(self):
        raise NotImplementedError()

    @abstractmethod
    def close(self):
        raise NotImplementedError()

    def notify_component_start(self, component_name: Optional[str]):
        if component_name:
            logger.info("***************************************************************")
            logger.info(f"     Starting {component_name} ({type(self).__name__})")
            logger.info("***************************************************************")
