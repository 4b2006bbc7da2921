import pickle
from abc import ABC, abstractmethod
from typing import Generic, Optional, Type, TypeVar

from karma.motor.common.errors import SerializationError

T = TypeVar("T")


class Serializer(ABC, Generic[T]):
    """Abstract serializer interface for message payloads.

    Implementations must be symmetrical: ``decode(encode(x)) == x`` for supported inputs.
    """

    @abstractmethod
    def encode(self, obj: T) -> bytes:
        pass

    @abstractmethod
    def decode(self, buffer: bytes) -> T:
        pass


class PickleSerializer(Serializer[T]):
    """Pickle-based serializer with optional runtime type validation."""

    def __init__(self, expected_type: Optional[Type[T]] = None):
        self._expected_type = expected_type

    def encode(self, obj: T) -> bytes:
        return pickle.dumps(obj, protocol=-1)

    def decode(self, buffer: bytes) -> T:
        try:
            obj = pickle.loads(buffer)
        except (pickle.UnpicklingError, EOFError, AttributeError, ValueError) as e:
            raise SerializationError(f"Cannot decode payload of {len(buffer)} bytes: {e}") from e
        if self._expected_type is not None and not isinstance(obj, self._expected_type):
            raise SerializationError(f"Decoded type {type(obj)} != expected {self._expected_type}")
        return obj
