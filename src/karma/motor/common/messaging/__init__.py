from .rpc import ReplyServer, RequestClient
from .serialization import PickleSerializer, Serializer
from .subscriber import BaseSubscriber
from .utils import (
    cleanup_zmq_resources,
    get_global_context,
)

__all__ = [
    "BaseSubscriber",
    "PickleSerializer",
    "ReplyServer",
    "RequestClient",
    "Serializer",
    "cleanup_zmq_resources",
    "get_global_context",
]
