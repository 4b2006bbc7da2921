import logging

import zmq

logger = logging.getLogger(__name__)

# Global ZMQ context (one per process)
_GLOBAL_ZMQ_CONTEXT = zmq.Context()


def get_global_context() -> zmq.Context:
    """Get the global ZMQ context (shared across all sockets)"""
    return _GLOBAL_ZMQ_CONTEXT


def cleanup_zmq_resources() -> None:
    """Terminate the global context; every socket must already be closed."""
    logger.debug("Terminating global ZMQ context")
    get_global_context().term()


def tcp_address(host: str, port: int) -> str:
    return f'tcp://{host}:{port}'


def create_response_socket(host: str, port: int) -> zmq.Socket:
    """Create a bound REP socket."""
    socket = get_global_context().socket(zmq.REP)
    socket.setsockopt(zmq.LINGER, 0)
    socket.bind(tcp_address(host, port))
    return socket


def create_request_socket(host: str, port: int) -> zmq.Socket:
    """Create a connected REQ socket."""
    socket = get_global_context().socket(zmq.REQ)
    socket.setsockopt(zmq.LINGER, 0)
    socket.connect(tcp_address(host, port))
    return socket
