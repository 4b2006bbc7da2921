from . import motion, network

__all__ = ["motion", "network"]
