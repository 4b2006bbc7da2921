"""
KARMA Motor Package

Push, draw and tool-tip exploration primitives for a dual-arm robot.
The entry point is in main.py, configuration lives in configs/constants/models.py.
"""

from karma.motor.configs.constants.models import MotorConfig, NetworkConfig, PortsConfig

__all__ = ["MotorConfig", "NetworkConfig", "PortsConfig"]
