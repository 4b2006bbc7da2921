from dataclasses import dataclass, field

from karma.motor.configs.constants import motion, network

# -----------------------------------------------------------------------------
# Configuration Models
# -----------------------------------------------------------------------------


@dataclass
class NetworkConfig:
    """Network configuration for the motor module."""
    host_address: str = network.HOST_ADDRESS
    bind_address: str = network.BIND_ADDRESS
    endpoint_timeout: float = network.ENDPOINT_TIMEOUT
    solver_timeout: float = network.SOLVER_TIMEOUT

    def __post_init__(self):
        """Lightweight validation for network configuration."""
        if self.host_address != "localhost":
            ip_parts = self.host_address.split(".")
            if len(ip_parts) != 4:
                raise ValueError(f"host_address must be IPv4 format, got: {self.host_address}")
        for name, value in [
            ("endpoint_timeout", self.endpoint_timeout),
            ("solver_timeout", self.solver_timeout),
        ]:
            if value <= 0:
                raise ValueError(f"{name} must be positive, got: {value}")


@dataclass
class PortsConfig:
    """Port configuration for the command boundary and the collaborators."""
    # Command boundary
    rpc_port: int = network.RPC_PORT
    stop_port: int = network.STOP_PORT

    # Collaborators
    vision_port: int = network.VISION_PORT
    finder_port: int = network.FINDER_PORT
    gaze_port: int = network.GAZE_PORT
    left_arm_port: int = network.LEFT_ARM_PORT
    right_arm_port: int = network.RIGHT_ARM_PORT

    def __post_init__(self):
        """Lightweight validation for port configuration."""
        all_ports = [
            ("rpc_port", self.rpc_port),
            ("stop_port", self.stop_port),
            ("vision_port", self.vision_port),
            ("finder_port", self.finder_port),
            ("gaze_port", self.gaze_port),
            ("left_arm_port", self.left_arm_port),
            ("right_arm_port", self.right_arm_port),
        ]
        for port_name, port_value in all_ports:
            if not 1 <= port_value <= 65535:
                raise ValueError(f"{port_name} out of range: {port_value}")
        if self.rpc_port == self.stop_port:
            raise ValueError("rpc_port and stop_port must be different")


@dataclass
class ElbowConfig:
    """Secondary task keeping the elbow high during push and draw."""
    enabled: bool = False
    height: float = motion.DEFAULT_ELBOW_HEIGHT
    weight: float = motion.DEFAULT_ELBOW_WEIGHT

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"elbow weight must be non-negative, got: {self.weight}")

    def tweak(self) -> dict:
        """Controller tweak options for the elbow task."""
        return {
            motion.ELBOW_TASK_NAME: {
                "dim": motion.ELBOW_TASK_DIM,
                "position": [0.0, 0.0, float(self.height)],
                "weights": [0.0, 0.0, float(self.weight)],
            }
        }


@dataclass
class MotionConfig:
    """Timing options for the actions."""
    mov_time: float = motion.DEFAULT_MOV_TIME
    poll_period: float = motion.MOTION_POLL_PERIOD

    def __post_init__(self):
        for name, value in [("mov_time", self.mov_time), ("poll_period", self.poll_period)]:
            if value <= 0:
                raise ValueError(f"{name} must be positive, got: {value}")


@dataclass
class MotorConfig:
    """Top-level configuration for the motor module."""
    name: str = network.MODULE_NAME
    robot: str = network.ROBOT_NAME
    network: NetworkConfig = field(default_factory=NetworkConfig)
    ports: PortsConfig = field(default_factory=PortsConfig)
    elbow: ElbowConfig = field(default_factory=ElbowConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)

    def __post_init__(self):
        if not self.name:
            raise ValueError("name must not be empty")
        if not self.robot:
            raise ValueError("robot must not be empty")
