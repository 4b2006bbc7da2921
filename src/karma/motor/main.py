#!/usr/bin/env python3
"""
Main entry point for the KARMA motor module.

Wires the ZeroMQ collaborator clients (arms, gaze, vision, tool finder) to the
operator and serves the command port until interrupted.  CLI flags are
generated from :class:`MainConfig` by Draccus.
"""

import logging
from dataclasses import dataclass, field

import draccus

from karma.motor.common.messaging import cleanup_zmq_resources
from karma.motor.components.dispatcher import CommandDispatcher
from karma.motor.components.interface.gaze_endpoint import GazeEndpointClient
from karma.motor.components.interface.pixel_feed import PixelFeedSubscriber
from karma.motor.components.interface.robot.cartesian_endpoint import CartesianEndpointClient
from karma.motor.components.interface.tool_solver import ToolSolverClient
from karma.motor.components.operator.karma_operator import KarmaOperator
from karma.motor.components.operator.operator_types import Arm
from karma.motor.components.server import KarmaMotorServer
from karma.motor.configs.constants import network
from karma.motor.configs.constants.models import MotorConfig
from karma.motor.utils.configs import apply_yaml_preserving_cli, load_yaml_config
from karma.motor.utils.logger import parse_level, setup_root_logger

logger = logging.getLogger(__name__)


@dataclass
class MainConfig:
    """Main configuration: structured motor config plus process options."""

    motor: MotorConfig = field(default_factory=MotorConfig)

    # Optional config file override
    config_file: str = ""

    # Root logger level
    log_level: str = "info"

    def __post_init__(self):
        self.log_level_value = parse_level(self.log_level)


def build_server(config: MotorConfig):
    """Create the collaborator clients, operator, dispatcher and server.

    Returns the server and the list of clients to close on shutdown.
    """
    net, ports = config.network, config.ports
    arms = {
        Arm.LEFT: CartesianEndpointClient(
            f"{config.robot}/left_arm", net.host_address, ports.left_arm_port, net.endpoint_timeout
        ),
        Arm.RIGHT: CartesianEndpointClient(
            f"{config.robot}/right_arm", net.host_address, ports.right_arm_port, net.endpoint_timeout
        ),
    }
    gaze = GazeEndpointClient(net.host_address, ports.gaze_port, net.endpoint_timeout, name=f"{config.robot}/gaze")
    pixels = PixelFeedSubscriber(net.host_address, ports.vision_port, network.VISION_TOPIC)
    solver = ToolSolverClient(net.host_address, ports.finder_port, net.solver_timeout)

    operator = KarmaOperator(arms, gaze, pixels, solver, elbow=config.elbow, config=config.motion)
    server = KarmaMotorServer(config, CommandDispatcher(operator))
    return server, [arms[Arm.LEFT], arms[Arm.RIGHT], gaze, pixels, solver]


def run_motor(config: MainConfig):
    """Serve requests until Ctrl+C."""
    setup_root_logger(config.log_level_value)

    motor = config.motor
    logger.info(f"🚀 Starting {motor.name} for robot '{motor.robot}'")
    logger.info(f"📡 Collaborators on {motor.network.host_address}")
    logger.info(f"🦾 Elbow task: {'ENABLED' if motor.elbow.enabled else 'DISABLED'}")
    logger.info(f"⏱️  Pose-mode movement time: {motor.motion.mov_time:.2f}s")

    server, clients = build_server(motor)
    try:
        server.stream()
    except KeyboardInterrupt:
        logger.info("🛑 Shutdown requested...")
    finally:
        server.close()
        for client in clients:
            if isinstance(client, PixelFeedSubscriber):
                client.stop()
            else:
                client.close()
        cleanup_zmq_resources()
        logger.info("🏁 Motor shutdown complete")


@draccus.wrap()
def main(cfg: MainConfig):
    """
    Main entry point for the KARMA motor module.

    Configuration precedence (highest to lowest):
    1. CLI flags (via Draccus)
    2. YAML config file overrides
    3. Default values

    Examples:
        karma-motor
        karma-motor --motor.elbow.enabled=true --motor.elbow.height=0.35
        karma-motor --motor.motion.mov_time=1.5 --config_file=config/motor.yaml
        karma-motor --motor.network.host_address=10.0.0.2 --motor.ports.rpc_port=9500
    """
    if cfg.config_file:
        yaml_overrides = load_yaml_config(cfg.config_file)
        if yaml_overrides:
            logger.info(f"🔧 Applying YAML overrides from {cfg.config_file}")
            apply_yaml_preserving_cli(cfg, yaml_overrides)

    run_motor(cfg)


if __name__ == "__main__":
    main()
