from types import SimpleNamespace

import pytest

from karma.motor.configs.constants import motion
from karma.motor.configs.constants.models import (
    ElbowConfig,
    MotionConfig,
    MotorConfig,
    NetworkConfig,
    PortsConfig,
)
from karma.motor.utils.configs import apply_yaml_preserving_cli, load_yaml_config


def test_defaults_are_valid():
    cfg = MotorConfig()
    assert cfg.name == "karmaMotor"
    assert cfg.robot == "icub"
    assert not cfg.elbow.enabled
    assert cfg.elbow.height == pytest.approx(0.4)
    assert cfg.elbow.weight == pytest.approx(30.0)
    assert cfg.motion.mov_time == pytest.approx(1.0)


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PortsConfig(rpc_port=0),
        lambda: PortsConfig(gaze_port=70000),
        lambda: PortsConfig(rpc_port=9000, stop_port=9000),
        lambda: NetworkConfig(host_address="not-an-ip"),
        lambda: NetworkConfig(endpoint_timeout=0.0),
        lambda: ElbowConfig(weight=-1.0),
        lambda: MotionConfig(mov_time=0.0),
        lambda: MotorConfig(name=""),
    ],
)
def test_invalid_values_raise(factory):
    with pytest.raises(ValueError):
        factory()


def test_elbow_tweak_layout():
    tweak = ElbowConfig(enabled=True, height=0.35, weight=20.0).tweak()
    task = tweak[motion.ELBOW_TASK_NAME]
    assert task["dim"] == motion.ELBOW_TASK_DIM
    assert task["position"] == [0.0, 0.0, 0.35]
    assert task["weights"] == [0.0, 0.0, 20.0]


def test_missing_yaml_gives_no_overrides(tmp_path):
    assert load_yaml_config(str(tmp_path / "absent.yaml")) == {}


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    assert load_yaml_config(str(path)) == {}


def test_yaml_overrides_preserve_cli_values(tmp_path):
    path = tmp_path / "motor.yaml"
    path.write_text(
        "motor:\n"
        "  robot: icubSim\n"
        "  elbow:\n"
        "    enabled: true\n"
        "    height: 0.3\n"
        "  motion:\n"
        "    mov_time: 2.0\n"
        "  ports:\n"
        "    unknown_port: 1\n"
    )
    overrides = load_yaml_config(str(path))

    # mov_time was given on the command line
    cfg = SimpleNamespace(motor=MotorConfig(motion=MotionConfig(mov_time=1.5)))
    apply_yaml_preserving_cli(cfg, overrides)

    assert cfg.motor.robot == "icubSim"
    assert cfg.motor.elbow.enabled is True
    assert cfg.motor.elbow.height == pytest.approx(0.3)
    assert cfg.motor.motion.mov_time == pytest.approx(1.5)
    assert not hasattr(cfg.motor.ports, "unknown_port")


def test_yaml_without_motor_section_is_ignored():
    cfg = SimpleNamespace(motor=MotorConfig())
    apply_yaml_preserving_cli(cfg, {"other": {"robot": "x"}})
    assert cfg.motor.robot == "icub"
