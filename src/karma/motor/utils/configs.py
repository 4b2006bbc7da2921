"""Configuration utilities for the motor module.

YAML files provide overrides for the structured configuration; flags given on
the command line (via draccus) always win over the file.
"""
import logging
import os
from typing import Any

import yaml

from karma.motor.configs.constants.models import MotorConfig

logger = logging.getLogger(__name__)

_SECTIONS = ("network", "ports", "elbow", "motion")


def load_yaml_config(config_file: str) -> dict:
    """
    Load YAML configuration file with error handling.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Dictionary of configuration overrides
    """
    if not config_file or not os.path.exists(config_file):
        logger.warning(f"⚠️  Config file not found: {config_file} - using defaults")
        return {}

    try:
        with open(config_file, 'r') as f:
            config_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"❌ Failed to load config {config_file}: {e}")
        return {}

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        logger.error(f"❌ Config {config_file} must contain a mapping, got {type(config_data).__name__}")
        return {}
    logger.info(f"📄 Loaded config overrides from: {config_file}")
    return config_data


def apply_section_override(target: Any, yaml_obj: dict, defaults: Any, section_name: str):
    """
    Apply YAML overrides to a config section while preserving CLI flag precedence.

    A key is overridden only when its current value still equals the default,
    i.e. it was not given on the command line.
    """
    for key, yaml_value in (yaml_obj or {}).items():
        if not hasattr(defaults, key):
            logger.warning(f"⚠️  Unknown config key in YAML: {section_name}.{key}")
            continue

        if getattr(target, key) == getattr(defaults, key):
            setattr(target, key, yaml_value)
            logger.debug(f"📝 Applied YAML override: {section_name}.{key} = {yaml_value}")
        else:
            logger.debug(f"🚫 Skipped YAML override (CLI precedence): {section_name}.{key}")


def apply_yaml_preserving_cli(target_cfg: Any, yaml_overrides: dict):
    """
    Apply YAML overrides to ``target_cfg.motor`` while preserving CLI flag precedence.

    Scalar keys under ``motor`` (``name``, ``robot``) and each structured
    section are handled by :func:`apply_section_override`; the sections are
    re-validated afterwards.
    """
    motor_overrides = yaml_overrides.get('motor', {})
    if not motor_overrides:
        logger.debug("No 'motor' section found in YAML config")
        return

    defaults = MotorConfig()
    scalars = {k: v for k, v in motor_overrides.items() if k not in _SECTIONS}
    apply_section_override(target_cfg.motor, scalars, defaults, 'motor')

    for section in _SECTIONS:
        yaml_section = motor_overrides.get(section)
        if yaml_section:
            target_section = getattr(target_cfg.motor, section)
            apply_section_override(target_section, yaml_section, getattr(defaults, section), f'motor.{section}')
            target_section.__post_init__()
