"""
Generator presets for the experiment runners.

``generator_params.yaml`` holds two sections, ``static`` and ``dynamic``,
each mapping a preset name to constructor arguments:

- static presets: n, average_degree, exponent, capacity, n_workers
- dynamic presets: the static point-sampling arguments plus
  initial_factor, moved_share, factor_growth, move_distance and n_steps

Command-line flags of the runners override individual values.

Examples
--------
>>> params = load_generator_params()
>>> params["static"]["small"]["n"]
1000
"""

from pathlib import Path
import yaml
from typing import Any, Dict

CONFIG_DIR = Path(__file__).parent


def load_config(config_name: str) -> Dict[str, Any]:
    """Parse ``<config_name>.yaml`` from this directory; FileNotFoundError if absent."""
    config_path = CONFIG_DIR / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_generator_params() -> Dict[str, Any]:
    """
    Load the static and dynamic generator presets.

    Returns
    -------
    Dict[str, Any]
        ``{"static": {preset: kwargs}, "dynamic": {preset: kwargs}}``
    """
    return load_config("generator_params")


__all__ = [
    "load_config",
    "load_generator_params",
    "CONFIG_DIR",
]
