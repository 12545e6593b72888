"""Helpers shared by the experiment runners."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from config import load_generator_params

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging; DEBUG when verbose."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def resolve_params(section: str, preset: str, overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a YAML preset with command-line overrides.

    Parameters
    ----------
    section : str
        Top-level key of ``generator_params.yaml`` ('static' or 'dynamic')
    preset : str
        Preset name within the section
    overrides : Dict[str, Any]
        Values from the command line; None entries are ignored

    Returns
    -------
    Dict[str, Any]
        Effective parameters
    """
    presets = load_generator_params()[section]
    if preset not in presets:
        raise ValueError(f"Unknown {section} preset '{preset}', choose from {sorted(presets)}")
    params = dict(presets[preset])
    params.update({k: v for k, v in overrides.items() if v is not None})
    return params


def save_results(results: Dict[str, Any], output_dir: str, experiment_name: str) -> Path:
    """Save results as a timestamped JSON file."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    json_path = output_path / f"{experiment_name}_{timestamp}.json"
    with open(json_path, "w") as f:
        json.dump(_make_serializable(results), f, indent=2)
    logger.info(f"Saved results to {json_path}")
    return json_path


def _make_serializable(obj: Any) -> Any:
    """Convert numpy values to plain Python for JSON serialization."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: _make_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_make_serializable(v) for v in obj]
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        value = float(obj)
        return None if np.isnan(value) else value
    elif isinstance(obj, float) and np.isnan(obj):
        return None
    elif isinstance(obj, (np.bool_, bool)):
        return bool(obj)
    else:
        return obj


def optional_seed(seed: Optional[int]) -> Optional[int]:
    """Negative seeds on the command line mean 'unseeded'."""
    return None if seed is not None and seed < 0 else seed
