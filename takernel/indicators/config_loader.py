"""
YAML preset loader for indicator inputs.

Presets let a charting host keep its indicator settings in a file:

    rsi:
      length: 21
      ma_type: EMA
    macd:
      fast_length: 8
      slow_length: 21

Every entry is validated against the registry when loaded.
"""
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Union

from .config import resolve_inputs
from .registry import get_entry

logger = logging.getLogger(__name__)


def parse_presets(config_dict: Any, origin: str = "<dict>") -> Dict[str, Any]:
    """
    Validate a preset mapping.

    Args:
        config_dict: Mapping of indicator id -> input overrides (or None for defaults)
        origin: Label used in error messages

    Returns:
        Dict of indicator id -> validated inputs dataclass

    Raises:
        ValueError: If the mapping has the wrong shape
        UnknownIndicatorError: If an id is not registered
        InvalidInputError / InvalidLengthError: If an input is invalid
    """
    if not isinstance(config_dict, dict):
        raise ValueError(f"Preset config must be a mapping of indicator id -> inputs: {origin}")

    presets = {}
    for indicator_id, overrides in config_dict.items():
        entry = get_entry(str(indicator_id))
        if overrides is None:
            overrides = {}
        if not isinstance(overrides, dict):
            raise ValueError(
                f"Inputs for '{indicator_id}' must be a mapping, got {type(overrides).__name__}: {origin}"
            )
        presets[entry.id] = resolve_inputs(entry.indicator_class.inputs_class, overrides)
    logger.debug("Loaded %d indicator presets from %s", len(presets), origin)
    return presets


def load_presets_from_yaml(yaml_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load indicator input presets from a YAML file.

    Args:
        yaml_path: Path to YAML preset file

    Returns:
        Dict of indicator id -> validated inputs dataclass

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or not a mapping
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Preset file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty preset file: {yaml_path}")

    return parse_presets(config_dict, origin=str(yaml_path))
