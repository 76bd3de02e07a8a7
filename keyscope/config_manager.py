"""Configuration manager for keyscope using TOML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .config import CONFIG_FILE, DetectorConfig

logger = logging.getLogger(__name__)

SECTION = "detector"


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read config %s: %s", config_path, exc)
        return {}


def _save_full_config(config: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    config_path = path or CONFIG_FILE
    config_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config_path, exc)
        return False


def load_detector_config(path: Optional[Path] = None) -> DetectorConfig:
    """Load detector options from the ``[detector]`` section.

    Returns:
        A :class:`DetectorConfig`; defaults when the file or section is missing.
    """
    full = load_full_config(path)
    return DetectorConfig.from_dict(full.get(SECTION, {}))


def save_detector_config(values: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Merge *values* into the ``[detector]`` section.

    Values are validated through :class:`DetectorConfig` first so the file
    never holds options the detector cannot read back.

    Returns:
        True if saved successfully.
    """
    config = load_full_config(path)
    current = DetectorConfig.from_dict({**config.get(SECTION, {}), **values})
    defaults = DetectorConfig().to_dict()
    config[SECTION] = {
        name: value
        for name, value in current.to_dict().items()
        if value != defaults[name] or name in values
    }
    return _save_full_config(config, path)


def clear_detector_config(path: Optional[Path] = None) -> bool:
    """Remove ``[detector]`` section from config, resetting to defaults."""
    config = load_full_config(path)
    config.pop(SECTION, None)
    return _save_full_config(config, path)
