"""
Config loading -- YAML on disk, StoreConfig in memory.

A missing file means defaults. A broken file also means defaults,
with a warning, so a typo never blocks opening the store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from . import CONFIG_PATH
from .models import StoreConfig

logger = logging.getLogger("pw2.config")


def load_config(path: Optional[Union[str, Path]] = None) -> StoreConfig:
    """Load store configuration.

    Args:
        path: YAML file to read. Defaults to $PW2_CONFIG.

    Returns:
        StoreConfig, defaulted where the file is silent.
    """
    target = path or CONFIG_PATH
    if not target:
        return StoreConfig()

    config_file = Path(target).expanduser()
    if not config_file.exists():
        logger.debug("No config at %s, using defaults", config_file)
        return StoreConfig()

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        return StoreConfig(**data)
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as exc:
        logger.warning("Failed to load config %s: %s", config_file, exc)
    return StoreConfig()


def save_config(config: StoreConfig, path: Union[str, Path]) -> Path:
    """Write configuration as YAML.

    Args:
        config: Configuration to persist.
        path: Destination file.

    Returns:
        Path written.
    """
    config_file = Path(path).expanduser()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        yaml.dump(config.model_dump(mode="json"), default_flow_style=False),
        encoding="utf-8",
    )
    return config_file
