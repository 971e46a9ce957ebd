"""User configuration (config.yaml) loading and updates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from core.fileio import read_yaml, write_yaml_atomic
from core.models import AppConfig
from core.workspace import config_path

logger = logging.getLogger(__name__)


def load_config(root: Path | None = None) -> AppConfig:
    """Load config.yaml into an AppConfig; missing or unreadable file gives defaults."""
    path = config_path(root)
    try:
        data = read_yaml(path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        data = {}
    return AppConfig.from_dict(data)


def save_config(config: AppConfig, root: Path | None = None) -> None:
    write_yaml_atomic(config_path(root), config.to_dict())


def update_pomodoro_config(root: Path | None = None, **patch: Any) -> AppConfig:
    """Patch the pomodoro section of config.yaml and save it.

    Unknown keys raise ValueError so typos do not silently vanish.
    """
    config = load_config(root)
    current = config.pomodoro.to_dict()
    unknown = set(patch) - set(current)
    if unknown:
        raise ValueError(f"Unknown pomodoro setting(s): {', '.join(sorted(unknown))}")
    current.update(patch)
    config.pomodoro = type(config.pomodoro).from_dict(current)
    save_config(config, root)
    return config
