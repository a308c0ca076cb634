"""Project configuration loaded from ``.snips.yml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".snips.yml"

DEFAULT_EXTENSIONS: tuple[str, ...] = ("md", "markdown")
DEFAULT_EXCLUDE: tuple[str, ...] = ("node_modules", ".git", "__pycache__", ".venv", "venv")


@dataclass
class SnipsConfig:
    """Settings for file discovery and language hints."""

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    recursive: bool = False
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    languages: dict[str, str] = field(default_factory=dict)


def _str_list(value: Any, default: tuple[str, ...]) -> list[str]:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    return list(default)


def load_config(project_root: Path) -> SnipsConfig:
    """Load ``.snips.yml`` from *project_root*.

    Falls back to defaults for a missing file, unreadable YAML, or keys of the
    wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    if not config_path.is_file():
        return SnipsConfig()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using defaults", config_path)
        return SnipsConfig()

    if not isinstance(data, dict):
        return SnipsConfig()

    extensions = [
        ext.lstrip(".").lower() for ext in _str_list(data.get("extensions"), DEFAULT_EXTENSIONS)
    ]
    recursive = data.get("recursive", False)
    languages_data = data.get("languages", {})
    if not isinstance(languages_data, dict):
        languages_data = {}

    languages = {
        str(ext).lstrip(".").lower(): str(lang)
        for ext, lang in languages_data.items()
        if lang is not None
    }

    return SnipsConfig(
        extensions=extensions,
        recursive=recursive if isinstance(recursive, bool) else False,
        exclude=_str_list(data.get("exclude"), DEFAULT_EXCLUDE),
        languages=languages,
    )
