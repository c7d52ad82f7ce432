"""Configuration manager for docindex using TOML settings and per-library docs config."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    "link_exceptions": list(config.LINK_EXCEPTIONS),
    "allowed_error_tags": list(config.ALLOWED_ERROR_TAGS),
    "concurrency": config.DEFAULT_CONCURRENCY,
    "raw_prefix": config.RAW_PREFIX,
    "parser_command": list(config.PARSER_COMMAND),
}


def load_settings(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the ``[validation]`` table from the TOML config.

    Returns:
        Settings dictionary with defaults filled in for missing keys.
        Falls back to defaults entirely if the file doesn't exist or is invalid.
    """
    path = config_file or config.CONFIG_FILE
    settings = {key: (list(value) if isinstance(value, list) else value)
                for key, value in DEFAULT_SETTINGS.items()}
    if not path.exists():
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Unable to read %s, using default settings: %s", path, exc)
        return settings

    overrides = data.get("validation", {})
    for key in DEFAULT_SETTINGS:
        if key in overrides:
            settings[key] = overrides[key]
    return settings


def save_settings(settings: Dict[str, Any], config_file: Optional[Path] = None) -> bool:
    """Write the ``[validation]`` table, preserving other sections in the file.

    Returns:
        True if saved successfully, False otherwise
    """
    path = config_file or config.CONFIG_FILE
    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = toml.load(f)
        except (OSError, toml.TomlDecodeError):
            data = {}

    data["validation"] = {key: value for key, value in settings.items() if key in DEFAULT_SETTINGS}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.error("Unable to write %s: %s", path, exc)
        return False


def load_docs_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load ``<path>/docs/config.json`` or build a best-guess default config.

    The config describes how a library's docs are laid out: whether it keeps its
    libraries under ``packages/``, whether its source should be parsed, and any
    description override.

    Args:
        path: Parent directory of ``docs/config.json``. Defaults to the cwd.

    Returns:
        Configuration dictionary (file values override the defaults).
    """
    root = Path(path) if path is not None else Path.cwd()
    config_filename = root / "docs" / "config.json"
    root_str = root.as_posix()
    defaults: Dict[str, Any] = {
        "path": root_str,
        "hasPackageDir": (root / "packages").exists(),
        "hasConfig": config_filename.exists(),
        # CLI and lint-config repos have no documented source
        "parseSource": "/cli" not in root_str and "eslint" not in root_str,
    }

    loaded: Dict[str, Any] = {}
    if defaults["hasConfig"]:
        try:
            loaded = json.loads(config_filename.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            defaults["hasConfig"] = False
            logger.warning("Error loading %s, using default config: %s", config_filename, exc)
            loaded = {}

    return {**defaults, **loaded}
