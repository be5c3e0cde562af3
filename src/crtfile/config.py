"""crtfile configuration.

Config files:
  - Global:  ~/.config/crtfile/config.json
  - Project: .crtfile.json (current directory)

Merge order: global → project → environment variables (highest priority).
A permission mode is never taken from configuration, and ``absolute`` is
only honoured from the global file and the environment.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    GLOBAL = "global"
    PROJECT = "project"


@dataclass(frozen=True)
class Settings:
    verbose: bool = False
    absolute: bool = False
    debug: bool = False
    log_file: Path | None = None


_BOOL_KEYS = ("verbose", "absolute", "debug")

# Keys a project file in the working directory may not set
_GLOBAL_ONLY_KEYS = ("absolute",)

_ENV_OVERRIDES: list[tuple[str, str]] = [
    ("verbose", "CRTFILE_VERBOSE"),
    ("absolute", "CRTFILE_ABSOLUTE"),
    ("debug", "CRTFILE_DEBUG"),
    ("log_file", "CRTFILE_LOG_FILE"),
]

_TRUTHY = {"1", "true", "yes", "on"}


def config_path(scope: Scope) -> Path:
    if scope is Scope.PROJECT:
        return Path.cwd() / ".crtfile.json"
    return Path.home() / ".config" / "crtfile" / "config.json"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a JSON object")
    return data


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    raise ConfigError(f"config value '{key}' must be a boolean, got {type(value).__name__}")


def load_config() -> Dict[str, Any]:
    """Load merged config: global → project → env vars."""
    merged: Dict[str, Any] = {**_read_json(config_path(Scope.GLOBAL))}

    project_path = config_path(Scope.PROJECT)
    project_cfg = _read_json(project_path)
    for key in _GLOBAL_ONLY_KEYS:
        if key in project_cfg:
            logger.warning("ignoring '%s' in %s (set it globally or pass the flag)", key, project_path)
            del project_cfg[key]
    merged.update(project_cfg)

    for config_key, env_var in _ENV_OVERRIDES:
        val = os.environ.get(env_var)
        if val:
            merged[config_key] = val

    return merged


def load_settings() -> Settings:
    """Build Settings from the merged config."""
    merged = load_config()
    for key in merged:
        if key not in _BOOL_KEYS and key != "log_file":
            logger.debug("Ignoring unknown config key %r", key)

    log_file = merged.get("log_file")
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError(f"config value 'log_file' must be a path, got {type(log_file).__name__}")

    return Settings(
        verbose=_as_bool("verbose", merged.get("verbose", False)),
        absolute=_as_bool("absolute", merged.get("absolute", False)),
        debug=_as_bool("debug", merged.get("debug", False)),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
