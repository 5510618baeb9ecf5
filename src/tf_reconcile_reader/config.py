"""Startup configuration: environment, config file and CLI flags.

The result is a single frozen :class:`AppConfig` built once in ``cli.main`` and
handed to the app and the navigator. Nothing reads ``os.environ`` after that.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from platformdirs import user_config_dir

from tf_reconcile_reader.models import CONFIG_APP_NAME, SOURCE_CI, SOURCE_LOCAL

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

ENV_CONFIG_FILE = "CONFIG_FILE"
ENV_EDITOR = "EDITOR"
ENV_VIM_MODE = "FIGS_VIM_MODE"
ENV_TF_DIR = "FIGS_TF_DIR"
ENV_TF_STATE = "FIGS_TF_STATE"
ENV_GITHUB = "FIGS_GITHUB"

DEFAULT_EDITOR = "vim"
DEFAULT_INPUT_FILE = Path(".") / "report.dev.json"
DEFAULT_SAVE_DIR = Path(".") / "tf-state-man-workspace"

# Keys always shown in the config view, even when unset
CONFIG_KNOWN_KEYS: tuple[str, ...] = (ENV_TF_DIR, ENV_TF_STATE)
# Every variable under these prefixes is shown in the config view
CONFIG_ENV_PREFIXES: tuple[str, ...] = ("FIGS_", "OLLAMA_")

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean the way the recorded tooling does (1/t/true, 0/f/false)."""
    if value is None:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Immutable runtime configuration."""

    input_file: Path = DEFAULT_INPUT_FILE
    save_dir: Path = DEFAULT_SAVE_DIR
    vim_enabled: bool = False
    github: bool = False
    editor: str = DEFAULT_EDITOR
    tf_dir: str = ""
    tf_state: str = ""
    environ: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def execution_source(self) -> str:
        return SOURCE_CI if self.github else SOURCE_LOCAL


def get_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the path to the optional configuration file.

    ``$CONFIG_FILE`` wins; otherwise platformdirs picks the per-user location:
    - Linux: ~/.config/tf-reconcile-reader/config.json
    - macOS: ~/Library/Application Support/tf-reconcile-reader/config.json
    - Windows: %APPDATA%/tf-reconcile-reader/config.json
    """
    env = os.environ if environ is None else environ
    override = env.get(ENV_CONFIG_FILE)
    if override:
        return Path(override)
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


@dataclass(frozen=True, slots=True)
class FileSettings:
    """Values read from the optional JSON config file."""

    input_file: str | None = None
    save_dir: str | None = None
    vim: bool | None = None
    github: bool | None = None


def load_file_settings(path: Path) -> FileSettings:
    """Load the JSON config file. Missing or corrupt files yield empty settings."""
    if not path.exists():
        return FileSettings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return FileSettings()
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not an object", path)
        return FileSettings()
    return FileSettings(
        input_file=_safe_get(data, "input", None, str),
        save_dir=_safe_get(data, "save_dir", None, str),
        vim=_safe_get(data, "vim", None, bool),
        github=_safe_get(data, "github", None, bool),
    )


def _pick(cli_value: Any, env_value: Any, file_value: Any, default: Any) -> Any:
    for value in (cli_value, env_value, file_value):
        if value is not None:
            return value
    return default


def build_app_config(
    *,
    environ: Mapping[str, str],
    file_settings: FileSettings | None = None,
    input_file: Path | None = None,
    save_dir: Path | None = None,
    vim_enabled: bool | None = None,
    github: bool | None = None,
) -> AppConfig:
    """Merge CLI values, environment and file settings into an AppConfig.

    Precedence: CLI flag > environment > config file > default.
    """
    settings = file_settings or FileSettings()
    env_vim = parse_bool(environ[ENV_VIM_MODE]) if ENV_VIM_MODE in environ else None
    env_github = parse_bool(environ[ENV_GITHUB]) if ENV_GITHUB in environ else None
    file_input = Path(settings.input_file) if settings.input_file else None
    file_save = Path(settings.save_dir) if settings.save_dir else None
    return AppConfig(
        input_file=_pick(input_file, None, file_input, DEFAULT_INPUT_FILE),
        save_dir=_pick(save_dir, None, file_save, DEFAULT_SAVE_DIR),
        vim_enabled=bool(_pick(vim_enabled, env_vim, settings.vim, False)),
        github=bool(_pick(github, env_github, settings.github, False)),
        editor=environ.get(ENV_EDITOR) or DEFAULT_EDITOR,
        tf_dir=environ.get(ENV_TF_DIR, ""),
        tf_state=environ.get(ENV_TF_STATE, ""),
        environ=MappingProxyType(dict(environ)),
    )


def validate_input_path(path: Path) -> str | None:
    """Return a reason the input path is unacceptable, or None."""
    raw = str(path)
    if raw.startswith("~"):
        return "the input path must not start with ~ (use an absolute or relative path)"
    if not raw.endswith(".json"):
        return "the input path must end with .json"
    if len(raw) <= 7:
        return "the input path is too short to name a report.<env>.json file"
    return None


__all__ = [
    "CONFIG_ENV_PREFIXES",
    "CONFIG_FILENAME",
    "CONFIG_KNOWN_KEYS",
    "DEFAULT_EDITOR",
    "ENV_CONFIG_FILE",
    "ENV_EDITOR",
    "ENV_GITHUB",
    "ENV_TF_DIR",
    "ENV_TF_STATE",
    "ENV_VIM_MODE",
    "AppConfig",
    "FileSettings",
    "build_app_config",
    "get_config_path",
    "load_file_settings",
    "parse_bool",
    "validate_input_path",
]
