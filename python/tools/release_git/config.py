#!/usr/bin/env python3
"""
Settings for release_git, loadable from the environment or a JSON, YAML or TOML file.
"""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from loguru import logger

from .exceptions import ConfigurationError, GitErrorContext


ENV_PREFIX = "RELEASE_GIT_"
CONFIG_SECTION = "release_git"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class GitSettings:
    """Tunable behaviour of the git facade."""

    git_executable: str = "git"
    remote: str = "origin"
    sleep_on_lock_error: float = 1.0
    backoff_factor: float = 2.0
    max_attempts: int = 3
    home_fallbacks: Tuple[str, ...] = ("/home/www-data", "/var/www")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.sleep_on_lock_error < 0:
            raise ConfigurationError(
                f"sleep_on_lock_error can not be negative, got {self.sleep_on_lock_error}"
            )
        if self.backoff_factor < 1:
            raise ConfigurationError(
                f"backoff_factor must be at least 1, got {self.backoff_factor}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, "
                f"got '{self.log_level}'"
            )

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], source_file: Optional[Path] = None
    ) -> "GitSettings":
        """Build settings from a plain mapping, converting values to field types."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                config_file=source_file,
            )

        values: Dict[str, Any] = {}
        for key, raw in data.items():
            values[key] = _convert(key, raw, source_file)
        try:
            return cls(**values)
        except ConfigurationError as e:
            if source_file is None:
                raise
            raise ConfigurationError(
                f"{e} in {source_file}", config_file=source_file, original_error=e
            ) from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GitSettings":
        """Read ``RELEASE_GIT_*`` environment variables on top of the defaults."""
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for f in fields(cls):
            env_name = ENV_PREFIX + f.name.upper()
            if env_name not in environ:
                continue
            value = environ[env_name]
            if f.name == "home_fallbacks":
                value = [part for part in value.split(os.pathsep) if part]
            data[f.name] = value

        if data:
            logger.debug(f"Settings from environment: {sorted(data)}")
        return cls.from_mapping(data)

    @classmethod
    def load_from_file(cls, file_path: Union[Path, str]) -> "GitSettings":
        """
        Load settings from a file chosen by its suffix.

        A ``release_git`` section is used when the file has one, otherwise the
        whole document is taken as the settings mapping.

        Raises:
            ConfigurationError: If the file is missing, unsupported or invalid.
        """
        config_path = Path(file_path)

        if not config_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                config_file=config_path,
                context=GitErrorContext(working_directory=config_path.parent),
            )

        suffix = config_path.suffix.lower()
        try:
            content = config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"Failed to read configuration file: {e}",
                config_file=config_path,
                original_error=e,
            ) from e

        logger.debug(f"Loading settings from {config_path}")
        match suffix:
            case ".json":
                data = _parse_json(content, config_path)
            case ".yaml" | ".yml":
                data = _parse_yaml(content, config_path)
            case ".toml":
                data = _parse_toml(content, config_path)
            case _:
                raise ConfigurationError(
                    f"Unsupported configuration file format: {suffix}. "
                    "Supported formats: .json, .yaml, .yml, .toml",
                    config_file=config_path,
                )

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration must be a mapping", config_file=config_path
            )
        section = data.get(CONFIG_SECTION, data)
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"'{CONFIG_SECTION}' section must be a mapping",
                config_file=config_path,
            )
        return cls.from_mapping(section, config_path)

    def merged_with(self, **overrides: Any) -> "GitSettings":
        """Return a copy with the given non-None values replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _convert(key: str, raw: Any, source_file: Optional[Path]) -> Any:
    try:
        match key:
            case "sleep_on_lock_error" | "backoff_factor":
                return float(raw)
            case "max_attempts":
                if isinstance(raw, float) and not raw.is_integer():
                    raise ValueError(f"{raw} is not a whole number")
                return int(raw)
            case "log_level":
                if not isinstance(raw, str):
                    raise TypeError(f"expected a string, got {type(raw).__name__}")
                return raw.upper()
            case "home_fallbacks":
                if isinstance(raw, str):
                    return (raw,)
                return tuple(str(item) for item in raw)
            case _:
                if not isinstance(raw, str):
                    raise TypeError(f"expected a string, got {type(raw).__name__}")
                return raw
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for '{key}': {e}",
            config_file=source_file,
            original_error=e,
        ) from e


def _parse_json(content: str, source_file: Path) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON configuration: {e}",
            config_file=source_file,
            context=GitErrorContext(
                additional_data={"line": e.lineno, "column": e.colno}
            ),
        ) from e


def _parse_yaml(content: str, source_file: Path) -> Any:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        error_details = {}
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            error_details.update({"line": mark.line + 1, "column": mark.column + 1})
        raise ConfigurationError(
            f"Invalid YAML configuration: {e}",
            config_file=source_file,
            context=GitErrorContext(additional_data=error_details),
        ) from e
    return {} if data is None else data


def _parse_toml(content: str, source_file: Path) -> Any:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML configuration: {e}", config_file=source_file
        ) from e


def load_settings(config_file: Union[Path, str, None] = None) -> GitSettings:
    """Settings from ``config_file`` when given, otherwise from the environment."""
    if config_file is not None:
        return GitSettings.load_from_file(config_file)
    return GitSettings.from_env()


__all__ = [
    "GitSettings",
    "load_settings",
    "ENV_PREFIX",
    "CONFIG_SECTION",
    "LOG_LEVELS",
]
