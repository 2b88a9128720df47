"""YAML settings for diagcache.

Example diagcache.yaml:

    metadata_suffix: .cache
    search_path: /opt/graphviz/bin:/usr/bin
    log_level: INFO
    attributes:
      docdir: docs
      graphvizdot: /opt/graphviz/bin/dot
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from diagcache.errors import DiagcacheError
from diagcache.kernel.metadata import DEFAULT_METADATA_SUFFIX

CONFIG_ENV_VAR = "DIAGCACHE_CONFIG"
DEFAULT_CONFIG_NAME = "diagcache.yaml"


class SettingsError(DiagcacheError):
    """Raised when a settings file cannot be read or validated."""
    pass


class DiagcacheSettings(BaseModel):
    """Settings shared by every diagram in a processing run."""

    metadata_suffix: str = Field(
        default=DEFAULT_METADATA_SUFFIX,
        description="Suffix appended to an image path to name its metadata sidecar",
    )
    search_path: Optional[str] = Field(
        default=None,
        description="PATH-style directory list used for tool lookup instead of $PATH",
    )
    log_level: str = Field(default="WARNING", description="Minimum level for CLI log output")
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Document-level attributes (tool overrides, docdir, ...)",
    )

    model_config = ConfigDict(extra="forbid")


def _default_config_path() -> Optional[Path]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def load_settings(path: Optional[Union[str, Path]] = None) -> DiagcacheSettings:
    """Load settings from YAML.

    Args:
        path: Explicit settings file. When omitted, $DIAGCACHE_CONFIG and then
            ./diagcache.yaml are tried; with neither, defaults are returned.

    Raises:
        SettingsError: If the file is missing (when given explicitly), is not
            valid YAML, or does not match the settings schema
    """
    config_path = Path(path).expanduser() if path is not None else _default_config_path()
    if config_path is None:
        logger.debug("No settings file found, using defaults")
        return DiagcacheSettings()

    if not config_path.is_file():
        raise SettingsError(f"Settings file not found: {config_path}")

    logger.debug(f"Loading settings from {config_path}")
    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {config_path} must contain a mapping")

    try:
        return DiagcacheSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {config_path}: {e}") from e
