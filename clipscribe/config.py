"""
clipscribe.config - YAML config loading and validation.

Handles loading clipscribe.yaml from the working directory (or an
explicit path) and validating the service and engine settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from clipscribe.exceptions import ConfigError

CONFIG_FILENAME = "clipscribe.yaml"


class ClipscribeConfig(BaseModel):
    """Resolved configuration for a Clipscribe run."""

    api_base_url: str = "http://localhost:3333"
    ffmpeg_binary: str = "ffmpeg"
    request_timeout: float | None = Field(default=None, gt=0.0)

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("ffmpeg_binary")
    @classmethod
    def validate_ffmpeg_binary(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("ffmpeg_binary must not be empty")
        return v


def load_config(path: Path | None = None) -> ClipscribeConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file; defaults to ./clipscribe.yaml if present

    Returns:
        Validated ClipscribeConfig (defaults when no file is found)

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ConfigError: If the file is not valid YAML or fails validation
    """
    if path is None:
        path = Path.cwd() / CONFIG_FILENAME
        if not path.exists():
            return ClipscribeConfig()
    elif not path.exists():
        raise FileNotFoundError(f"No config file found at {path}")

    try:
        with open(path) as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{path} must contain a mapping")

    try:
        return ClipscribeConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict for a new clipscribe.yaml."""
    return ClipscribeConfig().model_dump()


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
