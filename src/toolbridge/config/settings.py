"""
Client settings for toolbridge.

Settings come from a YAML file (``~/.config/toolbridge/config.yaml`` unless a
path is given) and are then overridden by environment variables.

Environment Variables:
    TOOLBRIDGE_MODEL: Model identifier (default: claude-sonnet-4-20250514)
    TOOLBRIDGE_MAX_TOKENS: Maximum tokens per model response
    TOOLBRIDGE_MAX_ITERATIONS: Model rounds allowed per query
    ANTHROPIC_API_KEY: Read by the Anthropic model client
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from toolbridge.engine.loop import LoopConfig
from toolbridge.models.anthropic import DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from toolbridge.registry.tool_registry import DEFAULT_SEPARATOR

logger = logging.getLogger(__name__)

ENV_MODEL = "TOOLBRIDGE_MODEL"
ENV_MAX_TOKENS = "TOOLBRIDGE_MAX_TOKENS"
ENV_MAX_ITERATIONS = "TOOLBRIDGE_MAX_ITERATIONS"


class ConfigError(ValueError):
    """The configuration file or environment is invalid."""


class ProviderSpec(BaseModel):
    """How to connect one provider."""

    model_config = ConfigDict(extra="forbid")

    target: str = Field(..., min_length=1, description="Registered name or module:attribute.")
    options: dict[str, Any] = Field(default_factory=dict, description="Factory keyword args.")


class ClientSettings(BaseModel):
    """Top-level client configuration."""

    model_config = ConfigDict(extra="ignore")

    model: str = Field(default=DEFAULT_MODEL)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    separator: str = Field(default=DEFAULT_SEPARATOR, min_length=1)
    allow_flexible_match: bool = Field(
        default=True,
        description="Allow substring matching of tool names as a last resort.",
    )
    validate_arguments: bool = Field(
        default=False, description="Validate tool arguments against their input schema."
    )
    loop: LoopConfig = Field(default_factory=LoopConfig)
    providers: dict[str, ProviderSpec] = Field(
        default_factory=dict,
        description="Providers connected in multi-provider mode, in order.",
    )

    @field_validator("providers", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        # "filesystem: my_pkg:create" is shorthand for {"target": "my_pkg:create"}
        if isinstance(value, dict):
            return {k: {"target": v} if isinstance(v, str) else v for k, v in value.items()}
        return value


def get_config_file() -> Path:
    """Get the config file path. Computed at runtime for test compatibility."""
    return Path.home() / ".config" / "toolbridge" / "config.yaml"


DEFAULT_CONFIG = """\
# toolbridge configuration

model: claude-sonnet-4-20250514
max_tokens: 1000

# Tool names are "<provider><separator><tool>" in multi-provider mode
separator: "_"
allow_flexible_match: true
validate_arguments: false

loop:
  max_iterations: 3
  # model_timeout: 120
  # tool_timeout: 60

# Providers connected by 'toolbridge chat --multi', in this order
providers:
  builtin:
    target: builtin
"""


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    model = os.environ.get(ENV_MODEL)
    if model:
        data["model"] = model.strip()

    max_tokens = os.environ.get(ENV_MAX_TOKENS)
    if max_tokens:
        data["max_tokens"] = max_tokens.strip()

    max_iterations = os.environ.get(ENV_MAX_ITERATIONS)
    if max_iterations:
        loop = dict(data.get("loop") or {})
        loop["max_iterations"] = max_iterations.strip()
        data["loop"] = loop

    return data


def load_settings(config_path: Path | None = None) -> ClientSettings:
    """Load settings from YAML and the environment.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    path = config_path or get_config_file()
    data: dict[str, Any] = {}

    if path.exists():
        try:
            loaded = yaml.safe_load(path.read_text()) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Failed to read {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"{path} must contain a mapping")
        data = loaded
        logger.debug("Loaded settings from %s", path)
    elif config_path is not None:
        raise ConfigError(f"Config file not found: {path}")

    try:
        return ClientSettings.model_validate(_apply_env(data))
    except ValidationError as e:
        raise ConfigError(str(e)) from e
