"""
Configuration for the hooks plugin.

Two layers:
- PluginConfig: the `custom.serverless-hooks` section of the host's service
  config, read once when the plugin is constructed.
- Settings: process-level knobs taken from the environment (SLS_DEBUG,
  SLS_HOOKS_LOG_LEVEL).
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from slshooks.models.streams import (
    Inherited,
    StreamConfig,
    Suppressed,
    parse_stream_config,
)

logger = logging.getLogger(__name__)

PLUGIN_NAME = "serverless-hooks"
CONTEXT_ENV_VAR = "SLS_CONTEXT"
DEFAULT_HOOK_PREFIX = "hook"
PREFIX_SEPARATOR = ":"


def load_yaml_config(config_file: Path) -> dict[str, Any]:
    """Load a YAML (or JSON) config file, returning {} when unusable."""
    if not config_file.exists():
        return {}
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(f"{config_file.name} is not a mapping, ignoring: {config_file}")
            return {}
        return data
    except Exception as e:
        logger.warning(f"Error loading {config_file}: {e}")
        return {}


class RunOptionsConfig(BaseModel):
    """Stream wiring plus options passed through to the script engine."""

    model_config = ConfigDict(frozen=True, extra="allow")

    stdin: StreamConfig = Field(default_factory=Suppressed)
    stdout: StreamConfig = Field(default_factory=Inherited)
    stderr: StreamConfig = Field(default_factory=Inherited)

    @field_validator("stdin", "stdout", "stderr", mode="before")
    @classmethod
    def _parse_stream(cls, value: Any) -> StreamConfig:
        return parse_stream_config(value)

    @property
    def passthrough(self) -> dict[str, Any]:
        """Options not about streams, forwarded to the engine untouched."""
        return dict(self.model_extra or {})

    def stream(self, name: str) -> StreamConfig:
        return getattr(self, name)


class PluginConfig(BaseModel):
    """The plugin's section of the host service config."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    hook_prefix: str = Field(
        default=DEFAULT_HOOK_PREFIX,
        alias="hookPrefix",
        description="Prefix of manifest keys bound to lifecycle events",
    )
    execution_options: RunOptionsConfig = Field(
        default_factory=RunOptionsConfig,
        validation_alias=AliasChoices("runAllOptions", "executionOptions", "execution_options"),
        description="Stream wiring and engine options",
    )
    manifest: str = Field(
        default="package.json",
        description="Manifest file, relative to the service path",
    )

    @field_validator("hook_prefix", mode="before")
    @classmethod
    def _default_prefix(cls, value: Any) -> Any:
        return value or DEFAULT_HOOK_PREFIX

    @field_validator("execution_options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def binding_prefix(self) -> str:
        """Prefix with trailing separators collapsed to exactly one."""
        return f"{self.hook_prefix.rstrip(PREFIX_SEPARATOR)}{PREFIX_SEPARATOR}"

    @classmethod
    def from_service(cls, service: Any) -> "PluginConfig":
        """Read the plugin section from a host service mapping."""
        custom = (service or {}).get("custom") or {}
        return cls.model_validate(custom.get(PLUGIN_NAME) or {})


class Settings(BaseSettings):
    """Environment settings."""

    debug: bool = Field(
        default=False,
        validation_alias="SLS_DEBUG",
        description="Log each hook script as it starts",
    )
    log_level: str = Field(default="WARNING", description="Log level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    model_config = {
        "env_prefix": "SLS_HOOKS_",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("debug", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        # Any non-empty value enables debug output
        if isinstance(value, str):
            return bool(value.strip())
        return bool(value)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
