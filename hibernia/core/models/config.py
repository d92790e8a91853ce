"""
Configuration models.

Provides Pydantic models for hibernia's own settings sections.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import ConfigDict, field_validator

from .base import HiberniaBaseModel

LogLevel = Literal["debug", "info", "warning", "error"]


class ConfigBaseModel(HiberniaBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML and env types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        revalidate_instances="never",
    )


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "warning"
    console: bool = True
    file: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept level names in any case."""
        return v.lower() if isinstance(v, str) else v


class ScannerConfig(ConfigBaseModel):
    """Capability scanning configuration section."""

    skip_private: bool = True
    include_entry_points: bool = False
    entry_point_group: str = "hibernia.plugins"


class PluginConfigConfig(ConfigBaseModel):
    """Location of the plugin's own configuration file (served to config schemas)."""

    path: str | None = None

    @field_validator("path", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v
