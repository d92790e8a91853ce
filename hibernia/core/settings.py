"""
Pydantic Settings for hibernia configuration.

Provides settings loading from TOML files, environment variables, and defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .exceptions import ConfigFileError, ConfigValidationError
from .models.config import LoggingConfig, PluginConfigConfig, ScannerConfig

CONFIG_FILE_NAME = "hibernia.toml"


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigFileError(
            f"Failed to parse config file: {e}", file_path=str(path), cause=e
        ) from e
    except OSError as e:
        raise ConfigFileError(
            f"Failed to read config file: {e}", file_path=str(path), cause=e
        ) from e


def find_config_file(start_dir: str | Path | None = None) -> Path | None:
    """
    Find hibernia.toml by walking up from start_dir (or cwd).

    A pyproject.toml with a [tool.hibernia] table also counts. The first
    directory holding either wins; hibernia.toml is preferred within it.

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        config_path = parent / CONFIG_FILE_NAME
        if config_path.is_file():
            return config_path

        pyproject = parent / "pyproject.toml"
        if pyproject.is_file():
            try:
                data = _read_toml(pyproject)
            except ConfigFileError:
                # An unrelated broken pyproject does not stop the search
                continue
            if "hibernia" in data.get("tool", {}):
                return pyproject

    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source that loads hibernia's own sections from a TOML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_path: Path | None = None,
        start_dir: str | Path | None = None,
    ):
        super().__init__(settings_cls)
        self._config_path = config_path
        self._start_dir = start_dir
        self._data: dict[str, Any] | None = None
        self.config_file: Path | None = None

    def _load_toml(self) -> dict[str, Any]:
        """Load and cache TOML data."""
        if self._data is not None:
            return self._data

        path = self._config_path or find_config_file(self._start_dir)
        if path is None:
            self._data = {}
            return self._data

        data = _read_toml(path)
        if path.name == "pyproject.toml":
            data = data.get("tool", {}).get("hibernia", {})

        self.config_file = path
        self._data = data
        return self._data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        data = self._load_toml()
        return data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {k: v for k, v in self._load_toml().items() if k in self.settings_cls.model_fields}


class HiberniaSettings(BaseSettings):
    """Hibernia configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (HIBERNIA_<section>__<field>)
    3. TOML config file (hibernia.toml or pyproject.toml [tool.hibernia])
    4. Model defaults
    """

    model_config = {
        "env_prefix": "HIBERNIA_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    logging: LoggingConfig = LoggingConfig()
    scanner: ScannerConfig = ScannerConfig()
    plugin_config: PluginConfigConfig = PluginConfigConfig()

    # Set by load_settings(); not a config value
    _config_file: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Add TOML loading below init values and the environment.

        The TOML location cannot be passed through here, so load_settings()
        hands it over in a module-level variable.
        """
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
        if _current_toml_source is not None:
            sources += (_current_toml_source,)
        return sources

    @property
    def config_file(self) -> str | None:
        """The TOML file these settings were read from, if any."""
        return self._config_file


# Module-level variable for passing to settings_customise_sources
_current_toml_source: TomlSettingsSource | None = None


def load_settings(
    config_path: Path | str | None = None,
    start_dir: str | Path | None = None,
    **overrides: Any,
) -> HiberniaSettings:
    """Load hibernia settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)
        **overrides: Explicit section values, highest priority

    Returns:
        HiberniaSettings instance with all sources merged

    Raises:
        ConfigFileError: If the config file cannot be read or parsed
        ConfigValidationError: If a value does not fit its section
    """
    global _current_toml_source

    path = Path(config_path) if config_path is not None else None
    if path is not None and not path.is_file():
        raise ConfigFileError(f"Config file not found: {path}", file_path=str(path))

    source = TomlSettingsSource(HiberniaSettings, config_path=path, start_dir=start_dir)
    _current_toml_source = source
    try:
        settings = HiberniaSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(p) for p in first["loc"])
        raise ConfigValidationError(
            f"Invalid setting {key}: {first['msg']}",
            key=key,
            value=first.get("input"),
            cause=e,
        ) from e
    finally:
        _current_toml_source = None

    if source.config_file is not None:
        settings._config_file = str(source.config_file)
    return settings
