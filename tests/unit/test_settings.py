"""
Unit tests for settings, config sources, logging and bootstrap.

Tests TOML discovery, environment overrides, error reporting, and the
container that bootstrap() builds from settings.
"""

import logging

import pytest

from hibernia.core.bootstrap import bootstrap, create_config_source, create_context
from hibernia.core.discovery import EntryPointUnitSource, ObjectUnitSource, PackageUnitSource
from hibernia.core.exceptions import ConfigFileError, ConfigValidationError
from hibernia.core.interfaces.config import IConfigSource
from hibernia.core.interfaces.logger import ILogger
from hibernia.core.settings import HiberniaSettings, find_config_file, load_settings
from hibernia.hosts.memory import InMemoryHost
from hibernia.services.config_source import MappingConfigSource, TomlConfigSource
from hibernia.services.logging import HiberniaLogger, NullLogger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep HIBERNIA_* variables from the developer's shell out of these tests."""
    import os

    for name in list(os.environ):
        if name.upper().startswith("HIBERNIA_"):
            monkeypatch.delenv(name)


class TestFindConfigFile:
    """Tests for find_config_file()."""

    def test_walks_up_to_hibernia_toml(self, tmp_path):
        (tmp_path / "hibernia.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == tmp_path / "hibernia.toml"

    def test_pyproject_needs_tool_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        assert find_config_file(tmp_path) != tmp_path / "pyproject.toml"

        (tmp_path / "pyproject.toml").write_text('[tool.hibernia.logging]\nlevel = "info"\n')
        assert find_config_file(tmp_path) == tmp_path / "pyproject.toml"

    def test_hibernia_toml_preferred_over_pyproject(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.hibernia]\n")
        (tmp_path / "hibernia.toml").write_text("")

        assert find_config_file(tmp_path) == tmp_path / "hibernia.toml"


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self, tmp_path):
        settings = load_settings(start_dir=tmp_path)

        assert settings.logging.level == "warning"
        assert settings.scanner.skip_private is True
        assert settings.plugin_config.path is None

    def test_toml_values(self, tmp_path):
        config = tmp_path / "hibernia.toml"
        config.write_text(
            "[logging]\n"
            'level = "DEBUG"\n'
            "console = false\n"
            "[scanner]\n"
            "include_entry_points = true\n"
            "[plugin_config]\n"
            'path = "economy.toml"\n'
        )

        settings = load_settings(start_dir=tmp_path)

        assert settings.logging.level == "debug"
        assert settings.logging.console is False
        assert settings.scanner.include_entry_points is True
        assert settings.plugin_config.path == "economy.toml"
        assert settings.config_file == str(config)

    def test_pyproject_tool_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.hibernia.logging]\nlevel = "error"\n')

        assert load_settings(start_dir=tmp_path).logging.level == "error"

    def test_environment_overrides_toml(self, tmp_path, monkeypatch):
        (tmp_path / "hibernia.toml").write_text('[logging]\nlevel = "info"\nconsole = false\n')
        monkeypatch.setenv("HIBERNIA_LOGGING__LEVEL", "debug")

        settings = load_settings(start_dir=tmp_path)

        assert settings.logging.level == "debug"
        assert settings.logging.console is False

    def test_explicit_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HIBERNIA_LOGGING__LEVEL", "debug")

        settings = load_settings(start_dir=tmp_path, logging={"level": "error"})

        assert settings.logging.level == "error"

    def test_invalid_value(self, tmp_path):
        (tmp_path / "hibernia.toml").write_text('[logging]\nlevel = "loud"\n')

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(start_dir=tmp_path)
        assert exc_info.value.context["key"] == "logging.level"

    def test_broken_toml(self, tmp_path):
        (tmp_path / "hibernia.toml").write_text("[logging\n")

        with pytest.raises(ConfigFileError):
            load_settings(start_dir=tmp_path)

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_settings(config_path=tmp_path / "absent.toml")


class TestConfigSources:
    """Tests for the config sources served to config schemas."""

    def test_mapping_sections(self):
        source = MappingConfigSource({"economy": {"rate": 2}, "features": {"homes": {"max": 3}}})

        assert source.section("economy") == {"rate": 2}
        assert source.section("features.homes") == {"max": 3}
        assert source.section("missing") == {}
        assert source.section("economy.rate") == {}

    def test_toml_file(self, tmp_path):
        path = tmp_path / "economy.toml"
        path.write_text("[economy]\nstarting_balance = 250\n")
        source = TomlConfigSource(path)

        assert source.section("economy") == {"starting_balance": 250}

        path.write_text("[economy]\nstarting_balance = 50\n")
        assert source.section("economy") == {"starting_balance": 250}
        source.reload()
        assert source.section("economy") == {"starting_balance": 50}

    def test_missing_toml_file_serves_empty_sections(self, tmp_path):
        assert TomlConfigSource(tmp_path / "none.toml").section("economy") == {}

    def test_unparseable_toml_file(self, tmp_path):
        path = tmp_path / "economy.toml"
        path.write_text("economy = \n")

        with pytest.raises(ConfigFileError) as exc_info:
            TomlConfigSource(path).section("economy")
        assert exc_info.value.context["file_path"] == str(path)


class TestLogging:
    """Tests for HiberniaLogger."""

    def test_propagates_without_handlers(self, caplog):
        logger = HiberniaLogger(plugin="economy", level="info", console_enabled=False)

        with caplog.at_level(logging.INFO, logger="hibernia.economy"):
            logger.info("Registered %s '%s'", "command", "balance")
            logger.debug("hidden")

        assert logger.name == "hibernia.economy"
        assert [r.getMessage() for r in caplog.records] == ["Registered command 'balance'"]

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "hibernia.log"
        logger = HiberniaLogger(plugin="files", console_enabled=False, file_path=log_file)

        logger.warning("unregister failed for %s", "pay")
        logger.set_level("error")
        logger.warning("dropped")

        content = log_file.read_text()
        assert "unregister failed for pay" in content
        assert "dropped" not in content

    def test_from_config(self):
        settings = HiberniaSettings(logging={"level": "debug", "console": False})

        logger = HiberniaLogger.from_config(settings.logging, plugin="cfg")

        assert logger.name == "hibernia.cfg"


class TestBootstrap:
    """Tests for bootstrap() and create_context()."""

    def test_container_bindings(self):
        settings = HiberniaSettings(logging={"console": False})

        container = bootstrap(settings, plugin="economy")

        assert container.resolve(HiberniaSettings) is settings
        assert isinstance(container.resolve(ILogger), HiberniaLogger)
        assert isinstance(container.resolve(IConfigSource), MappingConfigSource)

    def test_plugin_config_path(self, tmp_path):
        path = tmp_path / "economy.toml"
        path.write_text("[economy]\ncurrency = 'gold'\n")
        settings = HiberniaSettings(plugin_config={"path": str(path)})

        source = create_config_source(settings)

        assert isinstance(source, TomlConfigSource)
        assert source.section("economy") == {"currency": "gold"}

    def test_each_bootstrap_is_fresh(self):
        settings = HiberniaSettings(logging={"console": False})

        assert bootstrap(settings) is not bootstrap(settings)

    def test_create_context_sources(self):
        settings = HiberniaSettings(
            logging={"console": False}, scanner={"include_entry_points": True}
        )
        explicit = ObjectUnitSource("inline", [])

        context = create_context(
            "economy", ["sample_plugins.economy", explicit], InMemoryHost(), settings
        )

        first, second, third = context.sources
        assert isinstance(first, PackageUnitSource)
        assert first.package == "sample_plugins.economy"
        assert second is explicit
        assert isinstance(third, EntryPointUnitSource)
        assert third.group == "hibernia.plugins"

    def test_null_logger_is_silent(self):
        logger = NullLogger()
        logger.error("nothing %s", "happens")
        logger.set_level("debug")
