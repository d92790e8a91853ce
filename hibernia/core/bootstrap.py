"""
Plugin bootstrap for hibernia.

Builds a plugin's injection container from settings and assembles the
PluginContext handed to the lifecycle controller. Every call returns fresh
objects; nothing is cached between plugins.
"""

from __future__ import annotations

from collections.abc import Iterable

from .container import ServiceContainer
from .discovery import CodeUnitSource, EntryPointUnitSource, PackageUnitSource
from .interfaces.config import IConfigSource
from .interfaces.host import IHost
from .interfaces.logger import ILogger
from .lifecycle import PluginContext
from .settings import HiberniaSettings, load_settings


def bootstrap(
    settings: HiberniaSettings | None = None,
    plugin: str | None = None,
) -> ServiceContainer:
    """
    Build the container for one plugin instance.

    Initializes the container with:
    - HiberniaSettings (the instance given, or load_settings())
    - ILogger configured from the `logging` section
    - IConfigSource serving the plugin's config file, or empty sections

    Args:
        settings: Settings to bind; loaded from file and environment when omitted
        plugin: Plugin instance name, used for the logger name

    Returns:
        A new ServiceContainer; the caller adds the plugin's own bindings
    """
    if settings is None:
        settings = load_settings()

    container = ServiceContainer()
    container.register_singleton(HiberniaSettings, implementation=settings)

    def create_logger() -> ILogger:
        from ..services.logging import HiberniaLogger

        return HiberniaLogger.from_config(settings.logging, plugin)

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]
    container.register_singleton(
        IConfigSource,  # type: ignore[type-abstract]
        factory=lambda: create_config_source(settings),
    )
    return container


def create_config_source(settings: HiberniaSettings) -> IConfigSource:
    """The plugin config source named by the `plugin_config` section."""
    from ..services.config_source import MappingConfigSource, TomlConfigSource

    if settings.plugin_config.path:
        return TomlConfigSource(settings.plugin_config.path)
    return MappingConfigSource()


def unit_sources(
    targets: Iterable[str | CodeUnitSource], settings: HiberniaSettings
) -> list[CodeUnitSource]:
    """
    Code-unit sources for a list of targets.

    A string names a module or package, walked with PackageUnitSource; a
    CodeUnitSource is used as given. Entry points are appended when the
    `scanner` section enables them.
    """
    sources: list[CodeUnitSource] = []
    for target in targets:
        if isinstance(target, CodeUnitSource):
            sources.append(target)
        else:
            sources.append(PackageUnitSource(target, skip_private=settings.scanner.skip_private))
    if settings.scanner.include_entry_points:
        sources.append(EntryPointUnitSource(settings.scanner.entry_point_group))
    return sources


def create_context(
    name: str,
    targets: Iterable[str | CodeUnitSource],
    host: IHost,
    settings: HiberniaSettings | None = None,
    container: ServiceContainer | None = None,
) -> PluginContext:
    """
    Assemble a PluginContext.

    Args:
        name: Plugin instance name
        targets: Module/package names or code-unit sources
        host: Host registries
        settings: Settings; loaded when omitted
        container: Container to use; bootstrapped from settings when omitted

    Returns:
        A context ready for LifecycleController.start()
    """
    if settings is None:
        settings = load_settings()
    if container is None:
        container = bootstrap(settings, plugin=name)
    return PluginContext(
        name=name,
        sources=unit_sources(targets, settings),
        injector=container,
        host=host,
    )
