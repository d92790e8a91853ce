"""
hibernia: declarative capability bootstrap for hosted plugins.

Plugin authors declare commands, event listeners and config schemas with
markers; a LifecycleController discovers, wires and registers them with the
host at startup and removes them again at shutdown.

Usage:
    from hibernia import LifecycleController, command, create_context

    @command("ping")
    def ping(invoker, arguments):
        return "pong"

    controller = LifecycleController()
    report = controller.start(create_context("demo", ["demo_plugin"], host))
"""

from .core import (
    EntryPointUnitSource,
    HiberniaException,
    HiberniaSettings,
    LifecycleController,
    LifecycleStateError,
    ModuleUnitSource,
    ObjectUnitSource,
    PackageUnitSource,
    PluginContext,
    ServiceContainer,
    bootstrap,
    command,
    config_schema,
    create_context,
    listener,
    load_settings,
)
from .core.models import (
    EventPriority,
    LifecycleState,
    OutcomeStatus,
    ShutdownReport,
    StartupReport,
)

__all__ = [
    "EntryPointUnitSource",
    "EventPriority",
    "HiberniaException",
    "HiberniaSettings",
    "LifecycleController",
    "LifecycleState",
    "LifecycleStateError",
    "ModuleUnitSource",
    "ObjectUnitSource",
    "OutcomeStatus",
    "PackageUnitSource",
    "PluginContext",
    "ServiceContainer",
    "ShutdownReport",
    "StartupReport",
    "bootstrap",
    "command",
    "config_schema",
    "create_context",
    "listener",
    "load_settings",
]
