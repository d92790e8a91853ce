"""
Shared pytest fixtures for hibernia tests.

This module provides:
- container: a ServiceContainer with the economy plugin's services bound
- RecordingHost / recording_host: an InMemoryHost that records every host
  mutation and can be told to fail on chosen identities
- economy_context: a PluginContext for the sample economy plugin
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from hibernia.core.container import ServiceContainer
from hibernia.core.discovery import PackageUnitSource
from hibernia.core.exceptions import HostRejectedError
from hibernia.core.interfaces.config import IConfigSource
from hibernia.core.lifecycle import LifecycleController, PluginContext
from hibernia.core.models.capability import CapabilityInstance
from hibernia.hosts.memory import InMemoryHost, SimpleInvoker
from hibernia.services.config_source import MappingConfigSource
from sample_plugins.economy.services import Bank


class RecordingHost(InMemoryHost):
    """
    InMemoryHost that records calls as ("register" | "unregister", kind, identity).

    Identities in `fail_register` are rejected with HostRejectedError;
    tokens of identities in `fail_unregister` raise RuntimeError on removal.
    """

    def __init__(
        self,
        fail_register: set[str] | None = None,
        fail_unregister: set[str] | None = None,
    ) -> None:
        super().__init__()
        self.calls: list[tuple[str, str, str]] = []
        self.fail_register = set(fail_register or ())
        self.fail_unregister = set(fail_unregister or ())
        self._identities: dict[Any, tuple[str, str]] = {}

    def _register(self, kind: str, instance: CapabilityInstance, register: Callable) -> Any:
        if instance.identity in self.fail_register:
            raise HostRejectedError(f"refusing {instance.identity}", slot=kind)
        token = register(instance)
        self._identities[token] = (kind, instance.identity)
        self.calls.append(("register", kind, instance.identity))
        return token

    def _unregister(self, token: Any, unregister: Callable) -> None:
        kind, identity = self._identities.get(token, ("?", "?"))
        self.calls.append(("unregister", kind, identity))
        if identity in self.fail_unregister:
            raise RuntimeError(f"cannot remove {identity}")
        unregister(token)

    def register_command(self, instance):
        return self._register("command", instance, super().register_command)

    def register_listener(self, instance):
        return self._register("listener", instance, super().register_listener)

    def register_config_schema(self, instance):
        return self._register("config_schema", instance, super().register_config_schema)

    def unregister_command(self, token):
        self._unregister(token, super().unregister_command)

    def unregister_listener(self, token):
        self._unregister(token, super().unregister_listener)

    def unregister_config_schema(self, token):
        self._unregister(token, super().unregister_config_schema)

    def registered(self) -> list[str]:
        """Identities passed to register_*, in call order."""
        return [identity for action, _, identity in self.calls if action == "register"]

    def unregistered(self) -> list[str]:
        """Identities passed to unregister_*, in call order."""
        return [identity for action, _, identity in self.calls if action == "unregister"]


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Plugin config served to config schemas; tests may mutate it before starting."""
    return {}


@pytest.fixture
def container(config_data) -> ServiceContainer:
    """Container with a Bank singleton and a mapping config source."""
    container = ServiceContainer()
    container.register_singleton(IConfigSource, implementation=MappingConfigSource(config_data))
    container.register_class(Bank, Bank)
    return container


@pytest.fixture
def recording_host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def make_context(container) -> Callable[..., PluginContext]:
    """Factory for a PluginContext over the given sources and host."""

    def _make(*sources, host: InMemoryHost | None = None, name: str = "test") -> PluginContext:
        return PluginContext(
            name=name,
            sources=list(sources),
            injector=container,
            host=host if host is not None else RecordingHost(),
        )

    return _make


@pytest.fixture
def economy_context(make_context, recording_host) -> PluginContext:
    return make_context(
        PackageUnitSource("sample_plugins.economy"), host=recording_host, name="economy"
    )


@pytest.fixture
def controller() -> LifecycleController:
    return LifecycleController()


@pytest.fixture
def player() -> SimpleInvoker:
    return SimpleInvoker(name="alice", permissions=frozenset({"economy.*"}))


@pytest.fixture
def host_factory() -> type[RecordingHost]:
    """RecordingHost class, for tests that configure failures."""
    return RecordingHost
