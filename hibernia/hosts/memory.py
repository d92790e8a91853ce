"""
In-memory host.

A complete IHost with a command table, an event bus and a config store held
in dictionaries. Used by the test suite, by `hibernia check`, and as the
reference for adapters to real server processes.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..core.exceptions import CommandPermissionError, HostRejectedError, UnknownCommandError
from ..core.interfaces.host import IHost
from ..core.interfaces.logger import ILogger
from ..core.models.capability import (
    CapabilityInstance,
    CommandMetadata,
    ConfigSchemaMetadata,
    ListenerMetadata,
)


class Invoker(Protocol):
    """Whoever runs a command: a player, the console, a test."""

    def has_permission(self, node: str) -> bool: ...


@dataclass
class SimpleInvoker:
    """Invoker holding an explicit set of permission nodes.

    A node ending in ".*" grants every node below it; "*" grants everything.
    """

    name: str = "console"
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, node: str) -> bool:
        if "*" in self.permissions or node in self.permissions:
            return True
        parts = node.split(".")
        return any(".".join(parts[:i]) + ".*" in self.permissions for i in range(1, len(parts)))


@dataclass
class _CommandEntry:
    instance: CapabilityInstance
    metadata: CommandMetadata


@dataclass
class _ListenerEntry:
    instance: CapabilityInstance
    metadata: ListenerMetadata
    sequence: int


@dataclass
class _ConfigEntry:
    instance: CapabilityInstance
    metadata: ConfigSchemaMetadata


class InMemoryHost(IHost):
    """
    Host registries kept in process memory.

    Tokens are opaque strings unique to this host. Commands are reachable by
    every label (name and aliases); a label owned by another command, or a
    config key already bound, is rejected with HostRejectedError.
    """

    def __init__(self, logger: ILogger | None = None) -> None:
        if logger is None:
            from ..services.logging import NullLogger

            logger = NullLogger()
        self.logger = logger
        self._ids = itertools.count(1)
        self._commands: dict[str, _CommandEntry] = {}
        self._labels: dict[str, str] = {}
        self._listeners: dict[str, _ListenerEntry] = {}
        self._configs: dict[str, _ConfigEntry] = {}
        self._config_keys: dict[str, str] = {}

    def _token(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    # -------------------------------------------------------------------------
    # IHost
    # -------------------------------------------------------------------------

    def register_command(self, instance: CapabilityInstance) -> str:
        metadata = instance.descriptor.metadata
        taken = [label for label in metadata.labels if label in self._labels]
        if taken:
            owner = self._commands[self._labels[taken[0]]].metadata.name
            raise HostRejectedError(
                f"Command label '{taken[0]}' is already registered by '{owner}'",
                slot="command",
                key=taken[0],
            )

        token = self._token("command")
        self._commands[token] = _CommandEntry(instance, metadata)
        for label in metadata.labels:
            self._labels[label] = token
        self.logger.debug("Host: command '%s' -> %s", metadata.name, token)
        return token

    def register_listener(self, instance: CapabilityInstance) -> str:
        token = self._token("listener")
        self._listeners[token] = _ListenerEntry(
            instance, instance.descriptor.metadata, sequence=next(self._ids)
        )
        self.logger.debug("Host: listener '%s' -> %s", instance.identity, token)
        return token

    def register_config_schema(self, instance: CapabilityInstance) -> str:
        metadata = instance.descriptor.metadata
        if metadata.key in self._config_keys:
            raise HostRejectedError(
                f"Config key '{metadata.key}' is already bound", slot="config", key=metadata.key
            )

        token = self._token("config")
        self._configs[token] = _ConfigEntry(instance, metadata)
        self._config_keys[metadata.key] = token
        self.logger.debug("Host: config '%s' -> %s", metadata.key, token)
        return token

    def unregister_command(self, token: Any) -> None:
        entry = self._commands.pop(token, None)
        if entry is None:
            return
        for label in entry.metadata.labels:
            if self._labels.get(label) == token:
                del self._labels[label]

    def unregister_listener(self, token: Any) -> None:
        self._listeners.pop(token, None)

    def unregister_config_schema(self, token: Any) -> None:
        entry = self._configs.pop(token, None)
        if entry is not None and self._config_keys.get(entry.metadata.key) == token:
            del self._config_keys[entry.metadata.key]

    # -------------------------------------------------------------------------
    # Host-side use of registered capabilities
    # -------------------------------------------------------------------------

    def dispatch(self, label: str, invoker: Invoker, arguments: Iterable[str] = ()) -> Any:
        """
        Run the command registered under `label`.

        Raises:
            UnknownCommandError: If no command answers to the label
            CommandPermissionError: If the invoker lacks the command's permission
        """
        token = self._labels.get(label.strip().lower())
        if token is None:
            raise UnknownCommandError(f"Unknown command '{label}'", label=label)

        entry = self._commands[token]
        permission = entry.metadata.permission
        if permission and not invoker.has_permission(permission):
            raise CommandPermissionError(
                f"Missing permission '{permission}' for command '{entry.metadata.name}'",
                permission=permission,
            )
        return entry.instance.handler(invoker, list(arguments))

    def publish(self, event: Any) -> Any:
        """
        Deliver an event to every subscribed listener and return it.

        Listeners of the event's class and of its base classes are called in
        priority order (LOWEST first, MONITOR last), then registration order.
        """
        event_types = type(event).__mro__
        entries = sorted(
            (e for e in self._listeners.values() if e.metadata.event in event_types),
            key=lambda e: (e.metadata.priority, e.sequence),
        )
        for entry in entries:
            if entry.metadata.ignore_cancelled and getattr(event, "cancelled", False):
                continue
            entry.instance.handler(event)
        return event

    def config(self, key: str) -> Any:
        """The schema object bound under `key`.

        Raises:
            KeyError: If no schema is bound under the key
        """
        return self._configs[self._config_keys[key]].instance.value

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def commands(self) -> list[str]:
        """Primary names of the registered commands, in registration order."""
        return [e.metadata.name for e in self._commands.values()]

    def labels(self) -> list[str]:
        return sorted(self._labels)

    def listeners(self) -> list[str]:
        """Identities of the subscribed listeners, in registration order."""
        return [e.instance.identity for e in self._listeners.values()]

    def config_keys(self) -> list[str]:
        return list(self._config_keys)

    def registration_count(self) -> int:
        return len(self._commands) + len(self._listeners) + len(self._configs)
