"""
Capability models.

Descriptors are produced by the scanner, instances by the resolver and
handles by the registrar. All three are immutable.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, IntEnum
from typing import Any
from uuid import uuid4

from pydantic import Field

from ..exceptions import key_name
from .base import ImmutableModel


class CapabilityKind(str, Enum):
    """The closed set of declarable capability kinds."""

    CONFIG_SCHEMA = "config_schema"
    LISTENER = "listener"
    COMMAND = "command"

    @property
    def rank(self) -> int:
        """Registration rank: config schemas first, then listeners, then commands."""
        return _KIND_RANK[self]


_KIND_RANK = {
    CapabilityKind.CONFIG_SCHEMA: 0,
    CapabilityKind.LISTENER: 1,
    CapabilityKind.COMMAND: 2,
}


class EventPriority(IntEnum):
    """Listener priority, lowest runs first. Only the host uses it for ordering."""

    LOWEST = 0
    LOW = 1
    NORMAL = 2
    HIGH = 3
    HIGHEST = 4
    MONITOR = 5


class Dependency(ImmutableModel):
    """A collaborator a capability needs from the injection container.

    Attributes:
        key: Binding key (usually a type, sometimes a string)
        name: Parameter the value is injected into; None for positional
        optional: Parameter has a default, so an unbound key is tolerated
    """

    key: Any
    name: str | None = None
    optional: bool = False

    @property
    def display(self) -> str:
        """Readable form used in errors and reports."""
        if self.name:
            return f"{self.name}: {key_name(self.key)}"
        return key_name(self.key)


class CommandMetadata(ImmutableModel):
    """Command metadata: labels, permission node and help text."""

    name: str
    aliases: tuple[str, ...] = ()
    permission: str | None = None
    description: str = ""
    asynchronous: bool = False

    @property
    def labels(self) -> tuple[str, ...]:
        """Name followed by every alias."""
        return (self.name, *self.aliases)


class ListenerMetadata(ImmutableModel):
    """Listener metadata: target event type and host-side priority."""

    event: Any
    priority: EventPriority = EventPriority.NORMAL
    ignore_cancelled: bool = False


class ConfigSchemaMetadata(ImmutableModel):
    """Config schema metadata: backing model type and per-field defaults."""

    key: str
    section: str
    backing_type: Any
    defaults: dict[str, Any] = Field(default_factory=dict)


CapabilityMetadata = CommandMetadata | ListenerMetadata | ConfigSchemaMetadata


class CapabilityDescriptor(ImmutableModel):
    """Static, pre-construction metadata for one declared capability.

    `identity` is unique per `kind` within one plugin instance. `order` is the
    scan-discovery index used to keep registration order stable within a kind.
    """

    kind: CapabilityKind
    identity: str
    dependencies: tuple[Dependency, ...] = ()
    source_unit: str
    target: Any
    metadata: CapabilityMetadata
    order: int = 0

    @property
    def sort_key(self) -> tuple[int, int]:
        """Registration order key: kind rank, then discovery order."""
        return (self.kind.rank, self.order)


class CapabilityInstance(ImmutableModel):
    """A descriptor paired with its constructed, dependency-satisfied object.

    For commands and listeners `handler` is the bound callable the host
    invokes. For config schemas `value` is the validated schema object and
    `handler` is None.
    """

    descriptor: CapabilityDescriptor
    value: Any
    handler: Callable[..., Any] | None = None

    @property
    def kind(self) -> CapabilityKind:
        return self.descriptor.kind

    @property
    def identity(self) -> str:
        return self.descriptor.identity


class RegistrationHandle(ImmutableModel):
    """Reversible token for one active binding to the host.

    `token` is whatever the host returned from its register operation and is
    handed back verbatim to the matching unregister operation.
    """

    kind: CapabilityKind
    identity: str
    token: Any
    handle_id: str = Field(default_factory=lambda: uuid4().hex)
