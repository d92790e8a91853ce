"""
Lifecycle models.

Lifecycle state, the per-pass registration ledger and the reports returned
to the host from start() and stop().
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import HiberniaException, UnregistrationWarning
from .capability import CapabilityKind, RegistrationHandle


class LifecycleState(str, Enum):
    """State of one plugin instance's lifecycle."""

    UNSTARTED = "unstarted"
    SCANNING = "scanning"
    RESOLVING = "resolving"
    REGISTERING = "registering"
    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        """Whether a startup or shutdown pass is currently executing."""
        return self in _IN_FLIGHT


_IN_FLIGHT = frozenset(
    {
        LifecycleState.SCANNING,
        LifecycleState.RESOLVING,
        LifecycleState.REGISTERING,
        LifecycleState.SHUTTING_DOWN,
    }
)

# REGISTERING -> SHUTTING_DOWN is the rollback of a failed pass, which ends in FAILED.
TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.UNSTARTED: frozenset({LifecycleState.SCANNING}),
    LifecycleState.SCANNING: frozenset({LifecycleState.RESOLVING, LifecycleState.FAILED}),
    LifecycleState.RESOLVING: frozenset({LifecycleState.REGISTERING, LifecycleState.FAILED}),
    LifecycleState.REGISTERING: frozenset(
        {LifecycleState.ACTIVE, LifecycleState.SHUTTING_DOWN, LifecycleState.FAILED}
    ),
    LifecycleState.ACTIVE: frozenset({LifecycleState.SHUTTING_DOWN}),
    LifecycleState.SHUTTING_DOWN: frozenset({LifecycleState.STOPPED, LifecycleState.FAILED}),
    LifecycleState.STOPPED: frozenset({LifecycleState.SCANNING}),
    LifecycleState.FAILED: frozenset(),
}


class OutcomeStatus(str, Enum):
    """What happened to one capability during a pass."""

    REGISTERED = "registered"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    SKIPPED = "skipped"
    UNREGISTERED = "unregistered"
    UNREGISTER_FAILED = "unregister_failed"


@dataclass(frozen=True)
class CapabilityOutcome:
    """
    Per-capability entry of a startup or shutdown report.

    `kind` is None for failures not tied to one declaration, such as a code
    unit that could not be imported; `identity` is then the unit name.
    """

    kind: CapabilityKind | None
    identity: str
    status: OutcomeStatus
    error: str | None = None


class RegistrationLedger:
    """
    Ordered record of the handles registered during one pass.

    Owned by the lifecycle controller and handed explicitly to the
    registrar; never shared between passes.
    """

    def __init__(self) -> None:
        self._handles: list[RegistrationHandle] = []

    def record(self, handle: RegistrationHandle) -> None:
        """Append a handle in registration call order."""
        self._handles.append(handle)

    def drain(self) -> Iterator[RegistrationHandle]:
        """Remove and yield every handle, most recent first."""
        while self._handles:
            yield self._handles.pop()

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[RegistrationHandle]:
        return iter(list(self._handles))


@dataclass
class StartupReport:
    """Result of a start() call.

    Attributes:
        plugin: Plugin instance name
        state: Lifecycle state after the pass
        outcomes: Per-capability outcomes in the order they were decided
        errors: Fatal errors of the pass (scan, resolution or the one registration error)
        warnings: Unregistration failures met while rolling back
    """

    plugin: str
    state: LifecycleState
    outcomes: list[CapabilityOutcome] = field(default_factory=list)
    errors: list[HiberniaException] = field(default_factory=list)
    warnings: list[UnregistrationWarning] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors and self.state == LifecycleState.ACTIVE

    def with_status(self, status: OutcomeStatus) -> list[CapabilityOutcome]:
        """Outcomes filtered by status."""
        return [o for o in self.outcomes if o.status == status]


@dataclass
class ShutdownReport:
    """Result of a stop() call."""

    plugin: str
    state: LifecycleState
    outcomes: list[CapabilityOutcome] = field(default_factory=list)
    warnings: list[UnregistrationWarning] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.warnings

    def with_status(self, status: OutcomeStatus) -> list[CapabilityOutcome]:
        """Outcomes filtered by status."""
        return [o for o in self.outcomes if o.status == status]
