"""
Plugin lifecycle controller.

Drives one plugin instance through its startup and shutdown passes:

    UNSTARTED -> SCANNING -> RESOLVING -> REGISTERING -> ACTIVE
    ACTIVE -> SHUTTING_DOWN -> STOPPED

A startup pass is all-or-nothing. Scan and resolution failures abort before
the host is touched; a registration failure unwinds every registration made
so far, in reverse order, and leaves the plugin FAILED. Shutdown is
best-effort: each unregistration failure is reported and the rest continue.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .di import resolve_or_default
from .discovery import CodeUnitSource
from .exceptions import (
    LifecycleStateError,
    RegistrationError,
    ScanError,
    UnregistrationWarning,
)
from .interfaces.host import IHost
from .interfaces.injector import IInjector
from .interfaces.logger import ILogger
from .models.capability import CapabilityInstance, CapabilityKind, RegistrationHandle
from .models.lifecycle import (
    TRANSITIONS,
    CapabilityOutcome,
    LifecycleState,
    OutcomeStatus,
    RegistrationLedger,
    ShutdownReport,
    StartupReport,
)
from .registrar import Registrar
from .resolver import DependencyResolver
from .scanner import Scanner


@dataclass
class PluginContext:
    """
    Everything a lifecycle pass needs from the host side.

    Attributes:
        name: Plugin instance name, used in logs and reports
        sources: Where the plugin's code units come from
        injector: Container the plugin's capabilities are built from
        host: Registries the capabilities are bound to
    """

    name: str
    sources: Sequence[CodeUnitSource]
    injector: IInjector
    host: IHost


class LifecycleController:
    """
    Owns the lifecycle state and the registration ledger of one plugin instance.

    start() and stop() are the only call-ins. A pass runs under a
    non-blocking lock: a second call while a pass is executing (from another
    thread, or re-entrantly from a capability constructor) is rejected with
    LifecycleStateError instead of waiting.

    Usage:
        controller = LifecycleController()
        report = controller.start(context)
        if not report.success:
            ...
        controller.stop()
    """

    def __init__(self, scanner: Scanner | None = None, logger: ILogger | None = None) -> None:
        """
        Args:
            scanner: Scanner to use; a fresh one per pass when omitted
            logger: Logger override; otherwise the context's injector is asked
                for ILogger, falling back to a silent logger
        """
        self._scanner = scanner
        self._logger_override = logger
        self._lock = threading.Lock()
        self._state = LifecycleState.UNSTARTED
        self._context: PluginContext | None = None
        self._ledger: RegistrationLedger | None = None
        self._registrar: Registrar | None = None
        self._logger: ILogger | None = logger

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def name(self) -> str:
        return self._context.name if self._context else ""

    @property
    def registrations(self) -> tuple[RegistrationHandle, ...]:
        """Handles currently bound to the host, in registration order."""
        return tuple(self._ledger) if self._ledger is not None else ()

    # -------------------------------------------------------------------------
    # Call-ins
    # -------------------------------------------------------------------------

    def start(self, context: PluginContext) -> StartupReport:
        """
        Run a startup pass.

        Allowed from UNSTARTED and STOPPED. Scan, resolution and registration
        failures do not raise; they are returned in the report, whose state is
        then FAILED.

        Raises:
            LifecycleStateError: If the plugin is ACTIVE, FAILED or a pass is in flight
        """
        if not self._lock.acquire(blocking=False):
            raise LifecycleStateError(
                "Cannot start: a lifecycle pass is already running", state=self._state.value
            )
        try:
            if self._state not in (LifecycleState.UNSTARTED, LifecycleState.STOPPED):
                raise LifecycleStateError(
                    f"Cannot start plugin in state {self._state.value}", state=self._state.value
                )
            self._context = context
            self._logger = self._logger_override or resolve_or_default(
                context.injector, ILogger, _null_logger
            )
            try:
                return self._startup(context)
            except Exception:
                self._abort()
                raise
        finally:
            self._lock.release()

    def stop(self) -> ShutdownReport:
        """
        Run a shutdown pass.

        Unregisters every capability in reverse registration order. A no-op
        returning an empty report when nothing is registered (UNSTARTED,
        STOPPED or FAILED), so calling it twice is safe.

        Raises:
            LifecycleStateError: If a pass is in flight
        """
        if not self._lock.acquire(blocking=False):
            raise LifecycleStateError(
                "Cannot stop: a lifecycle pass is already running", state=self._state.value
            )
        try:
            if self._state != LifecycleState.ACTIVE:
                self._log().debug(
                    "Stop ignored for plugin '%s' in state %s", self.name, self._state.value
                )
                return ShutdownReport(plugin=self.name, state=self._state)
            return self._shutdown()
        finally:
            self._lock.release()

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    def _startup(self, context: PluginContext) -> StartupReport:
        logger = self._log()
        report = StartupReport(plugin=context.name, state=self._state)
        logger.info("Starting plugin '%s'", context.name)

        self._transition(LifecycleState.SCANNING)
        scanner = self._scanner or Scanner(logger)
        scan = scanner.scan(*context.sources)
        if scan.errors:
            report.errors.extend(scan.errors)
            report.outcomes.extend(_failed(e) for e in scan.errors)
            return self._fail(report)

        self._transition(LifecycleState.RESOLVING)
        resolution = DependencyResolver(context.injector, logger).resolve_all(scan.descriptors)
        if resolution.errors:
            report.errors.extend(resolution.errors)
            report.outcomes.extend(_failed(e) for e in resolution.errors)
            return self._fail(report)

        self._transition(LifecycleState.REGISTERING)
        registrar = Registrar(context.host, logger)
        ledger = RegistrationLedger()
        self._registrar = registrar
        self._ledger = ledger

        ordered = registrar.order(resolution.instances)
        for index, instance in enumerate(ordered):
            try:
                registrar.register(instance, ledger)
            except RegistrationError as e:
                logger.error("Registration failed, rolling back plugin '%s': %s", context.name, e)
                report.errors.append(e)
                return self._rollback(report, ordered, index, e)

        report.outcomes.extend(
            _outcome(i.kind, i.identity, OutcomeStatus.REGISTERED) for i in ordered
        )
        self._transition(LifecycleState.ACTIVE)
        report.state = self._state
        logger.info("Plugin '%s' active with %d capability(ies)", context.name, len(ledger))
        return report

    def _rollback(
        self,
        report: StartupReport,
        ordered: list[CapabilityInstance],
        failed_index: int,
        error: RegistrationError,
    ) -> StartupReport:
        self._transition(LifecycleState.SHUTTING_DOWN)
        unwound, warnings = self._unwind(OutcomeStatus.ROLLED_BACK)
        report.warnings.extend(warnings)

        # One outcome per capability, in registration order
        by_key = {(o.kind, o.identity): o for o in unwound}
        for instance in ordered[:failed_index]:
            report.outcomes.append(by_key[(instance.kind, instance.identity)])
        failing = ordered[failed_index]
        report.outcomes.append(
            _outcome(failing.kind, failing.identity, OutcomeStatus.FAILED, error.message)
        )
        report.outcomes.extend(
            _outcome(i.kind, i.identity, OutcomeStatus.SKIPPED) for i in ordered[failed_index + 1 :]
        )
        return self._fail(report)

    def _shutdown(self) -> ShutdownReport:
        logger = self._log()
        logger.info("Stopping plugin '%s'", self.name)

        self._transition(LifecycleState.SHUTTING_DOWN)
        outcomes, warnings = self._unwind(OutcomeStatus.UNREGISTERED)
        self._transition(LifecycleState.STOPPED)

        if warnings:
            logger.warning(
                "Plugin '%s' stopped with %d unregistration warning(s)", self.name, len(warnings)
            )
        else:
            logger.info("Plugin '%s' stopped", self.name)
        return ShutdownReport(
            plugin=self.name, state=self._state, outcomes=outcomes, warnings=warnings
        )

    def _unwind(
        self, success: OutcomeStatus
    ) -> tuple[list[CapabilityOutcome], list[UnregistrationWarning]]:
        """Unregister every ledger handle, newest first, continuing past failures."""
        outcomes: list[CapabilityOutcome] = []
        warnings: list[UnregistrationWarning] = []
        if self._ledger is None or self._registrar is None:
            return outcomes, warnings

        for handle in self._ledger.drain():
            try:
                self._registrar.unregister(handle)
            except UnregistrationWarning as w:
                self._log().warning("%s", w)
                warnings.append(w)
                status = OutcomeStatus.UNREGISTER_FAILED
                outcomes.append(_outcome(handle.kind, handle.identity, status, w.message))
                continue
            outcomes.append(_outcome(handle.kind, handle.identity, success))

        self._ledger = None
        self._registrar = None
        return outcomes, warnings

    def _fail(self, report: StartupReport) -> StartupReport:
        self._transition(LifecycleState.FAILED)
        report.state = self._state
        self._log().error(
            "Plugin '%s' failed to start: %d error(s)", report.plugin, len(report.errors)
        )
        return report

    def _abort(self) -> None:
        """An unexpected exception escaped a pass: release what was bound and fail."""
        if self._ledger is not None:
            self._unwind(OutcomeStatus.ROLLED_BACK)
        self._state = LifecycleState.FAILED

    def _transition(self, target: LifecycleState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise LifecycleStateError(
                f"Illegal lifecycle transition {self._state.value} -> {target.value}",
                state=self._state.value,
            )
        self._log().debug("Plugin '%s': %s -> %s", self.name, self._state.value, target.value)
        self._state = target

    def _log(self) -> ILogger:
        if self._logger is None:
            self._logger = _null_logger()
        return self._logger


def _null_logger() -> ILogger:
    from ..services.logging import NullLogger

    return NullLogger()


def _outcome(
    kind: CapabilityKind | None, identity: str, status: OutcomeStatus, error: str | None = None
) -> CapabilityOutcome:
    return CapabilityOutcome(kind=kind, identity=identity, status=status, error=error)


def _failed(error: Any) -> CapabilityOutcome:
    kind = CapabilityKind(error.kind) if getattr(error, "kind", None) else None
    identity = error.identity
    if identity is None and isinstance(error, ScanError):
        identity = error.source_unit
    return _outcome(kind, identity, OutcomeStatus.FAILED, error.message)
