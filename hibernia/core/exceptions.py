"""
Custom exception hierarchy for hibernia.

Every failure the framework can report is a typed exception carrying a
human-readable message plus a context dict for debugging. Lifecycle passes
collect these into reports instead of raising them, so the same types are
used both for raised errors and for reported ones.
"""

from __future__ import annotations

from typing import Any


class HiberniaException(Exception):
    """
    Base exception for all hibernia errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (identities, units, keys)
        exit_code: Suggested exit code for the CLI (default: 1)
        recoverable: Whether retry/recovery may be possible
    """

    exit_code: int = 1
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


def key_name(key: Any) -> str:
    """Readable name for a binding key (a type or a string)."""
    if isinstance(key, type):
        return key.__qualname__
    return str(key)


# =============================================================================
# Configuration Errors
# =============================================================================


class HiberniaConfigError(HiberniaException):
    """Base class for configuration-related errors."""

    pass


class ConfigFileError(HiberniaConfigError):
    """
    Error reading or parsing a configuration file.

    Raised for TOML parsing errors, missing files, permission errors, etc.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(HiberniaConfigError, ValueError):
    """
    Invalid or missing configuration value.

    Inherits from ValueError so callers validating input can catch either.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: Any = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Injection Container Errors
# =============================================================================


class BindingError(HiberniaException):
    """
    Base class for errors raised by the injection container.

    A binding failure is deterministic for a given container configuration,
    so none of these are recoverable by retrying.
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        key: Any = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key is not None:
            ctx["key"] = key_name(key)
        super().__init__(message, context=ctx, cause=cause)
        self.key = key


class UnboundDependencyError(BindingError):
    """No provider is registered for the requested key."""

    pass


class CyclicDependencyError(BindingError):
    """
    The requested key depends on itself through a chain of bindings.

    Attributes:
        cycle: The binding keys forming the cycle, first key repeated last
    """

    def __init__(
        self,
        message: str,
        *,
        cycle: list[Any],
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["cycle"] = " -> ".join(key_name(k) for k in cycle)
        super().__init__(message, key=cycle[0] if cycle else None, context=ctx, cause=cause)
        self.cycle = list(cycle)


class BindingConstructionError(BindingError):
    """A registered factory or class raised while building an instance."""

    pass


# =============================================================================
# Lifecycle Errors
# =============================================================================


class HiberniaLifecycleError(HiberniaException):
    """Base class for errors produced by a startup or shutdown pass."""

    pass


class ScanError(HiberniaLifecycleError):
    """
    A malformed capability declaration found while scanning.

    Raised (and collected) for missing metadata, missing handlers, duplicate
    identities and code units that fail to import.
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        source_unit: str,
        identity: str | None = None,
        kind: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["source_unit"] = source_unit
        if identity is not None:
            ctx["identity"] = identity
        if kind is not None:
            ctx["kind"] = kind
        super().__init__(message, context=ctx, cause=cause)
        self.source_unit = source_unit
        self.identity = identity
        self.kind = kind


class ResolutionError(HiberniaLifecycleError):
    """
    A capability's dependencies could not be satisfied.

    Attributes:
        identity: Identity of the capability that requested the dependency
        dependency: Readable name of the failing dependency, if any
        cycle: Cycle participants when the failure is a binding cycle
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        identity: str,
        kind: str | None = None,
        dependency: str | None = None,
        cycle: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["identity"] = identity
        if kind is not None:
            ctx["kind"] = kind
        if dependency is not None:
            ctx["dependency"] = dependency
        if cycle:
            ctx["cycle"] = " -> ".join(cycle)
        super().__init__(message, context=ctx, cause=cause)
        self.identity = identity
        self.kind = kind
        self.dependency = dependency
        self.cycle = list(cycle or [])


class RegistrationError(HiberniaLifecycleError):
    """The host refused to register a capability."""

    def __init__(
        self,
        message: str,
        *,
        identity: str,
        kind: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["identity"] = identity
        if kind is not None:
            ctx["kind"] = kind
        super().__init__(message, context=ctx, cause=cause)
        self.identity = identity
        self.kind = kind


class UnregistrationWarning(HiberniaLifecycleError):
    """
    Best-effort cleanup of one registration failed.

    Never escalated: shutdown and rollback log it, report it and move on.
    """

    def __init__(
        self,
        message: str,
        *,
        identity: str,
        kind: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["identity"] = identity
        if kind is not None:
            ctx["kind"] = kind
        super().__init__(message, context=ctx, cause=cause)
        self.identity = identity
        self.kind = kind


class LifecycleStateError(HiberniaLifecycleError, RuntimeError):
    """
    A call-in was made in a state that does not allow it.

    This is a programming error (e.g. starting an already active plugin) and
    is raised immediately, before the host is touched.
    """

    exit_code: int = 2
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        state: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if state is not None:
            ctx["state"] = state
        super().__init__(message, context=ctx, cause=cause)
        self.state = state


# =============================================================================
# Host Errors
# =============================================================================


class HostError(HiberniaException):
    """Base class for errors raised by host registries."""

    pass


class HostRejectedError(HostError):
    """
    The host refused a registration.

    Raised for name collisions with another registration or failed host-side
    validation of capability metadata.
    """

    def __init__(
        self,
        message: str,
        *,
        slot: str | None = None,
        key: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if slot:
            ctx["slot"] = slot
        if key:
            ctx["key"] = key
        super().__init__(message, context=ctx, cause=cause)


class UnknownCommandError(HostError):
    """No registered command answers to the given label."""

    def __init__(
        self,
        message: str,
        *,
        label: str,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["label"] = label
        super().__init__(message, context=ctx, cause=cause)
        self.label = label


class CommandPermissionError(HostError):
    """The invoker lacks the permission node a command requires."""

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        permission: str,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        ctx["permission"] = permission
        super().__init__(message, context=ctx, cause=cause)
        self.permission = permission
