"""
Dependency resolver: the bridge between descriptors and the injection container.

Turns every descriptor of a pass into a CapabilityInstance, or collects the
ResolutionErrors explaining why it cannot be built. The whole pass is
resolved before anything is registered, so a resolution failure never
leaves the host half-populated.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .exceptions import (
    BindingError,
    CyclicDependencyError,
    ResolutionError,
    UnboundDependencyError,
    key_name,
)
from .interfaces.injector import IInjector
from .interfaces.logger import ILogger
from .models.capability import (
    CapabilityDescriptor,
    CapabilityInstance,
    CapabilityKind,
    Dependency,
)
from .scanner import COMMAND_METHOD, LISTENER_METHOD


@dataclass
class ResolutionResult:
    """Instances built by one resolution pass, in registration order."""

    instances: list[CapabilityInstance] = field(default_factory=list)
    errors: list[ResolutionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class DependencyResolver:
    """
    Builds capability instances from descriptors.

    Config schemas are resolved first; each schema object is then visible to
    the rest of the pass under its backing type, so listeners and commands
    may take it as a constructor dependency. Nothing is retried: a binding
    failure is deterministic for a given container.
    """

    def __init__(self, injector: IInjector, logger: ILogger | None = None) -> None:
        self.injector = injector
        if logger is None:
            from ..services.logging import NullLogger

            logger = NullLogger()
        self.logger = logger

    def resolve(
        self,
        descriptor: CapabilityDescriptor,
        scope: Mapping[Any, Any] | None = None,
    ) -> CapabilityInstance:
        """
        Resolve one descriptor.

        Args:
            descriptor: The capability to build
            scope: Pass-local values consulted before the container

        Raises:
            ResolutionError: The first problem found
        """
        instance, errors = self._resolve(descriptor, scope or {})
        if errors:
            raise errors[0]
        return instance

    def resolve_all(self, descriptors: Iterable[CapabilityDescriptor]) -> ResolutionResult:
        """Resolve a whole pass, collecting every error."""
        result = ResolutionResult()
        scope: dict[Any, Any] = {}

        for descriptor in sorted(descriptors, key=lambda d: d.sort_key):
            instance, errors = self._resolve(descriptor, scope)
            if errors:
                for error in errors:
                    self.logger.error("Resolution failed: %s", error)
                result.errors.extend(errors)
                if descriptor.kind == CapabilityKind.CONFIG_SCHEMA:
                    scope[descriptor.metadata.backing_type] = _FailedSchema(descriptor.identity)
                continue

            if descriptor.kind == CapabilityKind.CONFIG_SCHEMA:
                scope[descriptor.metadata.backing_type] = instance.value
            self.logger.debug("Resolved %s '%s'", descriptor.kind.value, descriptor.identity)
            result.instances.append(instance)

        return result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _resolve(
        self, descriptor: CapabilityDescriptor, scope: Mapping[Any, Any]
    ) -> tuple[CapabilityInstance | None, list[ResolutionError]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        errors: list[ResolutionError] = []

        for dep in descriptor.dependencies:
            failed = scope.get(dep.key)
            if isinstance(failed, _FailedSchema):
                errors.append(
                    ResolutionError(
                        f"Dependency {dep.display} for '{descriptor.identity}' is unavailable: "
                        f"config schema '{failed.identity}' failed to resolve",
                        identity=descriptor.identity,
                        kind=descriptor.kind.value,
                        dependency=dep.display,
                    )
                )
                continue
            try:
                value = self._lookup(dep, scope)
            except _Skip:
                continue
            except BindingError as e:
                errors.append(self._binding_failure(descriptor, dep, e))
                continue
            if dep.name:
                kwargs[dep.name] = value
            else:
                args.append(value)

        if errors:
            return None, errors

        try:
            return self._construct(descriptor, args, kwargs), []
        except ResolutionError as e:
            return None, [e]
        except Exception as e:
            return None, [
                ResolutionError(
                    f"Failed to construct {descriptor.kind.value} '{descriptor.identity}': {e}",
                    identity=descriptor.identity,
                    kind=descriptor.kind.value,
                    cause=e,
                )
            ]

    def _lookup(self, dep: Dependency, scope: Mapping[Any, Any]) -> Any:
        if dep.key in scope:
            return scope[dep.key]
        try:
            return self.injector.resolve(dep.key)
        except UnboundDependencyError as e:
            # Only the dependency itself may be missing; a missing transitive binding is an error
            if dep.optional and e.key == dep.key:
                raise _Skip() from e
            raise

    def _binding_failure(
        self, descriptor: CapabilityDescriptor, dep: Dependency, error: BindingError
    ) -> ResolutionError:
        identity = descriptor.identity
        if isinstance(error, CyclicDependencyError):
            cycle = [key_name(k) for k in error.cycle]
            return ResolutionError(
                f"Cyclic dependency for '{identity}' via {dep.display}: " + " -> ".join(cycle),
                identity=identity,
                kind=descriptor.kind.value,
                dependency=dep.display,
                cycle=cycle,
                cause=error,
            )
        if isinstance(error, UnboundDependencyError):
            missing = key_name(error.key)
            detail = "" if error.key == dep.key else f" (needs unbound {missing})"
            return ResolutionError(
                f"Unsatisfied dependency {dep.display} for '{identity}'{detail}",
                identity=identity,
                kind=descriptor.kind.value,
                dependency=dep.display,
                cause=error,
            )
        return ResolutionError(
            f"Dependency {dep.display} for '{identity}' could not be built: {error.message}",
            identity=identity,
            dependency=dep.display,
            cause=error,
        )

    def _construct(
        self, descriptor: CapabilityDescriptor, args: list[Any], kwargs: dict[str, Any]
    ) -> CapabilityInstance:
        target = descriptor.target

        if descriptor.kind == CapabilityKind.CONFIG_SCHEMA:
            return self._construct_config_schema(descriptor, args)

        method = COMMAND_METHOD if descriptor.kind == CapabilityKind.COMMAND else LISTENER_METHOD
        if inspect.isclass(target):
            value = target(*args, **kwargs)
            handler = getattr(value, method)
        else:
            value = target
            handler = functools.partial(target, *args, **kwargs) if args or kwargs else target

        return CapabilityInstance(descriptor=descriptor, value=value, handler=handler)

    def _construct_config_schema(
        self, descriptor: CapabilityDescriptor, args: list[Any]
    ) -> CapabilityInstance:
        metadata = descriptor.metadata
        source = args[0]
        values = {**metadata.defaults, **source.section(metadata.section)}
        try:
            value = metadata.backing_type.model_validate(values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ResolutionError(
                f"Invalid configuration for schema '{descriptor.identity}' "
                f"(section '{metadata.section}'): {problems}",
                identity=descriptor.identity,
                kind=descriptor.kind.value,
                cause=e,
            ) from e
        return CapabilityInstance(descriptor=descriptor, value=value)


class _Skip(Exception):
    """An optional dependency is unbound; its parameter default applies."""


@dataclass(frozen=True)
class _FailedSchema:
    """Scope entry for a config schema whose own resolution failed."""

    identity: str
