"""
Dependency injection container for hibernia plugins.

Uses dependency-injector providers for instance lifetimes, with support for:
- Singleton and transient lifetimes
- Pre-built instances
- Constructor injection inferred from type annotations
- Typed errors for unbound keys and binding cycles

Each plugin instance owns its own container; there is no process-wide one.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from dependency_injector import providers

from .exceptions import (
    BindingConstructionError,
    BindingError,
    CyclicDependencyError,
    UnboundDependencyError,
    key_name,
)
from .interfaces.injector import IInjector
from .introspection import constructor_dependencies
from .models.capability import Dependency

T = TypeVar("T")


def _as_dependencies(dependencies: Iterable[Any]) -> tuple[Dependency, ...]:
    """Normalise binding keys or Dependency records into Dependency records."""
    return tuple(d if isinstance(d, Dependency) else Dependency(key=d) for d in dependencies)


class ServiceContainer(IInjector):
    """
    Injection container consumed by the lifecycle engine.

    Bindings map a key (usually an interface type) to a dependency-injector
    provider plus the keys its factory needs. Resolution keeps the chain of
    keys currently being built, so a binding that reaches itself again is
    reported as a CyclicDependencyError instead of recursing forever.
    """

    def __init__(self) -> None:
        """Initialize the container with no bindings."""
        self._providers: dict[Any, providers.Provider] = {}
        self._resolving: list[Any] = []

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_singleton(
        self,
        interface: Any,
        implementation: Any = None,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] = (),
    ) -> None:
        """
        Register a singleton service.

        Args:
            interface: The binding key (interface type or string)
            implementation: Optional concrete instance
            factory: Optional factory function (for lazy init)
            dependencies: Keys whose instances are passed to the factory, in order
        """
        if implementation is not None:
            # Object provider for pre-created instances
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(
                self._build, factory, _as_dependencies(dependencies)
            )
        else:
            raise ValueError("Must provide either implementation or factory")

    def register_transient(
        self,
        interface: Any,
        factory: Callable[..., Any],
        dependencies: Iterable[Any] = (),
    ) -> None:
        """
        Register a transient service (new instance per resolve).

        Args:
            interface: The binding key
            factory: Factory function or class
            dependencies: Keys whose instances are passed to the factory, in order
        """
        self._providers[interface] = providers.Factory(
            self._build, factory, _as_dependencies(dependencies)
        )

    def register_class(
        self,
        interface: Any,
        implementation: type[T],
        scope: str = "singleton",
        dependencies: Iterable[Any] | None = None,
    ) -> None:
        """
        Register a class implementation.

        Args:
            interface: The binding key
            implementation: Concrete class type
            scope: 'singleton' or 'transient'
            dependencies: Explicit positional dependency keys; when omitted they
                are inferred from the annotated `__init__` parameters

        Raises:
            TypeError: If dependencies are inferred and a parameter is unannotated
        """
        deps = (
            constructor_dependencies(implementation)
            if dependencies is None
            else _as_dependencies(dependencies)
        )
        provider_cls = providers.Singleton if scope == "singleton" else providers.Factory
        self._providers[interface] = provider_cls(self._build, implementation, deps)

    def override(self, interface: Any, provider: providers.Provider) -> None:
        """
        Override a registered provider (useful for testing).

        Args:
            interface: The key to override
            provider: The new provider to use
        """
        self._providers[interface] = provider

    def unbind(self, interface: Any) -> None:
        """Remove a binding; unknown keys are ignored."""
        self._providers.pop(interface, None)

    def is_bound(self, interface: Any) -> bool:
        """Whether a provider is registered for the key."""
        return interface in self._providers

    def keys(self) -> list[Any]:
        """Registered binding keys, in registration order."""
        return list(self._providers)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, interface: Any) -> Any:
        """
        Resolve a service by key.

        Args:
            interface: The binding key to resolve

        Returns:
            The registered implementation

        Raises:
            UnboundDependencyError: If no registration found
            CyclicDependencyError: If the key is already being resolved
            BindingConstructionError: If the factory raised
        """
        if interface in self._resolving:
            start = self._resolving.index(interface)
            cycle = [*self._resolving[start:], interface]
            raise CyclicDependencyError(
                f"Cyclic binding detected while resolving {key_name(interface)}",
                cycle=cycle,
            )

        provider = self._providers.get(interface)
        if provider is None:
            raise UnboundDependencyError(
                f"No provider registered for: {key_name(interface)}", key=interface
            )

        self._resolving.append(interface)
        try:
            return provider()
        except BindingError:
            raise
        except Exception as e:
            raise BindingConstructionError(
                f"Failed to construct {key_name(interface)}: {e}", key=interface, cause=e
            ) from e
        finally:
            self._resolving.pop()

    def try_resolve(self, interface: Any) -> Any | None:
        """
        Try to resolve a service, returning None if not registered.

        Cycles and construction failures still raise.
        """
        if interface not in self._providers:
            return None
        return self.resolve(interface)

    def _build(self, factory: Callable[..., Any], dependencies: tuple[Dependency, ...]) -> Any:
        """Resolve a factory's dependencies, then call it."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for dep in dependencies:
            try:
                value = self.resolve(dep.key)
            except UnboundDependencyError:
                if dep.optional:
                    continue
                raise
            if dep.name:
                kwargs[dep.name] = value
            else:
                args.append(value)
        return factory(*args, **kwargs)
