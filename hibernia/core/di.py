"""
Dependency injection helpers for hibernia.

Lazy resolution patterns that fall back to default implementations when the
plugin's container does not provide a service. The container is always
passed explicitly; hibernia keeps no ambient global container.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from .exceptions import UnboundDependencyError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .interfaces.injector import IInjector

T = TypeVar("T")


def resolve_or_default(
    injector: IInjector | None,
    interface: type[T],
    default_factory: Callable[[], T],
) -> T:
    """Resolve a service from the container or create a default.

    Only a missing binding triggers the fallback; cycles and construction
    failures of a bound service propagate.

    Args:
        injector: The plugin's container, or None
        interface: The interface/protocol type to resolve
        default_factory: Callable that creates the default implementation

    Returns:
        Resolved service instance or default

    Example:
        >>> from hibernia.core.interfaces.logger import ILogger
        >>> from hibernia.services.logging import NullLogger
        >>> logger = resolve_or_default(container, ILogger, NullLogger)
    """
    if injector is None:
        return default_factory()
    try:
        return injector.resolve(interface)
    except UnboundDependencyError:
        return default_factory()
