"""
Capability markers.

Decorators plugin authors put on classes and functions to declare commands,
event listeners and config schemas:

    @command("balance", aliases=("bal",), permission="eco.balance")
    class BalanceCommand:
        def __init__(self, economy: Economy) -> None: ...
        def execute(self, invoker, arguments): ...

    @listener(PlayerJoinEvent, priority=EventPriority.HIGH)
    def greet(event, *, messages: Messages) -> None: ...

    @config_schema("economy")
    class EconomySettings(BaseModel):
        starting_balance: int = 100

Decorators only record what was declared. They never reject a declaration;
the scanner validates every marker and reports all problems of a pass
together.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .models.capability import CapabilityKind, EventPriority

MARKER_ATTR = "__hibernia_capabilities__"

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class CapabilityMarker:
    """Raw, unvalidated declaration attached to a class or function."""

    kind: CapabilityKind
    identity: Any
    options: Mapping[str, Any] = field(default_factory=dict)
    requires: tuple[Any, ...] | None = None


def _attach(target: Any, marker: CapabilityMarker) -> Any:
    # Stored in the object's own __dict__ so subclasses do not inherit markers.
    markers = list(vars(target).get(MARKER_ATTR, ()))
    markers.append(marker)
    setattr(target, MARKER_ATTR, tuple(markers))
    return target


def markers_of(target: Any) -> tuple[CapabilityMarker, ...]:
    """Markers declared directly on `target`, in decoration order (innermost first)."""
    try:
        return tuple(vars(target).get(MARKER_ATTR, ()))
    except TypeError:
        # Objects without a __dict__ cannot carry markers
        return ()


def _requires(requires: Iterable[Any] | None) -> tuple[Any, ...] | None:
    return tuple(requires) if requires is not None else None


def command(
    name: str,
    *,
    aliases: Iterable[str] = (),
    permission: str | None = None,
    description: str = "",
    asynchronous: bool = False,
    requires: Iterable[Any] | None = None,
) -> Callable[[F], F]:
    """
    Declare a command.

    Args:
        name: Primary label; the command's identity
        aliases: Additional labels
        permission: Permission node the invoker must hold
        description: Help text
        asynchronous: Ask the host to run the handler off its main thread
        requires: Explicit dependency keys, injected positionally; overrides
            the annotated constructor or keyword-only parameters. A function
            receives them ahead of (invoker, arguments)
    """

    def decorator(target: F) -> F:
        return _attach(
            target,
            CapabilityMarker(
                kind=CapabilityKind.COMMAND,
                identity=name,
                options={
                    "aliases": aliases,
                    "permission": permission,
                    "description": description,
                    "asynchronous": asynchronous,
                },
                requires=_requires(requires),
            ),
        )

    return decorator


def listener(
    event: Any,
    *,
    priority: EventPriority | str | int = EventPriority.NORMAL,
    ignore_cancelled: bool = False,
    identity: str | None = None,
    requires: Iterable[Any] | None = None,
) -> Callable[[F], F]:
    """
    Declare an event listener.

    Args:
        event: Event class to subscribe to
        priority: Host-side ordering; an EventPriority, its name or its value
        ignore_cancelled: Skip events already cancelled by earlier listeners
        identity: Explicit identity; defaults to "<module>.<qualname>:<EventName>"
        requires: Explicit dependency keys, injected positionally; a function
            receives them ahead of the event
    """

    def decorator(target: F) -> F:
        return _attach(
            target,
            CapabilityMarker(
                kind=CapabilityKind.LISTENER,
                identity=identity,
                options={
                    "event": event,
                    "priority": priority,
                    "ignore_cancelled": ignore_cancelled,
                },
                requires=_requires(requires),
            ),
        )

    return decorator


def config_schema(key: str, *, section: str | None = None) -> Callable[[F], F]:
    """
    Declare a configuration schema backed by a pydantic model.

    Args:
        key: Schema identity; also the default section name
        section: Section of the plugin config that populates the schema
    """

    def decorator(target: F) -> F:
        return _attach(
            target,
            CapabilityMarker(
                kind=CapabilityKind.CONFIG_SCHEMA,
                identity=key,
                options={"section": section},
            ),
        )

    return decorator
