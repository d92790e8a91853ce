"""
Capability scanner.

Walks a plugin's code units, reads the markers attached to their classes
and functions, validates each declaration and turns it into a
CapabilityDescriptor. A pass never stops at the first defect: every
ScanError of the pass is collected and reported together.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from .discovery import CodeUnit, CodeUnitSource
from .exceptions import ScanError
from .interfaces.config import IConfigSource
from .interfaces.logger import ILogger
from .introspection import (
    accepts_positional,
    constructor_dependencies,
    keyword_dependencies,
    method_accepts_positional,
)
from .markers import CapabilityMarker, markers_of
from .models.capability import (
    CapabilityDescriptor,
    CapabilityKind,
    CommandMetadata,
    ConfigSchemaMetadata,
    Dependency,
    EventPriority,
    ListenerMetadata,
)

COMMAND_METHOD = "execute"
LISTENER_METHOD = "handle"


class _Invalid(Exception):
    """A declaration problem; converted into a ScanError by the scanner."""

    def __init__(self, reason: str, identity: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.identity = identity


@dataclass
class ScanResult:
    """Everything one scan pass found."""

    descriptors: list[CapabilityDescriptor] = field(default_factory=list)
    errors: list[ScanError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def of_kind(self, kind: CapabilityKind) -> list[CapabilityDescriptor]:
        """Descriptors of one kind, in discovery order."""
        return [d for d in self.descriptors if d.kind == kind]


def _label(value: Any, what: str) -> str:
    """Validate a command label or config key: non-empty, no whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise _Invalid(f"{what} must be a non-empty string, got {value!r}")
    if any(ch.isspace() for ch in value.strip()):
        raise _Invalid(f"{what} must not contain whitespace, got {value!r}")
    return value.strip()


def _qualname(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


class Scanner:
    """
    Extracts capability descriptors from code units.

    `declarations()` is the lazy, restartable sequence; `scan()` runs one
    full pass and applies the cross-declaration checks (duplicate identities
    and colliding command labels).
    """

    def __init__(self, logger: ILogger | None = None) -> None:
        if logger is None:
            from ..services.logging import NullLogger

            logger = NullLogger()
        self.logger = logger

    def declarations(
        self, *sources: CodeUnitSource
    ) -> Iterator[CapabilityDescriptor | ScanError]:
        """
        Lazily yield a descriptor or a ScanError for every marker found.

        Each call walks the sources again, so the sequence can be restarted
        and yields the same items for the same code.
        """
        order = 0
        for source in sources:
            for unit in source.units():
                try:
                    members = unit.members()
                except Exception as e:
                    self.logger.error("Failed to load code unit %s: %s", unit.name, e)
                    yield ScanError(
                        f"Failed to load code unit {unit.name}: {e}",
                        source_unit=unit.name,
                        cause=e,
                    )
                    continue

                self.logger.debug("Scanning %s (%d members)", unit.name, len(members))
                for member in members:
                    for marker in markers_of(member):
                        yield self._describe(unit, member, marker, order)
                        order += 1

    def scan(self, *sources: CodeUnitSource) -> ScanResult:
        """Run one full scan pass over the sources."""
        result = ScanResult()
        identities: set[tuple[CapabilityKind, str]] = set()
        labels: dict[str, str] = {}

        for item in self.declarations(*sources):
            if isinstance(item, ScanError):
                result.errors.append(item)
                # An invalid declaration still claims its identity
                if item.kind is not None and item.identity is not None:
                    identities.add((CapabilityKind(item.kind), item.identity))
                continue

            if (item.kind, item.identity) in identities:
                result.errors.append(
                    ScanError(
                        f"Duplicate {item.kind.value} identity '{item.identity}'",
                        source_unit=item.source_unit,
                        identity=item.identity,
                        kind=item.kind.value,
                    )
                )
                continue

            if item.kind == CapabilityKind.COMMAND:
                clashes = [
                    label
                    for label in item.metadata.labels
                    if labels.get(label, item.identity) != item.identity
                ]
                if clashes:
                    for label in clashes:
                        result.errors.append(
                            ScanError(
                                f"Command label '{label}' of '{item.identity}' is already "
                                f"used by command '{labels[label]}'",
                                source_unit=item.source_unit,
                                identity=item.identity,
                                kind=item.kind.value,
                            )
                        )
                    continue
                for label in item.metadata.labels:
                    labels[label] = item.identity

            identities.add((item.kind, item.identity))
            result.descriptors.append(item)

        if result.errors:
            self.logger.error(
                "Scan found %d declaration error(s) in %d capability(ies)",
                len(result.errors),
                len(result.descriptors) + len(result.errors),
            )
        else:
            self.logger.debug("Scan found %d capability(ies)", len(result.descriptors))
        return result

    # -------------------------------------------------------------------------
    # Per-declaration validation
    # -------------------------------------------------------------------------

    def _describe(
        self, unit: CodeUnit, target: Any, marker: CapabilityMarker, order: int
    ) -> CapabilityDescriptor | ScanError:
        source_unit = f"{unit.name}:{_qualname(target)}"
        builder = {
            CapabilityKind.COMMAND: self._describe_command,
            CapabilityKind.LISTENER: self._describe_listener,
            CapabilityKind.CONFIG_SCHEMA: self._describe_config_schema,
        }[marker.kind]

        try:
            identity, dependencies, metadata = builder(target, marker)
        except _Invalid as e:
            return ScanError(
                e.reason,
                source_unit=source_unit,
                identity=e.identity if e.identity is not None else _raw_identity(marker),
                kind=marker.kind.value,
            )

        return CapabilityDescriptor(
            kind=marker.kind,
            identity=identity,
            dependencies=dependencies,
            source_unit=source_unit,
            target=target,
            metadata=metadata,
            order=order,
        )

    def _dependencies(self, target: Any, marker: CapabilityMarker, identity: str):
        if marker.requires is not None:
            if inspect.isclass(target) and not _constructor_accepts(target, len(marker.requires)):
                raise _Invalid(
                    f"Constructor of {_qualname(target)} must accept "
                    f"{len(marker.requires)} positional dependency parameter(s)",
                    identity,
                )
            return tuple(Dependency(key=key) for key in marker.requires)
        try:
            if inspect.isclass(target):
                return constructor_dependencies(target)
            return keyword_dependencies(target)
        except TypeError as e:
            raise _Invalid(str(e), identity) from e

    def _describe_command(self, target: Any, marker: CapabilityMarker):
        options = marker.options
        name = _label(marker.identity, "Command name").lower()

        raw_aliases = options.get("aliases") or ()
        if isinstance(raw_aliases, str):
            raw_aliases = (raw_aliases,)
        aliases: list[str] = []
        for alias in raw_aliases:
            try:
                alias = _label(alias, "Command alias").lower()
            except _Invalid as e:
                raise _Invalid(e.reason, name) from e
            if alias != name and alias not in aliases:
                aliases.append(alias)

        permission = options.get("permission")
        if permission is not None and (not isinstance(permission, str) or not permission.strip()):
            raise _Invalid(
                f"Command permission must be a non-empty string, got {permission!r}", name
            )

        description = options.get("description") or ""
        if not isinstance(description, str):
            raise _Invalid(f"Command description must be a string, got {description!r}", name)

        asynchronous = options.get("asynchronous", False)
        if not isinstance(asynchronous, bool):
            raise _Invalid(f"Command asynchronous must be a bool, got {asynchronous!r}", name)

        if inspect.isclass(target):
            if not method_accepts_positional(target, COMMAND_METHOD, 2):
                raise _Invalid(
                    f"Command class {_qualname(target)} must define "
                    f"{COMMAND_METHOD}(self, invoker, arguments)",
                    name,
                )
        elif inspect.isfunction(target):
            _check_function(target, marker, 2, "(invoker, arguments)", name)
        else:
            raise _Invalid(f"Command target must be a class or function, got {target!r}", name)

        metadata = CommandMetadata(
            name=name,
            aliases=tuple(aliases),
            permission=permission.strip() if permission else None,
            description=description,
            asynchronous=asynchronous,
        )
        return name, self._dependencies(target, marker, name), metadata

    def _describe_listener(self, target: Any, marker: CapabilityMarker):
        options = marker.options
        event = options.get("event")
        if not inspect.isclass(event):
            raise _Invalid(f"Listener event type must be a class, got {event!r}")

        identity = marker.identity
        if identity is None:
            module = getattr(target, "__module__", None) or "?"
            identity = f"{module}.{_qualname(target)}:{event.__qualname__}"
        elif not isinstance(identity, str) or not identity.strip():
            raise _Invalid(f"Listener identity must be a non-empty string, got {identity!r}")
        identity = identity.strip()

        priority = _priority(options.get("priority"), identity)

        ignore_cancelled = options.get("ignore_cancelled", False)
        if not isinstance(ignore_cancelled, bool):
            raise _Invalid(f"ignore_cancelled must be a bool, got {ignore_cancelled!r}", identity)

        if inspect.isclass(target):
            if not method_accepts_positional(target, LISTENER_METHOD, 1):
                raise _Invalid(
                    f"Listener class {_qualname(target)} must define "
                    f"{LISTENER_METHOD}(self, event)",
                    identity,
                )
        elif inspect.isfunction(target):
            _check_function(target, marker, 1, "(event)", identity)
        else:
            raise _Invalid(f"Listener target must be a class or function, got {target!r}", identity)

        metadata = ListenerMetadata(
            event=event, priority=priority, ignore_cancelled=ignore_cancelled
        )
        return identity, self._dependencies(target, marker, identity), metadata

    def _describe_config_schema(self, target: Any, marker: CapabilityMarker):
        key = _label(marker.identity, "Config schema key")

        section = marker.options.get("section")
        if section is None:
            section = key
        elif not isinstance(section, str) or not section.strip():
            raise _Invalid(f"Config section must be a non-empty string, got {section!r}", key)

        if not (inspect.isclass(target) and issubclass(target, BaseModel)):
            raise _Invalid(
                f"Config schema {_qualname(target)} must be a pydantic BaseModel subclass", key
            )

        defaults: dict[str, Any] = {}
        missing: list[str] = []
        for field_name, info in target.model_fields.items():
            if info.is_required():
                missing.append(field_name)
            else:
                defaults[field_name] = info.get_default(call_default_factory=True)
        if missing:
            raise _Invalid(
                f"Config schema {_qualname(target)} fields without a default: "
                + ", ".join(missing),
                key,
            )

        metadata = ConfigSchemaMetadata(
            key=key, section=section.strip(), backing_type=target, defaults=defaults
        )
        return key, (Dependency(key=IConfigSource),), metadata


def _check_function(
    target: Any, marker: CapabilityMarker, count: int, shape: str, identity: str
) -> None:
    """
    Check a handler function's signature.

    Keys listed in `requires` are bound to the leading positional parameters,
    ahead of the host's arguments. Keyword-only parameters are injection
    points unless `requires` is given, in which case they must have defaults.
    """
    name = f"{marker.kind.value.capitalize()} function {_qualname(target)}"
    if marker.requires is None:
        if not accepts_positional(target, count):
            raise _Invalid(f"{name} must accept {shape}", identity)
        return

    leading = len(marker.requires)
    if not accepts_positional(target, leading + count):
        raise _Invalid(
            f"{name} must accept {leading} required dependency parameter(s) "
            f"followed by {shape}",
            identity,
        )
    unfilled = [
        p.name
        for p in inspect.signature(target).parameters.values()
        if p.kind == inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
    ]
    if unfilled:
        raise _Invalid(
            f"{name} declares requires, so keyword-only parameters need "
            f"defaults: {', '.join(unfilled)}",
            identity,
        )


def _raw_identity(marker: CapabilityMarker) -> str | None:
    identity = marker.identity
    if identity is None:
        return None
    return identity if isinstance(identity, str) else repr(identity)


def _priority(value: Any, identity: str) -> EventPriority:
    if isinstance(value, EventPriority):
        return value
    if isinstance(value, str) and value.upper() in EventPriority.__members__:
        return EventPriority[value.upper()]
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return EventPriority(value)
        except ValueError:
            pass
    raise _Invalid(f"Listener priority must be an EventPriority, got {value!r}", identity)


def _constructor_accepts(cls: type, count: int) -> bool:
    if cls.__init__ is object.__init__:
        return count == 0
    return accepts_positional(cls.__init__, count, skip=1)
