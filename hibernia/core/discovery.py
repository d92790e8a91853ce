"""
Code-unit discovery.

Enumerates the code units (modules, or explicit groups of objects) that
belong to a plugin, from:
1. Named modules
2. A package tree, walked with pkgutil
3. Explicit object lists (builder-style declaration without module scanning)
4. Entry points contributed by external packages

Sources are lazy and restartable: every call to units() enumerates afresh,
and nothing is imported until a unit's members are requested. Import
failures surface when members() is called, so the scanner can report them
against the unit that caused them.
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from functools import partial
from types import ModuleType
from typing import Any


@dataclass(frozen=True)
class CodeUnit:
    """One unit of plugin code and a loader for its members."""

    name: str
    loader: Callable[[], Iterable[Any]]

    def members(self) -> list[Any]:
        """Load the unit and return its members in definition order."""
        return list(self.loader())


class CodeUnitSource(ABC):
    """Enumeration of a plugin's code units."""

    @abstractmethod
    def units(self) -> Iterator[CodeUnit]:
        """Yield code units in a deterministic order."""
        pass


def module_members(module: ModuleType) -> list[Any]:
    """
    Classes and functions defined in `module`, in definition order.

    Names imported from other modules are skipped so that a capability is
    discovered once, in the unit that declares it.
    """
    return [
        obj
        for obj in vars(module).values()
        if (inspect.isclass(obj) or inspect.isfunction(obj))
        and getattr(obj, "__module__", None) == module.__name__
    ]


def _load_module_members(module_name: str) -> list[Any]:
    return module_members(importlib.import_module(module_name))


def _is_private(module_name: str, root: str) -> bool:
    relative = module_name[len(root) :].lstrip(".")
    return any(part.startswith("_") for part in relative.split(".") if part)


class ModuleUnitSource(CodeUnitSource):
    """Named modules, one unit each, in the order given."""

    def __init__(self, *module_names: str) -> None:
        self.module_names = module_names

    def units(self) -> Iterator[CodeUnit]:
        for name in self.module_names:
            yield CodeUnit(name, partial(_load_module_members, name))


class PackageUnitSource(CodeUnitSource):
    """
    A package and every module below it.

    Modules are visited depth-first in name order (the order pkgutil walks
    the file system), starting with the package itself.
    """

    def __init__(self, package: str, skip_private: bool = True) -> None:
        """
        Args:
            package: Dotted name of the root package
            skip_private: Skip modules whose name has a segment starting with "_"
        """
        self.package = package
        self.skip_private = skip_private

    def units(self) -> Iterator[CodeUnit]:
        yield CodeUnit(self.package, partial(_load_module_members, self.package))

        try:
            root = importlib.import_module(self.package)
        except Exception:
            # Reported by the root unit's loader when the scanner reads it
            return

        package_path = getattr(root, "__path__", None)
        if not package_path:
            return

        failed: list[str] = []
        for info in pkgutil.walk_packages(
            package_path, prefix=f"{self.package}.", onerror=failed.append
        ):
            if self.skip_private and _is_private(info.name, self.package):
                continue
            yield CodeUnit(info.name, partial(_load_module_members, info.name))

        # Subpackages that failed to import while walking; their loaders re-raise
        for name in failed:
            if self.skip_private and _is_private(name, self.package):
                continue
            yield CodeUnit(name, partial(_load_module_members, name))


class ObjectUnitSource(CodeUnitSource):
    """
    Explicitly listed classes and functions, as a single unit.

    Usage:
        ObjectUnitSource("economy", [EconomySettings, BalanceCommand, on_join])
    """

    def __init__(self, name: str, objects: Iterable[Any]) -> None:
        self.name = name
        self.objects = tuple(objects)

    def units(self) -> Iterator[CodeUnit]:
        yield CodeUnit(self.name, lambda: self.objects)


class EntryPointUnitSource(CodeUnitSource):
    """
    Units contributed by installed packages through entry points.

    External packages can contribute capabilities by adding to pyproject.toml:

        [project.entry-points."hibernia.plugins"]
        economy = "economy_plugin.commands"
        reload = "economy_plugin.commands:ReloadCommand"

    An entry point naming a module contributes that module's members; one
    naming an object contributes the object alone.
    """

    def __init__(self, group: str = "hibernia.plugins") -> None:
        self.group = group

    def units(self) -> Iterator[CodeUnit]:
        from importlib.metadata import entry_points

        for ep in sorted(entry_points(group=self.group), key=lambda e: e.name):
            yield CodeUnit(f"{self.group}:{ep.name}", partial(self._load, ep))

    @staticmethod
    def _load(ep: Any) -> list[Any]:
        loaded = ep.load()
        if isinstance(loaded, ModuleType):
            return module_members(loaded)
        return [loaded]


class CompositeUnitSource(CodeUnitSource):
    """Several sources enumerated one after the other."""

    def __init__(self, *sources: CodeUnitSource) -> None:
        self.sources = sources

    def units(self) -> Iterator[CodeUnit]:
        for source in self.sources:
            yield from source.units()
