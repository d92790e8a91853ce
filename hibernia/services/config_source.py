"""
Config source implementations.

Serve already-parsed configuration sections to config schemas. Parsing
itself is delegated to tomllib; these classes only locate sections.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from ..core.exceptions import ConfigFileError
from ..core.interfaces.config import IConfigSource


def _walk(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Follow a dotted section name through nested tables."""
    node: Any = data
    for part in name.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return {}
        node = node[part]
    return node if isinstance(node, Mapping) else {}


class MappingConfigSource(IConfigSource):
    """Config source over an in-memory mapping."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data if data is not None else {}

    def section(self, name: str) -> Mapping[str, Any]:
        return dict(_walk(self._data, name))


class TomlConfigSource(IConfigSource):
    """
    Config source backed by a TOML file.

    The file is read on first access and cached. A missing file serves empty
    sections, so a plugin runs on schema defaults until the user creates one.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, "rb") as f:
                self._data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(
                f"Failed to parse config file: {e}", file_path=str(self.path), cause=e
            ) from e
        except OSError as e:
            raise ConfigFileError(
                f"Failed to read config file: {e}", file_path=str(self.path), cause=e
            ) from e
        return self._data

    def section(self, name: str) -> Mapping[str, Any]:
        return dict(_walk(self._load(), name))

    def reload(self) -> None:
        """Drop the cached file contents; the next access re-reads the file."""
        self._data = None
