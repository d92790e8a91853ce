"""
Click context extension for hibernia CLI.

Provides HiberniaContext dataclass that holds hibernia-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

import importlib
import sys
from dataclasses import dataclass, field
from pathlib import Path

from ..core.settings import HiberniaSettings, load_settings


@dataclass
class HiberniaContext:
    """Extended context passed through Click command chain.

    Attributes:
        cwd: Current working directory; config discovery starts here
        import_paths: Directories added to sys.path for plugin code
    """

    cwd: Path
    import_paths: list[Path] = field(default_factory=list)

    @classmethod
    def create(cls, cwd: Path | None = None) -> HiberniaContext:
        """Create a HiberniaContext for the current environment."""
        return cls(cwd=cwd or Path.cwd())

    def add_import_paths(self, paths: tuple[str, ...] | list[str]) -> None:
        """Prepend directories to sys.path so plugin modules can be imported."""
        for raw in reversed(list(paths)):
            path = Path(raw).resolve()
            if str(path) not in sys.path:
                sys.path.insert(0, str(path))
            self.import_paths.insert(0, path)
        if paths:
            importlib.invalidate_caches()

    def load_settings(self, config_path: str | None = None) -> HiberniaSettings:
        """Settings from an explicit file, or discovered from cwd upward.

        Raises:
            ConfigFileError: If the config file cannot be read or parsed
            ConfigValidationError: If a setting has an invalid value
        """
        return load_settings(
            config_path=Path(config_path) if config_path else None,
            start_dir=self.cwd,
        )
