"""
Logger implementation for hibernia internal diagnostics.

Wraps stdlib logging. Each plugin instance logs under its own child of the
"hibernia" logger, to stderr, to a rotating file, or up into the host's
logging tree.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from ..core.interfaces.logger import ILogger

if TYPE_CHECKING:
    from ..core.models.config import LoggingConfig


class HiberniaLogger(ILogger):
    """
    Logger implementation using stdlib logging.

    With no handler enabled, records propagate to the parent logger so a host
    that already configured logging receives them unchanged.
    """

    DEFAULT_LOG_FILE = Path.home() / ".hibernia" / "hibernia.log"
    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 3
    FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    LEVEL_MAP: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        plugin: str | None = None,
        level: str = "warning",
        console_enabled: bool = True,
        file_path: Path | None = None,
    ) -> None:
        """
        Initialize logger.

        Args:
            plugin: Plugin instance name; records go to "hibernia.<plugin>"
            level: Initial log level (debug, info, warning, error)
            console_enabled: Write to stderr
            file_path: Write to this rotating log file as well
        """
        name = f"hibernia.{plugin}" if plugin else "hibernia"
        self._logger = logging.getLogger(name)
        self._logger.handlers.clear()

        self._level = self.LEVEL_MAP.get(level.lower(), logging.WARNING)
        self._logger.setLevel(self._level)

        formatter = logging.Formatter(self.FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        if console_enabled:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(formatter)
            self._logger.addHandler(console)

        if file_path is not None:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=self.MAX_FILE_SIZE,
                backupCount=self.BACKUP_COUNT,
            )
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

        # Own handlers: keep records out of the host's tree to avoid duplicates
        self._logger.propagate = not self._logger.handlers

    @classmethod
    def from_config(cls, config: LoggingConfig, plugin: str | None = None) -> HiberniaLogger:
        """Build a logger from the `logging` settings section."""
        return cls(
            plugin=plugin,
            level=config.level,
            console_enabled=config.console,
            file_path=cls.DEFAULT_LOG_FILE if config.file else None,
        )

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug-level message."""
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an info-level message."""
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning-level message."""
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an error-level message."""
        self._logger.error(message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        """Set log level on the underlying logger."""
        self._level = self.LEVEL_MAP.get(level.lower(), logging.WARNING)
        self._logger.setLevel(self._level)


class NullLogger(ILogger):
    """No-op logger for testing or when logging is disabled."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
