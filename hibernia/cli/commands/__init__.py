"""
Click command implementations for hibernia CLI.

Each module corresponds to a hibernia command (e.g., scan.py implements
'hibernia scan'). Commands are registered with the main CLI group via the
register_commands() function in hibernia.cli.
"""

from .check import check
from .scan import scan

COMMANDS = [
    check,
    scan,
]

__all__ = [
    "COMMANDS",
    "check",
    "scan",
]
