"""
Output presenters for the hibernia CLI.
"""

from .report import (
    format_descriptors,
    format_scan_result,
    format_shutdown_report,
    format_startup_report,
)

__all__ = [
    "format_descriptors",
    "format_scan_result",
    "format_shutdown_report",
    "format_startup_report",
]
