"""
Plain-text rendering of scan results and lifecycle reports for the CLI.

Every function returns lines; printing is left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..core.exceptions import HiberniaException
from ..core.models.capability import (
    CapabilityDescriptor,
    CapabilityKind,
    CommandMetadata,
    ConfigSchemaMetadata,
    ListenerMetadata,
)
from ..core.models.lifecycle import CapabilityOutcome, ShutdownReport, StartupReport
from ..core.scanner import ScanResult


def format_table(headers: list[str], rows: list[list[str]]) -> list[str]:
    """Left-aligned columns separated by two spaces.

    Examples:
        >>> format_table(["a", "b"], [["1", "22"]])
        ['a  b', '-  --', '1  22']
    """
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: list[str]) -> str:
        return "  ".join(c.ljust(widths[i]) for i, c in enumerate(cells)).rstrip()

    return [line(headers), line(["-" * w for w in widths]), *(line(r) for r in rows)]


def describe(descriptor: CapabilityDescriptor) -> str:
    """One-line summary of a descriptor's kind-specific metadata."""
    metadata = descriptor.metadata
    if isinstance(metadata, CommandMetadata):
        parts = []
        if metadata.aliases:
            parts.append("aliases=" + ",".join(metadata.aliases))
        if metadata.permission:
            parts.append(f"permission={metadata.permission}")
        if metadata.asynchronous:
            parts.append("async")
        return " ".join(parts)
    if isinstance(metadata, ListenerMetadata):
        text = f"{metadata.event.__name__} @{metadata.priority.name}"
        return text + " ignore_cancelled" if metadata.ignore_cancelled else text
    if isinstance(metadata, ConfigSchemaMetadata):
        return f"section={metadata.section} fields={len(metadata.defaults)}"
    return ""


def _kind(kind: CapabilityKind | None) -> str:
    return kind.value if kind is not None else "-"


def format_descriptors(descriptors: Iterable[CapabilityDescriptor]) -> list[str]:
    """Descriptors in registration order, as a table."""
    rows = [
        [d.kind.value, d.identity, describe(d), d.source_unit]
        for d in sorted(descriptors, key=lambda d: d.sort_key)
    ]
    if not rows:
        return ["No capabilities found."]
    return format_table(["KIND", "IDENTITY", "DETAILS", "SOURCE"], rows)


def format_errors(errors: Iterable[HiberniaException], label: str = "error") -> list[str]:
    return [f"{label}: {e}" for e in errors]


def format_scan_result(result: ScanResult) -> list[str]:
    lines = format_descriptors(result.descriptors)
    if result.errors:
        lines.append("")
        lines.append(f"{len(result.errors)} scan error(s):")
        lines.extend(format_errors(result.errors))
    return lines


def format_outcomes(outcomes: Iterable[CapabilityOutcome]) -> list[str]:
    rows = [[_kind(o.kind), o.identity, o.status.value] for o in outcomes]
    if not rows:
        return []
    return format_table(["KIND", "IDENTITY", "STATUS"], rows)


def format_startup_report(report: StartupReport) -> list[str]:
    lines = [f"Plugin '{report.plugin}': {report.state.value}"]
    lines.extend(format_outcomes(report.outcomes))
    if report.errors:
        lines.append("")
        lines.extend(format_errors(report.errors))
    if report.warnings:
        lines.append("")
        lines.extend(format_errors(report.warnings, label="warning"))
    return lines


def format_shutdown_report(report: ShutdownReport) -> list[str]:
    lines = [f"Plugin '{report.plugin}': {report.state.value}"]
    lines.extend(format_outcomes(report.outcomes))
    if report.warnings:
        lines.append("")
        lines.extend(format_errors(report.warnings, label="warning"))
    return lines
