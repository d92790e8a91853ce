"""
Native Click implementation of the scan command.

Usage: hibernia scan TARGET...
"""

from __future__ import annotations

import click

from ...core.bootstrap import unit_sources
from ...core.scanner import Scanner
from ...presenters.report import format_scan_result
from ...services.logging import HiberniaLogger
from ..context import HiberniaContext
from ..decorators import handle_errors, plugin_options


@click.command()
@click.argument("targets", nargs=-1, required=True)
@plugin_options
@click.pass_obj
@handle_errors
def scan(
    ctx: HiberniaContext,
    targets: tuple[str, ...],
    paths: tuple[str, ...],
    config_path: str | None,
) -> None:
    """Scan modules or packages and list their declared capabilities.

    Capabilities are shown in registration order. Every declaration error
    found is listed; the exit code is 1 when there is any.

    \b
    Examples:
        hibernia scan economy_plugin
        hibernia scan --path src economy_plugin.commands
    """
    ctx.add_import_paths(paths)
    settings = ctx.load_settings(config_path)
    logger = HiberniaLogger.from_config(settings.logging, "cli")

    result = Scanner(logger).scan(*unit_sources(targets, settings))
    for line in format_scan_result(result):
        click.echo(line)

    if not result.ok:
        raise SystemExit(1)
