"""
Native Click implementation of the check command.

Usage: hibernia check TARGET... [--config FILE] [--name NAME]
"""

from __future__ import annotations

import click

from ...core.bootstrap import bootstrap, create_context
from ...core.interfaces.logger import ILogger
from ...core.lifecycle import LifecycleController
from ...hosts.memory import InMemoryHost
from ...presenters.report import format_shutdown_report, format_startup_report
from ..context import HiberniaContext
from ..decorators import handle_errors, plugin_options


@click.command()
@click.argument("targets", nargs=-1, required=True)
@plugin_options
@click.option("--name", default="plugin", show_default=True, help="Plugin instance name")
@click.pass_obj
@handle_errors
def check(
    ctx: HiberniaContext,
    targets: tuple[str, ...],
    paths: tuple[str, ...],
    config_path: str | None,
    name: str,
) -> None:
    """Start and stop a plugin against an in-memory host.

    Runs the full startup pass (scan, resolve, register) with a container
    bootstrapped from settings, prints the startup report, then stops the
    plugin and prints the shutdown report. Exits 1 when startup fails.

    \b
    Examples:
        hibernia check economy_plugin
        hibernia check economy_plugin --config hibernia.toml --name economy
    """
    ctx.add_import_paths(paths)
    settings = ctx.load_settings(config_path)
    container = bootstrap(settings, plugin=name)
    host = InMemoryHost(logger=container.resolve(ILogger))

    controller = LifecycleController()
    report = controller.start(create_context(name, targets, host, settings, container))
    for line in format_startup_report(report):
        click.echo(line)

    if not report.success:
        raise SystemExit(1)

    click.echo("")
    shutdown = controller.stop()
    for line in format_shutdown_report(shutdown):
        click.echo(line)
