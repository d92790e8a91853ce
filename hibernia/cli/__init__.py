"""
Click-based CLI for hibernia.

Developer tooling for plugin authors: list the capabilities a plugin
declares, and dry-run its full lifecycle against an in-memory host.

Usage:
    from hibernia.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

import click

from .context import HiberniaContext

# Version is loaded from package metadata
try:
    from importlib.metadata import version

    __version__ = version("hibernia-framework")
except Exception:
    __version__ = "0.1.0"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="hibernia")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """hibernia - declarative capability bootstrap for hosted plugins

    \b
    Commands:
        hibernia scan TARGET...    List declared capabilities and errors
        hibernia check TARGET...   Start and stop against an in-memory host
    """
    ctx.ensure_object(dict)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    else:
        ctx.obj = HiberniaContext.create()


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


__all__ = [
    "HiberniaContext",
    "__version__",
    "cli",
    "register_commands",
]
