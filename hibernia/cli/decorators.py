"""
Click decorators shared by hibernia CLI commands.

- plugin_options: --path and --config, common to every command that loads
  plugin code
- handle_errors: turns HiberniaException into an error line and exit code
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import click

from ..core.exceptions import HiberniaException

F = TypeVar("F", bound=Callable[..., Any])


def plugin_options(f: F) -> F:
    """Add --path (repeatable) and --config options.

    Usage:
        @click.command()
        @click.argument("targets", nargs=-1, required=True)
        @plugin_options
        @click.pass_obj
        def scan(ctx, targets, paths, config_path): ...
    """
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Settings file (default: hibernia.toml or pyproject.toml found from cwd)",
    )(f)
    f = click.option(
        "--path",
        "paths",
        multiple=True,
        type=click.Path(exists=True, file_okay=False),
        help="Directory to prepend to the import path (repeatable)",
    )(f)
    return f


def handle_errors(f: F) -> F:
    """Report a HiberniaException as 'Error: ...' and exit with its exit code."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except HiberniaException as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(e.exit_code) from e

    return wrapper  # type: ignore[return-value]
