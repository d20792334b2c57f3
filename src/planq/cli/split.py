"""Dual-pane session command."""
import sys

import click

from ..config import get_config
from ..tui.app import run_tui


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


@click.command()
@click.option('--left', default=None, help='Command line for the left pane')
@click.option('--right', default=None, help='Command line for the right pane')
def split(left, right):
    """Run two commands side by side in one terminal.

    Ctrl+A Tab switches the focused pane, Ctrl+A q quits and Ctrl+A Ctrl+A
    sends a literal Ctrl+A.
    """
    if not _is_interactive():
        click.echo("split needs an interactive terminal", err=True)
        raise click.Abort()

    try:
        current = get_config()
    except ValueError as e:
        raise click.ClickException(f"invalid configuration: {e}") from e

    error = run_tui(left, right, config=current)
    if error is not None:
        raise click.ClickException(f"running TUI: {error}")
