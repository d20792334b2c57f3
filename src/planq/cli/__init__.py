#!/usr/bin/env python3
"""Main CLI entry point for planq."""
import os

import click

from .config import config
from .split import split


@click.group()
@click.option('--log-level', default=None, type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.version_option(package_name="planq")
def cli(log_level):
    """Parallel AI-agent work sessions."""
    if log_level:
        os.environ['PLANQ_LOGGING_LEVEL'] = log_level


cli.add_command(split)
cli.add_command(config)


if __name__ == "__main__":
    cli()
