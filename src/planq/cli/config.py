"""Configuration commands."""
import click

from ..config import dump_config_env, dump_config_toml, get_config


@click.group()
def config():
    """Inspect planq configuration."""
    pass


@config.command("show")
@click.option('--format', 'fmt', default='toml', type=click.Choice(['toml', 'env']),
              help='Output format')
def show(fmt):
    """Show the effective configuration."""
    current = get_config()
    if fmt == 'env':
        click.echo(dump_config_env(current))
    else:
        click.echo(dump_config_toml(current), nl=False)
