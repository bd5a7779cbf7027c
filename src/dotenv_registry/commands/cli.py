"""Command line interface: ``dotenv-registry``."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from .._casters import to_string
from .._registry import DEFAULT_CONFIG_FILE, DotEnv
from .._types import ConfigError


@click.group("dotenv-registry")
@click.option(
    "--file",
    "-f",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Path of the dotenv file.",
)
@click.option("--prefix", default="", help="Prefix applied to every key.")
@click.pass_context
def cli(context: click.Context, config_file: Path, prefix: str) -> None:
    """Read and update dotenv configuration files."""
    context.obj = DotEnv(config_file, prefix=prefix)


def _load(env: DotEnv, *, optional: bool = False) -> None:
    try:
        env.load(optional=optional)
    except ConfigError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


@cli.command("get")
@click.argument("key")
@click.pass_obj
def get_command(env: DotEnv, key: str) -> None:
    """Print the value of KEY (environment first, then the file)."""
    _load(env, optional=True)
    value, found = env.lookup(key)
    if not found:
        click.secho(f"{key} is not set", fg="yellow", err=True)
        sys.exit(1)
    click.echo(to_string(value))


@cli.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_command(env: DotEnv, key: str, value: str) -> None:
    """Set KEY to VALUE and save the file.

    Examples:\n
        dotenv-registry set PORT 8080\n
        dotenv-registry -f config/app.env --prefix app set DEBUG true\n
    """
    _load(env, optional=True)
    try:
        env.write(key, value)
    except ConfigError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


@cli.command("list")
@click.pass_obj
def list_command(env: DotEnv) -> None:
    """Print every entry of the file as KEY=value."""
    _load(env)
    for key, value in env.to_dict().items():
        click.echo(f"{key}={to_string(value)}")


@cli.command("check")
@click.pass_obj
def check_command(env: DotEnv) -> None:
    """Decode the file and report syntax errors."""
    _load(env)
    click.secho(f"OK ({len(env.to_dict())} entries)", fg="green")


def main() -> None:
    cli()
