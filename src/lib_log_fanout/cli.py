"""Click command line interface for emitting records from configuration.

Purpose
-------
Let operators and smoke tests push a record through configured sinks without
writing Python: ``lib_log_fanout emit --config logging.toml "message"``.

Contents
--------
* :func:`cli` - root group (``--version``, ``--use-dotenv``).
* :func:`cli_info` / :func:`cli_emit` - subcommands.
* :func:`main` - test-friendly runner returning the exit code.

System Role
-----------
Presentation layer only: it parses options, loads configuration through
:mod:`lib_log_fanout.config` and delegates to
:func:`lib_log_fanout.registry.create_logger`.
"""

from __future__ import annotations

import asyncio
import os
from typing import Sequence

import click

from . import __init__conf__
from . import config as log_config
from .domain.errors import ConfigurationError, DeliveryError
from .domain.levels import LogLevel
from .logger import Logger
from .registry import create_logger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_LEVEL_NAMES = [level.severity for level in LogLevel]


def summary_info() -> str:
    """Return the metadata banner shown by ``info``."""

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


def _parse_fields(pairs: Sequence[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a field map.

    Examples
    --------
    >>> _parse_fields(["code=42", "region = eu"])
    {'code': '42', 'region': 'eu'}
    """
    fields: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--field")
        fields[key.strip()] = value.strip()
    return fields


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help="Load environment variables from the nearest .env before running commands.",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Root command; prints the banner when no subcommand is given."""

    if log_config.should_use_dotenv(explicit=use_dotenv, env_value=os.getenv(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("emit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="TOML or JSON file describing the logger and its sinks.",
)
@click.option("--level", type=click.Choice(_LEVEL_NAMES), default="info", show_default=True)
@click.option("--name", default=None, help="Override the configured logger name.")
@click.option("--field", "field_pairs", multiple=True, metavar="KEY=VALUE", help="Extra record field (repeatable).")
@click.argument("message")
def cli_emit(config_path: str, level: str, name: str | None, field_pairs: tuple[str, ...], message: str) -> None:
    """Emit MESSAGE once through every configured sink."""

    fields = _parse_fields(field_pairs)
    try:
        config = log_config.load_config(config_path)
        if name:
            config = log_config.with_name(config, name)
        logger = create_logger(config)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        asyncio.run(_emit(logger, LogLevel.from_name(level), message, fields))
    except DeliveryError as exc:
        raise click.ClickException(str(exc)) from exc


async def _emit(logger: Logger, level: LogLevel, message: str, fields: dict[str, str]) -> None:
    try:
        await logger.log(level, fields, message)
    finally:
        await logger.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click command in a test-friendly manner.

    Returns
    -------
    int
        ``0`` on success, ``2`` for usage/configuration errors and ``1`` when
        a sink failed to deliver.
    """
    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, standalone_mode=False)
    except click.exceptions.Exit as exit_request:
        return exit_request.exit_code
    except click.ClickException as error:
        error.show()
        return error.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return 0


__all__ = ["cli", "main", "summary_info"]
