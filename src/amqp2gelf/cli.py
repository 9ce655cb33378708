"""Click command line for amqp2gelf.

Contents
--------
* :func:`cli` - root group (``--version``, ``--traceback``, ``--use-dotenv``).
* ``info`` - print the metadata banner.
* ``run`` - start the bridge with CLI/env/default configuration.
* :func:`main` - entry point delegating to :func:`lib_cli_exit_tools.run_cli`.
"""

from __future__ import annotations

import os
from typing import Sequence

import click
import lib_cli_exit_tools

from . import __init__conf__
from . import config as bridge_config
from .adapters.console import configure_logging
from .runtime import run_bridge

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _explicit(ctx: click.Context, name: str, value):
    """Return ``value`` when the user passed ``name``; ``None`` when click used the default."""

    if ctx.get_parameter_source(name) in (None, click.core.ParameterSource.DEFAULT):
        return None
    return value


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
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full tracebacks for errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load variables from the nearest .env first (env toggle {bridge_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Root command storing global flags."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    explicit = _explicit(ctx, "use_dotenv", use_dotenv)
    if bridge_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(bridge_config.DOTENV_ENV_VAR)):
        bridge_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("run", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--uri", help=f"AMQP URI  [default: {bridge_config.DEFAULT_URI}]")
@click.option("--queue", help=f"Durable AMQP queue name  [default: {bridge_config.DEFAULT_QUEUE}]")
@click.option("--server", help=f"Graylog2 server  [default: {bridge_config.DEFAULT_SERVER}]")
@click.option("--port", type=click.IntRange(1, 65535), help=f"Graylog2 GELF/UDP port  [default: {bridge_config.DEFAULT_PORT}]")
@click.option(
    "--compression",
    type=click.Choice(["gzip", "zlib", "none"], case_sensitive=False),
    help=f"GELF payload compression  [default: {bridge_config.DEFAULT_COMPRESSION}]",
)
@click.option(
    "--strict-renames",
    is_flag=True,
    default=False,
    help="Reject messages whose reserved-field rename would overwrite an existing key.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output.")
@click.pass_context
def cli_run(
    ctx: click.Context,
    uri: str | None,
    queue: str | None,
    server: str | None,
    port: int | None,
    compression: str | None,
    strict_renames: bool,
    verbose: bool,
) -> None:
    """Consume the queue and forward every message to Graylog."""

    try:
        settings = bridge_config.build_settings(
            uri=uri,
            queue=queue,
            server=server,
            port=port,
            compression=compression.lower() if compression else None,
            strict_renames=_explicit(ctx, "strict_renames", strict_renames),
            verbose=_explicit(ctx, "verbose", verbose),
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    configure_logging(verbose=settings.verbose)
    ctx.exit(run_bridge(settings))


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code, restoring traceback preferences afterwards."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
