"""command-protocol CLI.

Usage:
    command-protocol demo                          # Run the echo demo
    command-protocol run                           # Echo command over stdio
    command-protocol run --handler myapp.cmds:Ping # Custom command over stdio
    command-protocol config                        # Show effective settings
    command-protocol config --format json
"""

from __future__ import annotations

import asyncio
import importlib
import json
import logging
from typing import Any

import click

from .config import ProtocolSettings, configure_logging
from .errors import HandlerLoadError
from .protocol import CommandProtocol

logger = logging.getLogger(__name__)

FORMAT_TABLE = "table"
FORMAT_JSON = "json"

DEFAULT_HANDLER = "command_protocol.demo:EchoCommand"


def load_command(spec: str) -> Any:
    """Import a command from a ``module:attr`` spec.

    Classes are instantiated with no arguments; functions and instances are
    returned as-is.

    Raises:
        HandlerLoadError: If the spec is malformed or cannot be imported
    """
    module_path, sep, attr = spec.partition(":")
    if not sep or not module_path or not attr:
        raise HandlerLoadError(f"Handler must look like 'module:attr', got {spec!r}")

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise HandlerLoadError(f"Cannot import module {module_path!r}: {e}") from e

    try:
        target = getattr(module, attr)
    except AttributeError as e:
        raise HandlerLoadError(f"Module {module_path!r} has no attribute {attr!r}") from e

    if isinstance(target, type):
        return target()
    return target


@click.group()
@click.option("--log-level", default=None, help="Logging level (env: COMMAND_PROTOCOL_LOG_LEVEL)")
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """Command protocol - dispatch text commands to a single handler."""
    try:
        settings = ProtocolSettings.from_env(log_level=log_level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level") from e
    configure_logging(settings)
    ctx.obj = settings


@main.command()
@click.argument("value", default="echo hello universe")
def demo(value: str) -> None:
    """Run the echo command demo on VALUE."""
    from .demo import run_command_demo

    click.echo("CommandProtocol Demo")
    asyncio.run(run_command_demo(click.echo, value))
    click.echo("Demo complete!")


@main.command()
@click.option("--handler", "handler_spec", default=None, help="Command to run, as module:attr")
@click.pass_obj
def run(settings: ProtocolSettings, handler_spec: str | None) -> None:
    """Read commands from stdin and write JSON outputs to stdout."""
    from .transport.stdio_adapter import StdioProtocolAdapter

    spec = handler_spec or settings.handler or DEFAULT_HANDLER
    try:
        command = load_command(spec)
    except HandlerLoadError as e:
        raise click.ClickException(str(e)) from e

    protocol = CommandProtocol(command=command, db={}, logger=logger)
    click.echo(f"Running command {protocol.command_name!r} on stdio", err=True)

    adapter = StdioProtocolAdapter(protocol)
    try:
        asyncio.run(adapter.run())
    except KeyboardInterrupt:
        click.echo("\nShutting down", err=True)
    finally:
        adapter.detach()


@main.command("config")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TABLE, FORMAT_JSON]),
    default=FORMAT_TABLE,
    help="Output format",
)
@click.pass_obj
def show_config(settings: ProtocolSettings, output_format: str) -> None:
    """Show effective settings."""
    data = settings.model_dump()
    data["handler"] = settings.handler or DEFAULT_HANDLER

    if output_format == FORMAT_JSON:
        click.echo(json.dumps(data, indent=2))
        return

    for key, value in data.items():
        click.echo(f"{key:<12} {value}")


if __name__ == "__main__":
    main()
