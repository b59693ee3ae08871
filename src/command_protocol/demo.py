"""Playground demo for the command protocol."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .command import CommandContext, ExecutableCommand
from .messages import CommandMessage, InputMessage, OutputMessage
from .protocol import CommandProtocol

logger = logging.getLogger(__name__)


class EchoCommand(ExecutableCommand):
    """Echoes its arguments back."""

    name = "echo"

    async def run(self, msg: CommandMessage, context: CommandContext | None = None) -> Any:
        return f"ECHO: {' '.join(msg.argv)}"


def upper(msg: CommandMessage, context: CommandContext) -> list[str]:
    """Function command returning its arguments upper-cased."""
    return [token.upper() for token in msg.argv]


async def run_command_demo(
    echo: Callable[[str], Any] = print,
    value: str = "echo hello universe",
) -> OutputMessage:
    """Run EchoCommand through a protocol and report each step via ``echo``."""
    protocol = CommandProtocol(command=EchoCommand(), db={}, logger=logger)

    message = InputMessage(value=value)
    echo(f"Input: {message.value}")
    echo(f"Protocol accepts: {protocol.accepts(message)}")

    output = await protocol.process(message)

    echo(f"Result:\n{output.model_dump_json(indent=2)}")
    echo(f"History length: {len(protocol.history)}")
    return output
