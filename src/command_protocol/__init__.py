"""Minimal command-dispatch protocol.

Receives a text input message, checks whether the configured command should
handle it, runs the command and normalizes the result into an OutputMessage.
"""

from .command import (
    CommandContext,
    ExecutableCommand,
    FunctionCommand,
    as_command,
    command_name,
    resolve_command_name,
)
from .errors import CommandNotImplementedError, ConfigurationError, HandlerLoadError, ProtocolError
from .messages import (
    PRIORITY_CRITICAL,
    PRIORITY_NORMAL,
    CommandMessage,
    HistoryEntry,
    InputMessage,
    OutputMessage,
)
from .protocol import CommandProtocol

__version__ = "0.1.0"

__all__ = [
    "CommandContext",
    "CommandMessage",
    "CommandNotImplementedError",
    "CommandProtocol",
    "ConfigurationError",
    "ExecutableCommand",
    "FunctionCommand",
    "HandlerLoadError",
    "HistoryEntry",
    "InputMessage",
    "OutputMessage",
    "PRIORITY_CRITICAL",
    "PRIORITY_NORMAL",
    "ProtocolError",
    "as_command",
    "command_name",
    "resolve_command_name",
]
