"""Command handlers.

A command is the pluggable unit of work a CommandProtocol dispatches to.
Two shapes are supported:

1. Structured commands: subclasses of ExecutableCommand overriding ``run``
2. Callable commands: plain functions (sync or async) called as
   ``fn(message, context)``

Both are normalized to ExecutableCommand by ``as_command`` so the protocol
only ever calls ``run``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypedDict, TypeVar, runtime_checkable

from .errors import CommandNotImplementedError

if TYPE_CHECKING:
    from .messages import CommandMessage

UNKNOWN_COMMAND_NAME = "unknown"

F = TypeVar("F", bound=Callable[..., Any])


class CommandContext(TypedDict):
    """Context handed to every command invocation."""

    db: Any


@runtime_checkable
class SupportsRun(Protocol):
    """Anything exposing a ``run(message, context)`` method."""

    def run(self, msg: CommandMessage, context: CommandContext) -> Any:
        """Execute the command."""
        ...


class ExecutableCommand:
    """Base class for structured commands.

    Subclasses must override ``run``. The command name defaults to the class
    name unless a ``name`` class attribute (or constructor argument) is set.

    Example:
        class Echo(ExecutableCommand):
            name = "echo"

            async def run(self, msg, context):
                return " ".join(msg.argv)
    """

    name: str | None = None

    def __init__(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name

    async def run(self, msg: CommandMessage, context: CommandContext | None = None) -> Any:
        """Execute the command.

        Args:
            msg: Parsed command message; ``msg.argv`` holds the arguments only
            context: Execution context, e.g. ``{"db": db}``

        Raises:
            CommandNotImplementedError: Always, subclasses must override this method
        """
        raise CommandNotImplementedError("Method .run() must be overwritten")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={resolve_command_name(self)!r})"


class FunctionCommand(ExecutableCommand):
    """Adapts a callable to the ExecutableCommand interface."""

    def __init__(self, func: Any, name: str | None = None) -> None:
        super().__init__(name or resolve_command_name(func))
        self.func = func

    async def run(self, msg: CommandMessage, context: CommandContext | None = None) -> Any:
        result = self.func(msg, context)
        if inspect.isawaitable(result):
            result = await result
        return result


def resolve_command_name(command: Any) -> str:
    """Resolve the routing name of a command.

    Resolution order: explicit ``name`` attribute, then the function name for
    plain callables or the type name for instances, then ``"unknown"``.
    """
    explicit = getattr(command, "name", None)
    if isinstance(explicit, str) and explicit:
        return explicit

    if callable(command) and not isinstance(command, ExecutableCommand):
        func_name = getattr(command, "__name__", None)
        if isinstance(func_name, str) and func_name:
            return func_name

    return type(command).__name__ or UNKNOWN_COMMAND_NAME


def as_command(command: Any) -> ExecutableCommand:
    """Normalize any supported command shape to an ExecutableCommand.

    Values that are neither runnable nor callable are still wrapped; calling
    them fails at run time, where the protocol reports the error.
    """
    if isinstance(command, ExecutableCommand):
        return command
    if isinstance(command, SupportsRun):
        return FunctionCommand(command.run, name=resolve_command_name(command))
    return FunctionCommand(command, name=resolve_command_name(command))


def command_name(name: str) -> Callable[[F], F]:
    """Decorator giving a function command an explicit routing name.

    Example:
        @command_name("greet")
        async def say_hello(msg, context):
            return "hello"
    """

    def decorator(func: F) -> F:
        func.name = name  # type: ignore[attr-defined]
        return func

    return decorator
