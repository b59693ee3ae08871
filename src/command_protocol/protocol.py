"""Command protocol - gate, dispatch and normalize.

A CommandProtocol owns one command, a resource handle passed through to it
as ``context["db"]``, and an append-only history of processing attempts.

Usage:
    protocol = CommandProtocol(command=EchoCommand(), db=db, logger=logger)

    if protocol.accepts(message):
        output = await protocol.process(message)

``process`` never raises: failures come back as an OutputMessage with
``priority=PRIORITY_CRITICAL`` and the exception in ``error``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from .command import CommandContext, as_command, resolve_command_name
from .errors import ConfigurationError, ProtocolError
from .messages import (
    PRIORITY_CRITICAL,
    PRIORITY_NORMAL,
    CommandMessage,
    HistoryEntry,
    InputMessage,
    OutputMessage,
    tokenize,
)

logger = logging.getLogger(__name__)

FALLBACK_CONTENT = ("Command executed.", "(no output data)")


class CommandProtocol:
    """Runs a single configured command against incoming input messages.

    The command may be an ExecutableCommand instance, any object with a
    ``run(message, context)`` method, or a plain (sync or async) function.
    Its resolved name is used both to gate input in ``accepts`` and as
    ``meta["source"]`` on every output.

    History:
        Every ``process`` call appends one HistoryEntry before the command
        runs, so failed attempts are recorded too. Appends are serialized
        with a lock.
    """

    def __init__(self, *, command: Any = None, db: Any = None, logger: Any = None) -> None:
        """Initialize the protocol.

        Args:
            command: Command implementation (class instance or function)
            db: Resource handle passed to the command as ``context["db"]``
            logger: Logger kept for callers; the protocol itself does not call it

        Raises:
            ConfigurationError: If any parameter is missing
        """
        missing = [
            param
            for param, value in (("command", command), ("db", db), ("logger", logger))
            if value is None
        ]
        if missing:
            raise ConfigurationError(missing)

        self.command = command
        self.db = db
        self.logger = logger
        self._command_name = resolve_command_name(command)
        self._executable = as_command(command)
        self._history: list[HistoryEntry] = []
        self._history_lock = threading.Lock()

    @property
    def command_name(self) -> str:
        """Resolved routing name of the configured command."""
        return self._command_name

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        """Snapshot of all processing attempts, oldest first."""
        with self._history_lock:
            return tuple(self._history)

    def accepts(self, input: InputMessage | Mapping[str, Any]) -> bool:
        """Check whether the first token of the input names this command.

        Args:
            input: Input message (or a mapping with a ``value`` key)

        Returns:
            True if the first whitespace-delimited token equals the command
            name exactly (case-sensitive)
        """
        value = _value_of(input)
        if not value:
            return False
        tokens = tokenize(value)
        return bool(tokens) and tokens[0] == self._command_name

    async def process(self, input: InputMessage | Mapping[str, Any]) -> OutputMessage:
        """Run the command for an input message and normalize its result.

        Steps:
        1. Tokenize the raw text into a CommandMessage (argv without the name)
        2. Record the attempt in the history
        3. Run the command with ``{"db": db}`` as context, awaiting if needed
        4. Normalize the result into an OutputMessage

        Args:
            input: Input message (or a mapping validated into one)

        Returns:
            The normalized output; errors are returned, never raised
        """
        try:
            if not isinstance(input, InputMessage):
                input = InputMessage.model_validate(input)

            raw = CommandMessage.parse(tokenize(input.value))
            message = CommandMessage.from_fields(name=raw.name, args=raw.argv)

            self._record(input, message)
            logger.debug(f"Processing {message.name!r} with {len(message.argv)} args")

            context: CommandContext = {"db": self.db}
            result = await self._executable.run(message, context)

            return self._normalize(result)

        except Exception as e:
            logger.exception(f"Command {self._command_name!r} failed: {e}")
            return OutputMessage(
                content=[str(e) or type(e).__name__],
                priority=PRIORITY_CRITICAL,
                meta={"source": self._command_name},
                error=e,
            )

    def _record(self, input: InputMessage, message: CommandMessage) -> None:
        entry = HistoryEntry(input=input, message=message)
        with self._history_lock:
            self._history.append(entry)

    def _normalize(self, result: Any) -> OutputMessage:
        """Convert a raw command result into an OutputMessage.

        Precedence: string, list/tuple, object or mapping with ``content``,
        then the fixed fallback.
        """
        source = self._command_name

        if isinstance(result, str):
            return OutputMessage(content=[result.strip()], meta={"source": source})

        if isinstance(result, (list, tuple)):
            return OutputMessage(content=list(result), meta={"source": source})

        shaped = _content_fields(result)
        if shaped is not None:
            content, priority, meta, error = shaped
            if error is not None and not isinstance(error, BaseException):
                error = ProtocolError(str(error))
            return OutputMessage(
                content=content,
                priority=PRIORITY_NORMAL if priority is None else priority,
                meta={**(meta or {}), "source": source},
                error=error,
            )

        logger.debug(f"Command {source!r} returned {type(result).__name__}, using fallback")
        return OutputMessage(content=list(FALLBACK_CONTENT), meta={"source": source})


def _value_of(input: Any) -> str | None:
    if isinstance(input, Mapping):
        return input.get("value")
    return getattr(input, "value", None)


def _content_fields(result: Any) -> tuple[Any, Any, Any, Any] | None:
    """Extract (content, priority, meta, error) from a content-shaped result."""
    if isinstance(result, Mapping):
        if _is_blank(result.get("content")):
            return None
        return result["content"], result.get("priority"), result.get("meta"), result.get("error")

    content = getattr(result, "content", None)
    if _is_blank(content):
        return None
    return (
        content,
        getattr(result, "priority", None),
        getattr(result, "meta", None),
        getattr(result, "error", None),
    )


def _is_blank(content: Any) -> bool:
    """True for missing, empty-string, zero, NaN or False content.

    Empty lists and mappings still count as content.
    """
    if content is None:
        return True
    if isinstance(content, (str, bool, int, float)):
        return not content or content != content
    return False
