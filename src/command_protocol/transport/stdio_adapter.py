"""stdio adapter for a CommandProtocol.

Reads input messages from stdin, one per line, and writes each
OutputMessage to stdout as a JSON line.

Wire format (UTF-8, LF newlines on output):
- Input (stdin): either raw command text, e.g. ``echo hello``, or an
  InputMessage JSON object, e.g. ``{"value": "echo hello"}``
- Output (stdout): ``{"content": [...], "priority": 0, "meta": {...}, "error": null}``
- Errors (stderr): ``ERROR: ...`` for unparsable or rejected input

Example session:
    → echo hello universe
    ← {"content":["ECHO: hello universe"],"priority":0,"meta":{"source":"echo"},"error":null}
    → ping
    ! ERROR: Command not accepted: ping
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
import sys
from typing import TYPE_CHECKING, BinaryIO

from ..messages import InputMessage, OutputMessage

if TYPE_CHECKING:
    from ..protocol import CommandProtocol

logger = logging.getLogger(__name__)

ENCODING = "utf-8"

NEWLINE = "\n"


class StdioProtocolAdapter:
    """Line-oriented stdio front end for a single CommandProtocol.

    All dispatch logic stays in CommandProtocol; this adapter only handles
    parsing, serialization and I/O.

    Usage:
        adapter = StdioProtocolAdapter(protocol)
        await adapter.run()  # Blocks until stdin closes
    """

    def __init__(
        self,
        protocol: CommandProtocol,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> None:
        """Initialize stdio adapter.

        Args:
            protocol: Protocol that processes accepted input
            stdin: Binary input stream (default: sys.stdin.buffer)
            stdout: Binary output stream (default: sys.stdout.buffer)
            stderr: Binary error stream (default: sys.stderr.buffer)
        """
        self._protocol = protocol
        self._reader = io.TextIOWrapper(
            stdin if stdin is not None else sys.stdin.buffer,
            encoding=ENCODING,
            errors="replace",
            newline="",
        )
        self._writer = io.TextIOWrapper(
            stdout if stdout is not None else sys.stdout.buffer,
            encoding=ENCODING,
            errors="replace",
            newline=NEWLINE,
            write_through=True,
        )
        self._error_writer = io.TextIOWrapper(
            stderr if stderr is not None else sys.stderr.buffer,
            encoding=ENCODING,
            errors="replace",
            newline=NEWLINE,
            write_through=True,
        )
        self._running = False
        self.processed = 0

    async def run(self) -> None:
        """Process lines until stdin closes."""
        self._running = True
        try:
            while self._running:
                line = await self._read_line()
                if line is None:
                    break

                line = line.strip()
                if line.startswith("\ufeff"):
                    line = line[1:].strip()
                if not line:
                    continue

                await self._process_line(line)

        except asyncio.CancelledError:
            logger.info("stdio adapter cancelled")
        except Exception as e:
            logger.exception(f"stdio adapter error: {e}")
            self._log_error(f"Fatal error: {e}")
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop after the current line."""
        self._running = False

    def detach(self) -> None:
        """Flush and release the underlying binary streams without closing them."""
        for wrapper in (self._reader, self._writer, self._error_writer):
            if not wrapper.closed:
                if wrapper.writable():
                    wrapper.flush()
                wrapper.detach()

    async def _read_line(self) -> str | None:
        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, self._reader.readline)
        return line if line else None

    async def _process_line(self, line: str) -> None:
        try:
            message = parse_input_line(line)
        except ValueError as e:
            self._log_error(f"Invalid input: {e}")
            return

        if not self._protocol.accepts(message):
            self._log_error(f"Command not accepted: {message.first_token or ''}")
            return

        output = await self._protocol.process(message)
        self.processed += 1
        self._send_output(output)

    def _send_output(self, output: OutputMessage) -> None:
        """Write an output as one JSON line; values JSON cannot hold are stringified."""
        try:
            try:
                json_str = output.model_dump_json()
            except ValueError:
                json_str = json.dumps(
                    output.model_dump(), default=str, ensure_ascii=False, separators=(",", ":")
                )
            self._writer.write(json_str + NEWLINE)
            self._writer.flush()
        except Exception as e:
            self._log_error(f"Failed to send output: {e}")

    def _log_error(self, message: str) -> None:
        logger.debug(message)
        self._error_writer.write(f"ERROR: {message}{NEWLINE}")
        self._error_writer.flush()


def parse_input_line(line: str) -> InputMessage:
    """Turn one stdin line into an InputMessage.

    Lines starting with ``{`` are validated as InputMessage JSON; anything
    else is taken as the raw command text.

    Raises:
        ValueError: If a JSON line is not a valid InputMessage
    """
    if line.startswith("{"):
        return InputMessage.model_validate_json(line.encode(ENCODING))
    return InputMessage(value=line)
