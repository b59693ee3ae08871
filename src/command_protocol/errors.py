"""Error types for the command protocol.

Only configuration errors escape the protocol. Everything raised while a
command is processed is captured and returned inside an OutputMessage.
"""

from __future__ import annotations


class ProtocolError(Exception):
    """Base class for command protocol errors."""

    pass


class ConfigurationError(ProtocolError, ValueError):
    """Raised when a CommandProtocol is built without its required parameters."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"CommandProtocol: missing {', '.join(self.missing)}")


class CommandNotImplementedError(ProtocolError, NotImplementedError):
    """Raised by ExecutableCommand.run() when a subclass does not override it."""

    pass


class HandlerLoadError(ProtocolError):
    """Raised when a handler spec (``module:attr``) cannot be imported."""

    pass
