"""Transports feeding input messages into a CommandProtocol."""

from .stdio_adapter import StdioProtocolAdapter

__all__ = ["StdioProtocolAdapter"]
