"""Message types exchanged with the command protocol.

Flow of a single call:
- InputMessage: raw text received from a caller
- CommandMessage: the tokenized command; ``argv`` never contains the command name
- HistoryEntry: what the protocol records before running the command
- OutputMessage: the normalized result envelope returned to the caller
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

PRIORITY_NORMAL = 0
PRIORITY_CRITICAL = 100


def _now() -> datetime:
    return datetime.now(UTC)


def tokenize(value: str | None) -> list[str]:
    """Split raw input on runs of whitespace, ignoring leading/trailing blanks."""
    return str(value or "").split()


class InputMessage(BaseModel):
    """Raw input received by the protocol.

    Example:
        {"value": "echo hello universe", "time": "2024-01-15T10:30:00Z"}
    """

    model_config = ConfigDict(frozen=True)

    value: str | None = None
    time: datetime = Field(default_factory=_now)

    @property
    def first_token(self) -> str | None:
        """The candidate command name, or None for blank input."""
        tokens = tokenize(self.value)
        return tokens[0] if tokens else None


class CommandMessage(BaseModel):
    """A tokenized command.

    ``name`` is the leading token of the raw input and ``argv`` holds the
    remaining tokens in order. ``args`` is the same view under the name
    handlers usually reach for.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    argv: tuple[str, ...] = ()

    @property
    def args(self) -> tuple[str, ...]:
        return self.argv

    @classmethod
    def parse(cls, argv: Sequence[str]) -> CommandMessage:
        """Build a message from a full token list (command name first)."""
        tokens = [str(token) for token in argv]
        if not tokens:
            return cls()
        return cls(name=tokens[0], argv=tuple(tokens[1:]))

    @classmethod
    def from_fields(cls, **fields: Any) -> CommandMessage:
        """Build a message from partial fields.

        ``args`` is accepted as an alias for ``argv`` when ``argv`` is not given.
        """
        if "argv" not in fields and "args" in fields:
            fields["argv"] = fields["args"]
        fields.pop("args", None)
        return cls.model_validate(fields)


class HistoryEntry(BaseModel):
    """One processing attempt recorded by a protocol."""

    model_config = ConfigDict(frozen=True)

    input: InputMessage
    message: CommandMessage
    time: datetime = Field(default_factory=_now)


class OutputMessage(BaseModel):
    """Normalized result of a processed command.

    Every output carries ``meta["source"]`` naming the command that produced
    it. Failures use ``priority=PRIORITY_CRITICAL`` and keep the raised
    exception in ``error``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    content: list[Any] = Field(default_factory=list)
    priority: int = PRIORITY_NORMAL
    meta: dict[str, Any] = Field(default_factory=dict)
    error: BaseException | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if isinstance(value, list):
            return value
        if isinstance(value, tuple):
            return list(value)
        return [value]

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, value: Any) -> Any:
        return PRIORITY_NORMAL if value is None else value

    @field_serializer("error")
    def _serialize_error(self, error: BaseException | None) -> dict[str, str] | None:
        if error is None:
            return None
        return {"type": type(error).__name__, "message": str(error)}

    @property
    def source(self) -> str | None:
        return self.meta.get("source")

    def is_error(self) -> bool:
        """Check if this output reports a failure."""
        return self.error is not None

    def is_critical(self) -> bool:
        return self.priority >= PRIORITY_CRITICAL
