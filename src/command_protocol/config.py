"""Runtime settings for the command-protocol CLI and stdio adapter.

Settings come from environment variables and can be overridden by CLI
options:

    COMMAND_PROTOCOL_LOG_LEVEL   Logging level (default: WARNING)
    COMMAND_PROTOCOL_LOG_FORMAT  Logging format string
    COMMAND_PROTOCOL_HANDLER     Command to load, as ``module:attr``
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, field_validator

ENV_PREFIX = "COMMAND_PROTOCOL_"

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "%(levelname)s: %(message)s"


class ProtocolSettings(BaseModel):
    """Effective settings for a command-protocol process."""

    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    handler: str | None = None

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ProtocolSettings:
        """Load settings from the environment, then apply non-None overrides."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_value = env.get(f"{ENV_PREFIX}{field_name.upper()}")
            if env_value:
                values[field_name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def configure_logging(settings: ProtocolSettings) -> None:
    """Send log records to stderr; stdout is reserved for protocol output."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format,
        stream=sys.stderr,
        force=True,
    )
