"""Core module exports."""

from statelint.core.errors import (
    ConfigError,
    ErrorCode,
    ResolutionError,
    StatelintError,
)
from statelint.core.logging import configure_logging

__all__ = [
    # Errors
    "StatelintError",
    "ConfigError",
    "ErrorCode",
    "ResolutionError",
    # Logging
    "configure_logging",
]
