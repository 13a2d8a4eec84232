"""Config module exports."""

from statelint.config.loader import load_config
from statelint.config.models import (
    LoggingConfig,
    LogOutputConfig,
    ResolverConfig,
    StatelintConfig,
)

__all__ = [
    "load_config",
    "StatelintConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ResolverConfig",
]
