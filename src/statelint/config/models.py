"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (STATELINT__SECTION__KEY)
3. Project YAML (statelint.yaml or .statelint.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    STATELINT__<SECTION>__<KEY>=<VALUE>

Examples:
    STATELINT__LOGGING__LEVEL=DEBUG
    STATELINT__RESOLVER__FOLLOW_IMPORTS=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from statelint.markup.jsx import DEFAULT_ATTRIBUTE_NAMES
from statelint.resolver.imports import DEFAULT_EXTENSIONS, DEFAULT_INDEX_BASENAME

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        STATELINT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG reports every import that degraded to unresolved.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ResolverConfig(BaseModel):
    """Expression resolution configuration.

    Env vars:
        STATELINT__RESOLVER__FOLLOW_IMPORTS: Chase relative imports one level deep
        STATELINT__RESOLVER__INDEX_BASENAME: Directory entry file name
    """

    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Extensions probed, in order, when an import specifier has none.",
    )
    index_basename: str = Field(
        default=DEFAULT_INDEX_BASENAME,
        description="File probed inside a directory import (without extension).",
    )
    follow_imports: bool = Field(
        default=True,
        description="Read imported modules to resolve imported bindings.",
    )
    attribute_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ATTRIBUTE_NAMES),
        description="JSX attributes that carry class lists.",
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext}")
        return v

    @field_validator("index_basename")
    @classmethod
    def validate_index_basename(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError(f"Index basename must be a bare file name: {v!r}")
        return v


class StatelintConfig(BaseModel):
    """Root configuration for statelint.

    All settings can be configured via:
    1. Environment variables: STATELINT__SECTION__KEY
    2. statelint.yaml in the project root
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
