"""Statelint error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Resolution (imports, parsing, exports)

Resolution errors met while chasing an import never escape the import
resolver: it degrades them to an unresolved binding at its boundary. Only a
file the caller asked for directly (e.g. an unsupported extension) raises.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Resolution (3xxx)
    MODULE_NOT_FOUND = 3001
    MODULE_READ_ERROR = 3002
    MODULE_PARSE_ERROR = 3003
    UNSUPPORTED_LANGUAGE = 3004
    EXPORT_NOT_FOUND = 3005


@dataclass(frozen=True, slots=True)
class StatelintError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MODULE_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(StatelintError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ResolutionError(StatelintError):
    """Import or parse failures met while chasing a binding."""

    @classmethod
    def module_not_found(cls, specifier: str, from_path: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.MODULE_NOT_FOUND,
            message=f"Cannot locate module '{specifier}' from {from_path}",
            details={"specifier": specifier, "from": from_path},
        )

    @classmethod
    def read_failed(cls, path: str, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.MODULE_READ_ERROR,
            message=f"Failed to read {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def parse_failed(cls, path: str, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.MODULE_PARSE_ERROR,
            message=f"Failed to parse {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def unsupported_language(cls, path: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.UNSUPPORTED_LANGUAGE,
            message=f"No grammar for {path}",
            details={"path": path},
        )

    @classmethod
    def export_missing(cls, path: str, name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.EXPORT_NOT_FOUND,
            message=f"{path} has no binding named '{name}'",
            details={"path": path, "name": name},
        )
