"""Error taxonomy shared by the analyzer, processor and CLI."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class ErrorType(str, Enum):
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"


class FnmapError(Exception):
    """Base class for every error fnmap reports."""

    error_type: ErrorType = ErrorType.VALIDATION_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FnmapSyntaxError(FnmapError):
    """The parser could not produce a clean tree for a file.

    ``line`` is 1-based and ``column`` 0-based when the location is known.
    """

    error_type = ErrorType.PARSE_ERROR

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ConfigError(FnmapError):
    error_type = ErrorType.CONFIG_ERROR


class FileValidationError(FnmapError):
    """A path was rejected before reading (missing, not a file, too large...)."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.VALIDATION_ERROR) -> None:
        super().__init__(message)
        self.error_type = error_type


def format_error(
    message: str,
    file: Optional[str] = None,
    line: Optional[int] = None,
    column: Optional[int] = None,
    suggestion: Optional[str] = None,
) -> str:
    """Join a message and its context into an indented multi-line string."""
    parts: List[str] = [message]
    if file:
        parts.append(f"File: {file}")
    if line is not None and column is not None:
        parts.append(f"Location: Line {line}, Column {column}")
    if suggestion:
        parts.append(f"Suggestion: {suggestion}")
    return "\n  ".join(parts)
