"""Per-file processing: validate, read, analyze.

:func:`process_file` never raises for problems with the file itself; it
returns a failed :class:`ProcessResult` so a batch can keep going.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .analyzer import analyze_source
from .config import MAX_FILE_SIZE
from .errors import ErrorType, FileValidationError, FnmapSyntaxError, format_error
from .models import Module

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


@dataclass(frozen=True)
class ProcessResult:
    ok: bool
    module: Optional[Module] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @classmethod
    def success(cls, module: Module) -> "ProcessResult":
        return cls(ok=True, module=module)

    @classmethod
    def failure(
        cls,
        error: str,
        error_type: ErrorType,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> "ProcessResult":
        return cls(ok=False, error=error, error_type=error_type, line=line, column=column)


def validate_file_path(path: Union[str, Path, None]) -> Path:
    """Return *path* as a :class:`Path` or raise :class:`FileValidationError`."""
    if not path:
        raise FileValidationError("File path is required and must be a string")
    file_path = Path(path)
    if not file_path.exists():
        raise FileValidationError(f"File not found: {file_path}", ErrorType.FILE_NOT_FOUND)
    try:
        if not file_path.is_file():
            raise FileValidationError(f"Path is not a file: {file_path}")
        size = file_path.stat().st_size
    except OSError as exc:
        raise FileValidationError(
            f"Cannot access file: {file_path}. Reason: {exc}", ErrorType.PERMISSION_ERROR
        ) from exc
    if size > MAX_FILE_SIZE:
        raise FileValidationError(
            f"File too large ({size / _MB:.2f}MB > {MAX_FILE_SIZE // _MB}MB): {file_path}",
            ErrorType.FILE_TOO_LARGE,
        )
    return file_path


def process_file(path: Union[str, Path]) -> ProcessResult:
    """Analyze one file without modifying it."""
    try:
        file_path = validate_file_path(path)
    except FileValidationError as exc:
        return ProcessResult.failure(exc.message, exc.error_type)

    try:
        code = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        message = format_error("Failed to read or process file", file=str(file_path), suggestion=str(exc))
        return ProcessResult.failure(message, ErrorType.FILE_READ_ERROR)

    try:
        module = analyze_source(code, str(file_path))
    except FnmapSyntaxError as exc:
        logger.debug("Parse failed for %s at %s:%s", file_path, exc.line, exc.column)
        return ProcessResult.failure(exc.message, exc.error_type, exc.line, exc.column)
    return ProcessResult.success(module)
