"""Tests for per-file processing."""

from pathlib import Path

import pytest

from fnmap import processor
from fnmap.errors import ErrorType, FileValidationError
from fnmap.processor import ProcessResult, process_file, validate_file_path


class TestValidateFilePath:
    def test_valid_file(self, fixtures_dir: Path):
        assert validate_file_path(fixtures_dir / "sample.js") == fixtures_dir / "sample.js"

    def test_empty_path(self):
        with pytest.raises(FileValidationError) as excinfo:
            validate_file_path("")
        assert excinfo.value.error_type is ErrorType.VALIDATION_ERROR

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileValidationError) as excinfo:
            validate_file_path(temp_dir / "missing.js")
        assert excinfo.value.error_type is ErrorType.FILE_NOT_FOUND

    def test_directory(self, temp_dir: Path):
        with pytest.raises(FileValidationError) as excinfo:
            validate_file_path(temp_dir)
        assert excinfo.value.error_type is ErrorType.VALIDATION_ERROR
        assert "not a file" in excinfo.value.message

    def test_too_large(self, temp_dir: Path, monkeypatch):
        big = temp_dir / "big.js"
        big.write_text("const a = 1;\n" * 10)
        monkeypatch.setattr(processor, "MAX_FILE_SIZE", 16)

        with pytest.raises(FileValidationError) as excinfo:
            validate_file_path(big)
        assert excinfo.value.error_type is ErrorType.FILE_TOO_LARGE


class TestProcessFile:
    """process_file never raises for file problems."""

    def test_success(self, fixtures_dir: Path):
        result = process_file(fixtures_dir / "sample.js")

        assert result.ok
        assert result.error is None
        assert [fn.name for fn in result.module.functions] == ["add", "multiply", "calculate"]

    def test_missing_file(self, temp_dir: Path):
        result = process_file(temp_dir / "nope.js")

        assert not result.ok
        assert result.module is None
        assert result.error_type is ErrorType.FILE_NOT_FOUND

    def test_parse_error_carries_location(self, temp_dir: Path, broken_source: str):
        path = temp_dir / "broken.js"
        path.write_text(broken_source)

        result = process_file(path)

        assert not result.ok
        assert result.error_type is ErrorType.PARSE_ERROR
        assert result.line is not None and result.column is not None
        assert "broken.js" in result.error

    def test_undecodable_file(self, temp_dir: Path):
        path = temp_dir / "binary.js"
        path.write_bytes(b"\xff\xfe\x00bad")

        result = process_file(path)

        assert result.error_type is ErrorType.FILE_READ_ERROR

    def test_file_is_not_modified(self, temp_dir: Path, fixtures_dir: Path):
        path = temp_dir / "sample.js"
        original = (fixtures_dir / "sample.js").read_text()
        path.write_text(original)

        process_file(path)

        assert path.read_text() == original

    def test_result_constructors(self):
        failed = ProcessResult.failure("boom", ErrorType.CONFIG_ERROR)
        assert (failed.ok, failed.error, failed.line) == (False, "boom", None)
