"""Pytest configuration and fixtures for fnmap tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from fnmap.analyzer import analyze_source
from fnmap.models import Module

FIXTURES = Path(__file__).parent / "fixtures" / "js"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the sample JS/TS sources."""
    return FIXTURES


@pytest.fixture
def analyze_fixture() -> Callable[[str], Module]:
    """Analyze a sample source by file name."""

    def _analyze(name: str) -> Module:
        path = FIXTURES / name
        return analyze_source(path.read_text(encoding="utf-8"), str(path))

    return _analyze


@pytest.fixture
def sample_module(analyze_fixture) -> Module:
    return analyze_fixture("sample.js")


@pytest.fixture
def class_module(analyze_fixture) -> Module:
    return analyze_fixture("sample-class.js")


@pytest.fixture
def service_module(analyze_fixture) -> Module:
    return analyze_fixture("service.js")


@pytest.fixture
def sample_project(temp_dir: Path) -> Path:
    """A small JS/TS project tree with a nested source directory."""
    src = temp_dir / "src"
    (src / "lib").mkdir(parents=True)
    (temp_dir / "node_modules" / "dep").mkdir(parents=True)

    shutil.copy(FIXTURES / "sample.js", src / "sample.js")
    shutil.copy(FIXTURES / "sample-class.js", src / "sample-class.js")
    shutil.copy(FIXTURES / "types.ts", src / "types.ts")
    shutil.copy(FIXTURES / "service.js", src / "lib" / "service.js")
    (src / "lib" / "README.md").write_text("# not code\n")
    (temp_dir / "node_modules" / "dep" / "index.js").write_text("function dep() {}\n")
    return temp_dir


@pytest.fixture
def broken_source() -> str:
    """JavaScript that tree-sitter cannot parse cleanly."""
    return "function broken(a, b {\n  return a +;\n}\n"
