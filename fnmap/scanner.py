"""Source discovery: directory scans and git-changed files."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .config import DEFAULT_EXCLUDES, MAX_DIR_DEPTH, SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


def is_supported(path: Path) -> bool:
    return path.suffix in SUPPORTED_EXTENSIONS


def scan_directory(
    directory: Path,
    base_dir: Optional[Path] = None,
    excludes: Iterable[str] = DEFAULT_EXCLUDES,
) -> List[Path]:
    """Recursively collect supported files under *directory*.

    Paths are returned relative to *base_dir* (default: *directory*), in
    sorted order per directory. Excluded directory names, symlink loops and
    anything deeper than ``MAX_DIR_DEPTH`` are skipped with a warning.
    """
    directory = Path(directory)
    base = Path(base_dir) if base_dir is not None else directory
    files: List[Path] = []
    _scan(directory, base, frozenset(excludes), 0, set(), files)
    return files


def _scan(
    directory: Path,
    base: Path,
    excludes: frozenset,
    depth: int,
    visited: Set[str],
    files: List[Path],
) -> None:
    if not directory.exists():
        logger.warning("Directory does not exist: %s", directory)
        return
    if depth > MAX_DIR_DEPTH:
        logger.warning("Max directory depth (%d) exceeded: %s", MAX_DIR_DEPTH, directory)
        return

    real = os.path.realpath(directory)
    if real in visited:
        logger.warning("Circular reference detected, skipping: %s", directory)
        return
    visited.add(real)

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except PermissionError:
        logger.warning("Permission denied: %s", directory)
        return
    except OSError as exc:
        logger.warning("Failed to read directory: %s. Reason: %s", directory, exc)
        return

    for entry in entries:
        try:
            if entry.is_dir():
                if entry.name not in excludes:
                    _scan(entry, base, excludes, depth + 1, visited, files)
            elif entry.is_file() and is_supported(entry):
                files.append(Path(os.path.relpath(entry, base)))
        except OSError as exc:
            logger.warning("Error processing entry: %s. Reason: %s", entry.name, exc)


def scan_single_directory(directory: Path) -> List[Path]:
    """Supported files directly inside *directory* (absolute, not recursive)."""
    directory = Path(directory).resolve()
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and is_supported(p))
    except OSError as exc:
        logger.warning("Failed to read directory: %s. Reason: %s", directory, exc)
        return []


def _git_lines(project_dir: Path, *args: str) -> List[str]:
    out = subprocess.run(
        ["git", *args],
        cwd=str(project_dir),
        capture_output=True,
        text=True,
        check=True,
    ).stdout
    return [line.strip() for line in out.splitlines() if line.strip()]


def get_git_changed_files(project_dir: Path, staged_only: bool = False) -> List[Path]:
    """Absolute paths of changed supported files; empty outside a git repo."""
    project_dir = Path(project_dir)
    try:
        names = _git_lines(project_dir, "diff", "--cached", "--name-only", "--diff-filter=ACMR")
        if not staged_only:
            names += _git_lines(project_dir, "diff", "--name-only", "--diff-filter=ACMR")
            names += _git_lines(project_dir, "ls-files", "--others", "--exclude-standard")
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git query failed in %s: %s", project_dir, exc)
        return []

    files: List[Path] = []
    seen: Set[str] = set()
    for name in names:
        if name in seen or Path(name).suffix not in SUPPORTED_EXTENSIONS:
            continue
        seen.add(name)
        full = (project_dir / name).resolve()
        if full.exists():
            files.append(full)
    return files
