"""Typer-based CLI for fnmap: index JS/TS sources into ``.fnmap`` files."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import INIT_CONFIG, DEFAULT_EXCLUDES, default_project_dir, load_config, merge_config
from .fnmap_format import render_index
from .graph_export import export_file_mermaid, export_project_mermaid
from .models import FileEntry
from .processor import process_file
from .scanner import get_git_changed_files, scan_directory, scan_single_directory

logger = logging.getLogger(__name__)

GITIGNORE_MARKER = "# fnmap generated files"
GITIGNORE_RULES = f"""
{GITIGNORE_MARKER}
.fnmap
*.fnmap
*.mermaid
.fnmap.mermaid
"""

RULE = "=" * 50

EPILOG = """
Configuration files (by priority): .fnmaprc, .fnmaprc.json, .fnmaprc.toml, package.json#fnmap

Output: .fnmap per directory, <name>.fnmap per file given with --files,
<name>.mermaid with --mermaid file, .fnmap.mermaid with --mermaid project.
"""

app = typer.Typer(
    help="🗺️  fnmap: structural index and call graph for JavaScript/TypeScript code.",
    add_completion=False,
    rich_markup_mode="rich",
)


class MermaidMode(str, Enum):
    FILE = "file"
    PROJECT = "project"


@dataclass
class Reporter:
    """Console output; progress only when ``verbose``, stats always."""

    console: Console = field(default_factory=Console)
    verbose: bool = False

    def _print(self, message: str, prefix: str = "") -> None:
        # file names such as [default] must not be read as markup
        self.console.print(f"{prefix}{escape(message)}", highlight=False)

    def info(self, message: str) -> None:
        if self.verbose:
            self._print(message)

    def success(self, message: str) -> None:
        if self.verbose:
            self._print(message, "[green]✓[/green] ")

    def warn(self, message: str) -> None:
        if self.verbose:
            self._print(message, "[yellow]![/yellow] ")

    def error(self, message: str) -> None:
        if self.verbose:
            self._print(message, "[red]✗[/red] ")

    def title(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[bold]{escape(message)}[/bold]")

    def stats(self, message: str) -> None:
        self._print(message)


@dataclass
class RunStats:
    analyzed: int = 0
    failed: int = 0
    written: List[Path] = field(default_factory=list)


def _rel(path: Path, base: Path) -> str:
    return os.path.relpath(path, base)


# ---------------------------------------------------------------------------
# --clear / --init
# ---------------------------------------------------------------------------

def _is_generated(name: str) -> bool:
    return name == ".fnmap" or name.endswith(".fnmap") or name.endswith(".mermaid")


def clear_generated_files(directory: Path, project_dir: Path, reporter: Reporter) -> int:
    """Delete generated index and diagram files below *directory*."""
    if not directory.exists():
        reporter.warn(f"Directory does not exist: {directory}")
        return 0
    count = 0
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            if entry.name not in DEFAULT_EXCLUDES:
                count += clear_generated_files(entry, project_dir, reporter)
        elif entry.is_file() and _is_generated(entry.name):
            try:
                entry.unlink()
            except OSError as exc:
                reporter.error(f"Failed to delete {_rel(entry, project_dir)}: {exc}")
                continue
            reporter.success(f"Deleted: {_rel(entry, project_dir)}")
            count += 1
    return count


def add_gitignore_rules(project_dir: Path, reporter: Reporter) -> bool:
    path = project_dir / ".gitignore"
    if path.exists():
        content = path.read_text(encoding="utf-8")
        if GITIGNORE_MARKER in content or "*.fnmap" in content:
            reporter.warn(".gitignore already contains fnmap rules")
            return False
        with path.open("a", encoding="utf-8") as fh:
            fh.write(GITIGNORE_RULES)
    else:
        path.write_text(GITIGNORE_RULES.strip() + "\n", encoding="utf-8")
    reporter.success("Added fnmap rules to .gitignore")
    return True


def init_project(project_dir: Path, reporter: Reporter) -> None:
    config_path = project_dir / ".fnmaprc"
    if config_path.exists():
        reporter.warn("Config file already exists: .fnmaprc")
    else:
        config_path.write_text(json.dumps(INIT_CONFIG, indent=2), encoding="utf-8")
        reporter.success("Created config file: .fnmaprc")
    add_gitignore_rules(project_dir, reporter)


# ---------------------------------------------------------------------------
# Target selection
# ---------------------------------------------------------------------------

def _changed_targets(project_dir: Path, staged: bool, reporter: Reporter) -> List[Path]:
    changed = get_git_changed_files(project_dir, staged_only=staged)
    if not changed:
        reporter.info("No git changed code files detected")
        return []
    dirs: Dict[Path, None] = {path.parent: None for path in changed}
    files: List[Path] = []
    for directory in dirs:
        files.extend(scan_single_directory(directory))
    return files


def _config_targets(project_dir: Path, reporter: Reporter) -> Optional[List[Path]]:
    loaded = load_config(project_dir)
    if loaded.config is None:
        reporter.warn("No config file found. Use fnmap --init to create config, or use --dir/--files to specify scope")
        reporter.info("Supported config files: .fnmaprc, .fnmaprc.json, .fnmaprc.toml, package.json#fnmap")
        return None
    reporter.info(f"Using config: {loaded.source}")
    config = merge_config(loaded.config)
    if not config.enable:
        reporter.info("Config file has enable set to false, skipping processing")
        return None
    files: List[Path] = []
    for directory in config.include_dirs():
        target = (project_dir / directory).resolve()
        if target.is_dir():
            files.extend(project_dir / rel for rel in scan_directory(target, project_dir, config.excludes))
    return files


def _dedupe(paths: List[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    for path in paths:
        seen.setdefault(path.resolve(), None)
    return list(seen)


# ---------------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------------

def _write(path: Path, content: str, project_dir: Path, reporter: Reporter, stats: RunStats) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        reporter.error(f"Failed to write {_rel(path, project_dir)}: {exc}")
        return
    stats.written.append(path)
    reporter.success(_rel(path, project_dir))


def index_files(
    files: List[Path],
    project_dir: Path,
    reporter: Reporter,
    single_file_mode: bool = False,
    mermaid: Optional[MermaidMode] = None,
) -> RunStats:
    """Analyze *files* and write ``.fnmap`` (and optional Mermaid) outputs."""
    stats = RunStats()
    by_dir: Dict[Path, List[FileEntry]] = {}

    reporter.info(RULE)
    reporter.title("fnmap - AI Code Indexing Tool")
    reporter.info(RULE)

    for path in files:
        relative = _rel(path, project_dir)
        reporter.info(f"\nAnalyzing: {relative}")
        result = process_file(path)
        if not result.ok:
            stats.failed += 1
            reporter.error(result.error or "unknown error")
            continue
        stats.analyzed += 1
        module = result.module
        if module.is_pure_type:
            reporter.info("Skipped (pure type file)")
            continue
        reporter.success(
            f"Imports: {len(module.imports)}, Functions: {len(module.functions)}, "
            f"Classes: {len(module.classes)}, Constants: {len(module.constants)}"
        )
        by_dir.setdefault(path.parent, []).append(FileEntry(relative, module))

    if by_dir:
        reporter.info("\nGenerating .fnmap index...")
    for directory, entries in by_dir.items():
        if single_file_mode:
            for entry in entries:
                target = directory / f"{Path(entry.relative_path).stem}.fnmap"
                _write(target, render_index(str(directory), [entry]), project_dir, reporter, stats)
        else:
            _write(directory / ".fnmap", render_index(str(directory), entries), project_dir, reporter, stats)

    if mermaid is not None and by_dir:
        reporter.info("\nGenerating Mermaid call graphs...")
        if mermaid is MermaidMode.FILE:
            for directory, entries in by_dir.items():
                for entry in entries:
                    diagram = export_file_mermaid(entry.relative_path, entry.module)
                    if diagram is None:
                        continue
                    target = directory / f"{Path(entry.relative_path).stem}.mermaid"
                    _write(target, diagram, project_dir, reporter, stats)
        else:
            every = [entry for entries in by_dir.values() for entry in entries]
            _write(project_dir / ".fnmap.mermaid", export_project_mermaid(every), project_dir, reporter, stats)
    return stats


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"fnmap v{__version__}")
        raise typer.Exit()


@app.command(epilog=EPILOG)
def main(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files to index."),
    files: Optional[str] = typer.Option(None, "--files", "-f", help="Comma-separated files to index."),
    directory: Optional[Path] = typer.Option(None, "--dir", "-d", help="Index every code file in a directory."),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project root directory (default: $FNMAP_PROJECT_DIR or the current directory).",
        show_default=False,
    ),
    changed: bool = typer.Option(False, "--changed", "-c", help="Only git changed files (staged, modified, untracked)."),
    staged: bool = typer.Option(False, "--staged", "-s", help="Only git staged files (pre-commit hook)."),
    mermaid: Optional[MermaidMode] = typer.Option(None, "--mermaid", "-m", help="Also write Mermaid call graphs."),
    log: bool = typer.Option(False, "--log", "-l", help="Show detailed processing logs."),
    clear: bool = typer.Option(False, "--clear", help="Delete generated .fnmap and .mermaid files."),
    init: bool = typer.Option(False, "--init", help="Create a default .fnmaprc and .gitignore rules."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Analyze JS/TS code structure and write [bold].fnmap[/bold] code maps."""
    if log:
        logging.basicConfig(level=logging.DEBUG)
    project_dir = (project or default_project_dir()).resolve()
    reporter = Reporter(verbose=log)

    if clear:
        reporter.verbose = True
        reporter.title("fnmap - Clear Generated Files")
        target = (project_dir / directory).resolve() if directory else project_dir
        count = clear_generated_files(target, project_dir, reporter)
        reporter.stats(f"Cleared {count} generated file(s)" if count else "No generated files found")
        return

    if init:
        reporter.verbose = True
        init_project(project_dir, reporter)
        return

    requested = list(paths or [])
    if files:
        requested.extend(Path(part.strip()) for part in files.split(",") if part.strip())
    requested = [p if p.is_absolute() else project_dir / p for p in requested]
    requested = [p for p in requested if p.exists()]

    single_file_mode = False
    if changed or staged:
        targets = _changed_targets(project_dir, staged, reporter)
    elif requested:
        single_file_mode = True
        targets = requested
    elif directory is not None:
        root = (project_dir / directory).resolve()
        targets = [project_dir / rel for rel in scan_directory(root, project_dir)]
    else:
        found = _config_targets(project_dir, reporter)
        if found is None:
            return
        targets = found

    targets = _dedupe(targets)
    if not targets:
        reporter.info("No files found to process")
        return

    stats = index_files(targets, project_dir, reporter, single_file_mode=single_file_mode, mermaid=mermaid)
    reporter.info("\n" + RULE)
    reporter.stats(f"Complete! Analyzed: {stats.analyzed}, Failed: {stats.failed}")
    reporter.info(RULE)
