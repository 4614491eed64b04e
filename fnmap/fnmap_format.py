"""The compact ``.fnmap`` index format.

A directory index looks like::

    @FNMAP src/
    #math.js Arithmetic helpers
      <lodash:default
      add(a,b) 3-5 Add two numbers
      calculate(x,y,z) 7-10 →add
      PI 1
      >add,calculate,default:calculate
    @FNMAP
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, List, Optional, Sequence, Tuple

from .models import ExportKind, FileEntry, MethodKind, Module

HEADER_DESCRIPTION_LIMIT = 50
CALL_ARROW = "→"
INDEX_MARKER = "@FNMAP"


def render_index(dir_path: str, entries: Sequence[FileEntry]) -> str:
    """Render a directory index over *entries* (in the given order)."""
    lines = [f"{INDEX_MARKER} {PurePath(dir_path).name}/"]
    for entry in entries:
        lines.extend(render_file_block(PurePath(entry.relative_path).name, entry.module))
    lines.append(INDEX_MARKER)
    return "\n".join(lines)


def render_single(file_path: str, module: Module) -> str:
    """Index for one file: the directory wrapper around a single block."""
    path = PurePath(file_path)
    return render_index(str(path.parent), [FileEntry(path.name, module)])


def _calls(module: Module, *keys: str) -> str:
    for key in keys:
        callees = module.call_graph.get(key)
        if callees:
            return f" {CALL_ARROW}{','.join(callees)}"
    return ""


def render_file_block(file_name: str, module: Module) -> List[str]:
    header = f"#{file_name}"
    if module.description:
        header += f" {module.description[:HEADER_DESCRIPTION_LIMIT]}"
    lines = [header]

    for imp in module.imports:
        lines.append(f"  <{imp.module}:{','.join(imp.members)}")

    for cls in module.classes:
        line = f"  {cls.name}"
        if cls.super_class:
            line += f":{cls.super_class}"
        line += f" {cls.start_line}-{cls.end_line}"
        if cls.description:
            line += f" {cls.description}"
        lines.append(line)
        for method in cls.methods:
            marker = "    +" if method.static else "    ."
            accessor = f"{method.kind.value}:" if method.kind in (MethodKind.GETTER, MethodKind.SETTER) else ""
            line = f"{marker}{accessor}{method.name}({method.params}) {method.line}"
            if method.description:
                line += f" {method.description}"
            line += _calls(module, cls.qualname(method), method.name)
            lines.append(line)

    for fn in module.functions:
        line = f"  {fn.name}({fn.params}) {fn.start_line}-{fn.end_line}"
        if fn.description:
            line += f" {fn.description}"
        line += _calls(module, fn.name)
        lines.append(line)

    for const in module.constants:
        line = f"  {const.name} {const.line}"
        if const.description:
            line += f" {const.description}"
        lines.append(line)

    if module.exports:
        names = []
        for exp in module.exports:
            if exp.kind is ExportKind.DEFAULT:
                names.append(f"default:{exp.local_name}" if exp.local_name else "default")
            elif exp.kind is ExportKind.TYPE:
                names.append(f"type:{exp.name}")
            else:
                names.append(exp.name)
        lines.append(f"  >{','.join(names)}")
    return lines


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

_FUNCTION_LINE = re.compile(r"^  (?P<name>[^\s(<>][^\s(]*)\((?P<params>[^)]*)\) (?P<start>\d+)-(?P<end>\d+)(?: |$)")
_METHOD_LINE = re.compile(
    r"^    (?P<marker>[.+])(?:(?P<accessor>get|set):)?(?P<name>[^(]+)\((?P<params>[^)]*)\) (?P<line>\d+)(?: |$)"
)
_CLASS_LINE = re.compile(r"^  (?P<name>[^\s:(<>][^\s:(]*)(?::(?P<super>\S+))? (?P<start>\d+)-(?P<end>\d+)(?: |$)")


@dataclass
class IndexedFile:
    """Callable signatures recovered from one ``#file`` block."""

    name: str
    description: str = ""
    functions: List[Tuple[str, str, int, int]] = field(default_factory=list)
    methods: List[Tuple[str, str, int, int]] = field(default_factory=list)


def parse_index(text: str) -> Dict[str, IndexedFile]:
    """Recover ``(name, params, start, end)`` tuples per file from an index.

    Methods are reported under ``Class.method`` with ``start == end`` equal
    to the method line.
    """
    files: Dict[str, IndexedFile] = {}
    current: Optional[IndexedFile] = None
    current_class: Optional[str] = None

    for raw in text.splitlines():
        if raw.startswith(INDEX_MARKER):
            current = None
            continue
        if raw.startswith("#"):
            name, _, description = raw[1:].partition(" ")
            current = IndexedFile(name=name, description=description)
            files[name] = current
            current_class = None
            continue
        if current is None:
            continue

        method = _METHOD_LINE.match(raw)
        if method and current_class is not None:
            line = int(method.group("line"))
            current.methods.append(
                (f"{current_class}.{method.group('name')}", method.group("params"), line, line)
            )
            continue

        function = _FUNCTION_LINE.match(raw)
        if function:
            current_class = None
            current.functions.append(
                (
                    function.group("name"),
                    function.group("params"),
                    int(function.group("start")),
                    int(function.group("end")),
                )
            )
            continue

        cls = _CLASS_LINE.match(raw)
        if cls:
            current_class = cls.group("name")
            continue
        if raw.startswith("  ") and not raw.startswith("    "):
            current_class = None
    return files
