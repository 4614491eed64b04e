"""Mermaid flowchart export for single files and whole projects."""

from __future__ import annotations

from pathlib import PurePath
from typing import Dict, List, Optional, Sequence, Set

from .models import FileEntry, Module


def safe_id(name: str) -> str:
    """Mermaid-safe node id; every non-alphanumeric character becomes ``_<codepoint>_``."""
    return "id_" + "".join(
        ch if ch.isascii() and ch.isalnum() else f"_{ord(ch)}_" for ch in name
    )


def _esc(text: str) -> str:
    return text.replace('"', "#quot;")


def _resolve_local(caller: str, callee: str, names: Sequence[str]) -> Optional[str]:
    if callee in names:
        return callee
    if "." in caller:
        qualified = f"{caller.rsplit('.', 1)[0]}.{callee}"
        if qualified in names:
            return qualified
    return None


def export_file_mermaid(file_name: str, module: Module) -> Optional[str]:
    """Call graph of one file, or None when it declares no functions or methods."""
    names = module.callables()
    if not names:
        return None

    stem = PurePath(file_name).stem
    lines = ["flowchart TD"]
    lines.append(f'  subgraph {safe_id(stem)}["{_esc(stem)}"]')
    for name in names:
        lines.append(f'    {safe_id(name)}["{_esc(name)}"]')
    lines.append("  end")

    for caller, callees in module.call_graph.items():
        if caller not in names:
            continue
        for callee in callees:
            target = _resolve_local(caller, callee, names)
            if target is not None:
                lines.append(f"  {safe_id(caller)} --> {safe_id(target)}")
    return "\n".join(lines)


def export_project_mermaid(entries: Sequence[FileEntry]) -> str:
    """Call graph across files; one cluster per file that declares callables."""
    lines = ["flowchart TD"]
    declared: Dict[str, Sequence[str]] = {}
    prefixes: Dict[str, str] = {}

    for entry in entries:
        names = entry.module.callables()
        if not names:
            continue
        prefix = safe_id(entry.relative_path)
        declared[entry.relative_path] = names
        prefixes[entry.relative_path] = prefix
        lines.append(f'  subgraph {prefix}["{_esc(entry.relative_path)}"]')
        for name in names:
            lines.append(f'    {prefix}_{safe_id(name)}["{_esc(name)}"]')
        lines.append("  end")

    seen: Set[str] = set()
    edges: List[str] = []
    for entry in entries:
        names = declared.get(entry.relative_path)
        if names is None:
            continue
        prefix = prefixes[entry.relative_path]
        for caller, callees in entry.module.call_graph.items():
            if caller not in names:
                continue
            caller_id = f"{prefix}_{safe_id(caller)}"
            for callee in callees:
                callee_id = _resolve_project(entry.relative_path, caller, callee, declared, prefixes)
                if callee_id is None:
                    continue
                edge = f"  {caller_id} --> {callee_id}"
                if edge not in seen:
                    seen.add(edge)
                    edges.append(edge)

    lines.extend(edges)
    return "\n".join(lines)


def _resolve_project(
    path: str,
    caller: str,
    callee: str,
    declared: Dict[str, Sequence[str]],
    prefixes: Dict[str, str],
) -> Optional[str]:
    local = _resolve_local(caller, callee, declared[path])
    if local is not None:
        return f"{prefixes[path]}_{safe_id(local)}"
    for other, names in declared.items():
        if callee in names:
            return f"{prefixes[other]}_{safe_id(callee)}"
    return None
