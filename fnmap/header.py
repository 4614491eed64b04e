"""In-source ``/*@AI ... @AI*/`` summary comments."""

from __future__ import annotations

import re

from .models import MethodKind, Module

_AI_BLOCK = re.compile(r"/\*@AI[\s\S]*?@AI\*/\s*")
_LEGACY_CONTEXT = re.compile(r"/\*\*[\s\S]*?@ai-context-end[\s\S]*?\*/\s*")
_LEADING_DOC = re.compile(r"^/\*\*[\s\S]*?\*/\s*\n?")


def render_header(file_name: str, module: Module) -> str:
    """Summarize *module* as a compact comment block for the top of a file."""
    first = f"/*@AI {file_name}"
    if module.description:
        first += f" - {module.description[:50]}"
    lines = [first]

    for imp in module.imports:
        line = f"<{imp.module}:{','.join(imp.members)}"
        if imp.used_in:
            line += f" ->{','.join(imp.used_in)}"
        lines.append(line)

    for cls in module.classes:
        line = cls.name
        if cls.super_class:
            line += f":{cls.super_class}"
        line += f" {cls.start_line}-{cls.end_line}"
        if cls.description:
            line += f" {cls.description}"
        lines.append(line)
        for method in cls.methods:
            marker = "  +" if method.static else "  ."
            accessor = f"{method.kind.value}:" if method.kind in (MethodKind.GETTER, MethodKind.SETTER) else ""
            line = f"{marker}{accessor}{method.name}({method.params}) {method.line}"
            if method.description:
                line += f" {method.description}"
            lines.append(line)

    for fn in module.functions:
        line = f"{fn.name}({fn.params}) {fn.start_line}-{fn.end_line}"
        if fn.description:
            line += f" {fn.description}"
        lines.append(line)

    for const in module.constants:
        line = f"{const.name} {const.line}"
        if const.description:
            line += f" {const.description}"
        lines.append(line)

    lines.append("@AI*/")
    return "\n".join(lines)


def strip_headers(code: str) -> str:
    """Remove generated header blocks, including a leading doc comment."""
    code = _AI_BLOCK.sub("", code)
    code = _LEGACY_CONTEXT.sub("", code)
    return _LEADING_DOC.sub("", code, count=1)
