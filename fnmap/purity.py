"""Pure-type classification (pass 3).

A file is pure when none of its top-level statements has a runtime effect:
only type aliases, interfaces, enums, ambient declarations and type-only
imports or exports.
"""

from __future__ import annotations

from typing import Any

from .parser import has_token

_TYPE_STATEMENTS = frozenset({
    "type_alias_declaration",
    "interface_declaration",
    "enum_declaration",
    "ambient_declaration",
})


def is_pure_type(root: Any) -> bool:
    for stmt in root.named_children:
        if stmt.type == "comment":
            continue
        if not _is_type_only(stmt):
            return False
    return True


def _is_type_only(stmt: Any) -> bool:
    if stmt.type in _TYPE_STATEMENTS:
        return True
    if stmt.type == "import_statement":
        return _type_only_import(stmt)
    if stmt.type == "export_statement":
        return _type_only_export(stmt)
    return False


def _type_only_import(stmt: Any) -> bool:
    if has_token(stmt, "type"):
        return True
    clause = next((ch for ch in stmt.named_children if ch.type == "import_clause"), None)
    if clause is None:
        # side-effect import or import x = require()
        return False
    for part in clause.named_children:
        if part.type != "named_imports":
            return False
        for spec in part.named_children:
            if spec.type == "import_specifier" and not has_token(spec, "type"):
                return False
    return True


def _type_only_export(stmt: Any) -> bool:
    if has_token(stmt, "default"):
        return False
    if has_token(stmt, "type"):
        return True
    decl = stmt.child_by_field_name("declaration")
    if decl is not None:
        return decl.type in ("type_alias_declaration", "interface_declaration")
    clause = next((ch for ch in stmt.named_children if ch.type == "export_clause"), None)
    if clause is None:
        return False
    return all(
        has_token(spec, "type")
        for spec in clause.named_children
        if spec.type == "export_specifier"
    )
