"""Usage and call-graph construction (pass 4).

Needs the alias table from :mod:`fnmap.imports` and the declared names from
:mod:`fnmap.extractor`. Call sites outside any callable produce no edges.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Set, Tuple

from .extractor import (
    DEFAULT_NAME,
    FUNCTION_DECLARATIONS,
    FUNCTION_VALUES,
    class_name,
    declarator_name,
    method_name,
)
from .imports import ImportTable
from .parser import iter_nodes, node_text

_IMPORT_SITES = frozenset({
    "import_specifier",
    "import_clause",
    "namespace_import",
    "import_require_clause",
    "pair_pattern",
})


def enclosing_name(node: Any, callables: Set[str]) -> Optional[str]:
    """Name of the nearest recorded callable lexically enclosing *node*, if any.

    Scopes with no record of their own (a nested ``const f = () => ...``, a
    method of an unnamed class) are skipped so the call is attributed to the
    next enclosing callable instead.
    """
    current = node.parent
    while current is not None:
        name = _scope_name(current)
        if name is not None and name in callables:
            return name
        current = current.parent
    return None


def _scope_name(node: Any) -> Optional[str]:
    kind = node.type
    if kind in FUNCTION_DECLARATIONS:
        name = node.child_by_field_name("name")
        return node_text(name) if name is not None else None
    if kind == "method_definition" and node.parent is not None and node.parent.type == "class_body":
        owner = class_name(node.parent.parent)
        return f"{owner}.{method_name(node)}" if owner else None
    if kind in FUNCTION_VALUES:
        bound = declarator_name(node)
        if bound:
            return bound
        if node.parent is not None and node.parent.type == "export_statement":
            name = node.child_by_field_name("name")
            return node_text(name) if name is not None else DEFAULT_NAME
    return None


def callee_name(call: Any, aliases: Dict[str, str]) -> Optional[str]:
    func = call.child_by_field_name("function")
    if func is None:
        return None
    if func.type == "identifier":
        return node_text(func)
    if func.type != "member_expression":
        return None
    prop = func.child_by_field_name("property")
    if prop is None or prop.type != "property_identifier":
        return None
    obj = func.child_by_field_name("object")
    if obj is not None and obj.type == "identifier" and node_text(obj) in aliases:
        return f"{node_text(obj)}.{node_text(prop)}"
    return node_text(prop)


def record_usage(root: Any, table: ImportTable, callables: Set[str]) -> None:
    """Note every callable that references an import alias."""
    for node in iter_nodes(root):
        if node.type not in ("identifier", "shorthand_property_identifier"):
            continue
        name = node_text(node)
        if name not in table.aliases or _is_binding_site(node):
            continue
        caller = enclosing_name(node, callables)
        if caller:
            table.record_use(name, caller)


def _is_binding_site(node: Any) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if parent.type == "variable_declarator":
        return parent.child_by_field_name("name") == node
    return parent.type in _IMPORT_SITES


def build_call_graph(
    root: Any,
    table: ImportTable,
    declared: Set[str],
    callables: Set[str],
) -> Dict[str, Tuple[str, ...]]:
    edges: Dict[str, Dict[str, None]] = {}
    for node in iter_nodes(root):
        if node.type != "call_expression":
            continue
        callee = callee_name(node, table.aliases)
        if callee is None:
            continue
        caller = enclosing_name(node, callables)
        if not caller or caller == callee:
            continue
        imported = callee.split(".", 1)[0] in table.aliases
        if callee in declared or imported:
            edges.setdefault(caller, {})[callee] = None
    return {caller: tuple(callees) for caller, callees in edges.items()}
