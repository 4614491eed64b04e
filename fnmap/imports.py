"""Declaration & alias collection (pass 1).

Builds the module -> members table and the local alias -> module table from
ES ``import`` statements, TypeScript ``import x = require()`` and CommonJS
``require()`` calls. Shapes it does not know are skipped; this pass never
raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .models import ImportBinding
from .parser import iter_nodes, node_text, string_value

logger = logging.getLogger(__name__)


@dataclass
class ImportTable:
    members: Dict[str, Dict[str, None]] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)
    usage: Dict[str, Dict[str, None]] = field(default_factory=dict)

    def add(self, module: str, member: Optional[str] = None, alias: Optional[str] = None) -> None:
        bucket = self.members.setdefault(module, {})
        if member:
            bucket[member] = None
        if alias:
            # last binding of a local name wins
            self.aliases[alias] = module
            self.usage[alias] = {}

    def record_use(self, alias: str, caller: str) -> None:
        self.usage[alias][caller] = None

    def bindings(self) -> Tuple[ImportBinding, ...]:
        result = []
        for module, members in self.members.items():
            used_in: Dict[str, None] = {}
            for alias, target in self.aliases.items():
                if target == module:
                    used_in.update(self.usage.get(alias, {}))
            result.append(ImportBinding(module=module, members=tuple(members), used_in=tuple(used_in)))
        return tuple(result)


def require_source(node: Any) -> Optional[str]:
    """Module name of a ``require('m')`` call, else None."""
    if node is None or node.type != "call_expression":
        return None
    func = node.child_by_field_name("function")
    if func is None or func.type != "identifier" or node_text(func) != "require":
        return None
    args = node.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return None
    first = next((ch for ch in args.named_children if ch.type != "comment"), None)
    return string_value(first)


def is_module_load(node: Any) -> bool:
    """True for ``require('m')`` and ``require('m').member``."""
    if node is None:
        return False
    if node.type == "member_expression":
        node = node.child_by_field_name("object")
    return require_source(node) is not None


def collect_imports(root: Any) -> ImportTable:
    table = ImportTable()
    for node in iter_nodes(root):
        handler = _HANDLERS.get(node.type)
        if handler is not None:
            handler(node, table)
    return table


def _import_statement(node: Any, table: ImportTable) -> None:
    module = string_value(node.child_by_field_name("source"))
    for child in node.named_children:
        if child.type == "import_require_clause":
            _import_require_clause(child, table)
            return
    if module is None:
        return
    table.add(module)
    for child in node.named_children:
        if child.type == "import_clause":
            _import_clause(child, module, table)


def _import_clause(clause: Any, module: str, table: ImportTable) -> None:
    for part in clause.named_children:
        if part.type == "identifier":
            table.add(module, "default", node_text(part))
        elif part.type == "namespace_import":
            local = next((ch for ch in part.named_children if ch.type == "identifier"), None)
            if local is not None:
                table.add(module, "*", node_text(local))
        elif part.type == "named_imports":
            for spec in part.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                if name is None:
                    continue
                imported = string_value(name) if name.type == "string" else node_text(name)
                local = node_text(alias) if alias is not None else (
                    node_text(name) if name.type == "identifier" else None
                )
                table.add(module, imported, local)


def _import_require_clause(clause: Any, table: ImportTable) -> None:
    # TypeScript: import x = require('m')
    module = string_value(clause.child_by_field_name("source"))
    local = next((ch for ch in clause.named_children if ch.type == "identifier"), None)
    if module is None or local is None:
        return
    table.add(module, node_text(local), node_text(local))


def _variable_declarator(node: Any, table: ImportTable) -> None:
    module = require_source(node.child_by_field_name("value"))
    target = node.child_by_field_name("name")
    if module is None or target is None:
        return
    if target.type == "identifier":
        local = node_text(target)
        table.add(module, local, local)
    elif target.type == "object_pattern":
        table.add(module)
        for prop in target.named_children:
            if prop.type == "shorthand_property_identifier_pattern":
                local = node_text(prop)
                table.add(module, local, local)
            elif prop.type == "pair_pattern":
                key = prop.child_by_field_name("key")
                value = prop.child_by_field_name("value")
                if key is None or key.type != "property_identifier":
                    continue
                local = node_text(value) if value is not None and value.type == "identifier" else None
                table.add(module, node_text(key), local)


def _call_expression(node: Any, table: ImportTable) -> None:
    # require('m').member, optionally bound: const x = require('m').member
    module = require_source(node)
    parent = node.parent
    if module is None or parent is None or parent.type != "member_expression":
        return
    if parent.child_by_field_name("object") != node:
        return
    prop = parent.child_by_field_name("property")
    if prop is None or prop.type != "property_identifier":
        return
    alias = None
    holder = parent.parent
    if holder is not None and holder.type == "variable_declarator":
        name = holder.child_by_field_name("name")
        if name is not None and name.type == "identifier" and holder.child_by_field_name("value") == parent:
            alias = node_text(name)
    table.add(module, node_text(prop), alias)


_HANDLERS = {
    "import_statement": _import_statement,
    "variable_declarator": _variable_declarator,
    "call_expression": _call_expression,
}
