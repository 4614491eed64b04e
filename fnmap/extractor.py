"""Structural extraction (pass 2): functions, classes, constants and exports.

Records are kept in name-keyed dicts while walking, so a later declaration
with the same key replaces an earlier one but keeps its position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .imports import is_module_load
from .jsdoc import extract_description, leading_comment
from .models import (
    ClassRecord,
    ConstantRecord,
    ExportKind,
    ExportRecord,
    FunctionRecord,
    MethodKind,
    MethodRecord,
)
from .parser import has_token, iter_nodes, line_range, node_text, string_value

logger = logging.getLogger(__name__)

DEFAULT_NAME = "[default]"
EXPORTS_NAME = "[exports]"
ANONYMOUS_NAME = "[anonymous]"
COMPUTED_NAME = "[computed]"

FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
FUNCTION_VALUES = frozenset({"arrow_function", "function_expression", "function", "generator_function"})
CLASS_DECLARATIONS = frozenset({"class_declaration", "abstract_class_declaration"})
VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})
TYPE_DECLARATIONS = frozenset({"type_alias_declaration", "interface_declaration"})


@dataclass
class Declarations:
    functions: Dict[str, FunctionRecord] = field(default_factory=dict)
    classes: Dict[str, ClassRecord] = field(default_factory=dict)
    constants: Dict[str, ConstantRecord] = field(default_factory=dict)
    exports: List[ExportRecord] = field(default_factory=list)

    def declared_names(self) -> Set[str]:
        """Function names, bare method names and ``Class.method`` names."""
        names = set(self.functions)
        for cls in self.classes.values():
            for method in cls.methods:
                names.add(method.name)
                names.add(cls.qualname(method))
        return names

    def callable_names(self) -> Set[str]:
        """Names a call site may be attributed to: functions and ``Class.method``."""
        names = set(self.functions)
        for cls in self.classes.values():
            names.update(cls.qualname(method) for method in cls.methods)
        return names


# ---------------------------------------------------------------------------
# Naming helpers (shared with the call-graph builder)
# ---------------------------------------------------------------------------

def is_module_exports(node: Any) -> bool:
    """True for the ``module.exports`` member expression."""
    if node is None or node.type != "member_expression":
        return False
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    return (
        obj is not None
        and prop is not None
        and obj.type == "identifier"
        and node_text(obj) == "module"
        and node_text(prop) == "exports"
    )


def _is_default_export(node: Any) -> bool:
    parent = node.parent
    return parent is not None and parent.type == "export_statement" and has_token(parent, "default")


def declarator_name(node: Any) -> Optional[str]:
    """Variable name when *node* is the value of ``const|let|var name = node``."""
    parent = node.parent
    if parent is None or parent.type != "variable_declarator":
        return None
    if parent.child_by_field_name("value") != node:
        return None
    target = parent.child_by_field_name("name")
    if target is None or target.type != "identifier":
        return None
    return node_text(target)


def class_name(node: Any) -> Optional[str]:
    """Record name of a class declaration or class expression."""
    if node.type == "class":
        bound = declarator_name(node)
        if bound:
            return bound
    name = node.child_by_field_name("name")
    if name is not None:
        return node_text(name)
    parent = node.parent
    if parent is not None and parent.type == "export_statement":
        return DEFAULT_NAME
    if parent is not None and parent.type == "assignment_expression":
        if is_module_exports(parent.child_by_field_name("left")):
            return EXPORTS_NAME
    return None


def method_name(node: Any) -> str:
    name = node.child_by_field_name("name")
    if name is not None and name.type in ("property_identifier", "private_property_identifier"):
        return node_text(name)
    return COMPUTED_NAME


def method_kind(node: Any) -> MethodKind:
    if has_token(node, "get"):
        return MethodKind.GETTER
    if has_token(node, "set"):
        return MethodKind.SETTER
    if not has_token(node, "static") and method_name(node) == "constructor":
        return MethodKind.CONSTRUCTOR
    return MethodKind.METHOD


def super_class_name(class_node: Any) -> Optional[str]:
    """Root identifier of the ``extends`` expression (``a.b.C`` gives ``a``)."""
    heritage = next((ch for ch in class_node.named_children if ch.type == "class_heritage"), None)
    if heritage is None:
        return None
    expr = None
    for child in heritage.named_children:
        if child.type == "extends_clause":
            expr = child.child_by_field_name("value")
            break
        if child.type in ("implements_clause", "comment"):
            continue
        expr = child
        break
    while expr is not None and expr.type == "member_expression":
        expr = expr.child_by_field_name("object")
    if expr is None or expr.type != "identifier":
        return None
    return node_text(expr)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

def params_signature(fn_node: Any) -> str:
    """Normalized, comma-joined parameter list of a function-like node."""
    single = fn_node.child_by_field_name("parameter")
    if single is not None:
        return _param(single)
    params = fn_node.child_by_field_name("parameters")
    if params is None:
        return ""
    return ",".join(
        _param(p) for p in params.named_children if p.type not in ("comment", "decorator")
    )


def _param(node: Any) -> str:
    kind = node.type
    if kind == "identifier":
        return node_text(node)
    if kind == "assignment_pattern":
        left = node.child_by_field_name("left")
        return f"{node_text(left)}?" if left is not None and left.type == "identifier" else "?"
    if kind == "rest_pattern":
        target = next((ch for ch in node.named_children if ch.type == "identifier"), None)
        return f"...{node_text(target)}" if target is not None else "?"
    if kind in ("required_parameter", "optional_parameter"):
        pattern = node.child_by_field_name("pattern")
        if pattern is None:
            return "?"
        if pattern.type == "rest_pattern":
            return _param(pattern)
        if pattern.type != "identifier":
            return "?"
        if node.child_by_field_name("value") is not None:
            return f"{node_text(pattern)}?"
        return node_text(pattern)
    return "?"


# ---------------------------------------------------------------------------
# Extraction walk
# ---------------------------------------------------------------------------

def _description(node: Any) -> str:
    return extract_description(leading_comment(node))


class _Extractor:
    def __init__(self) -> None:
        self.result = Declarations()

    # -- record helpers -----------------------------------------------------

    def add_function(self, name: str, fn_node: Any, span_node: Any, description: str) -> None:
        start, end = line_range(span_node)
        self.result.functions[name] = FunctionRecord(
            name=name,
            params=params_signature(fn_node),
            start_line=start,
            end_line=end,
            description=description,
        )

    def add_class(self, name: str, class_node: Any, span_node: Any, description: str) -> None:
        start, end = line_range(span_node)
        self.result.classes[name] = ClassRecord(
            name=name,
            start_line=start,
            end_line=end,
            super_class=super_class_name(class_node),
            description=description,
            methods=_methods(class_node),
        )

    def add_constant(self, name: str, line: int, description: str) -> None:
        self.result.constants[name] = ConstantRecord(name=name, line=line, description=description)

    # -- node handlers --------------------------------------------------------

    def visit(self, node: Any) -> None:
        handler = getattr(self, f"visit_{node.type}", None)
        if handler is not None:
            handler(node)

    def visit_function_declaration(self, node: Any) -> None:
        if _is_default_export(node):
            return
        name = node.child_by_field_name("name")
        self.add_function(node_text(name) if name is not None else ANONYMOUS_NAME, node, node, _description(node))

    visit_generator_function_declaration = visit_function_declaration

    def visit_class_declaration(self, node: Any) -> None:
        if _is_default_export(node):
            return
        name = node.child_by_field_name("name")
        self.add_class(node_text(name) if name is not None else ANONYMOUS_NAME, node, node, _description(node))

    visit_abstract_class_declaration = visit_class_declaration

    def visit_lexical_declaration(self, node: Any) -> None:
        parent = node.parent
        if parent is None or parent.type not in ("program", "export_statement"):
            return
        description = _description(node)
        is_const = has_token(node, "const")
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            target = declarator.child_by_field_name("name")
            if target is None or target.type != "identifier":
                continue
            name = node_text(target)
            value = declarator.child_by_field_name("value")
            if value is not None and value.type in FUNCTION_VALUES:
                self.add_function(name, value, node, description)
                continue
            if value is not None and value.type == "class":
                self.add_class(name, value, node, description)
                continue
            if value is not None and value.type == "object":
                self._object_members(name, value)
            if is_const and not is_module_load(value):
                self.add_constant(name, line_range(node)[0], description)

    visit_variable_declaration = visit_lexical_declaration

    def visit_export_statement(self, node: Any) -> None:
        if not has_token(node, "default"):
            return
        target = node.child_by_field_name("declaration")
        if target is None:
            target = node.child_by_field_name("value")
        if target is None:
            return
        description = _description(node)
        if target.type in FUNCTION_DECLARATIONS or target.type in FUNCTION_VALUES:
            name = target.child_by_field_name("name")
            self.add_function(node_text(name) if name is not None else DEFAULT_NAME, target, node, description)
        elif target.type in CLASS_DECLARATIONS or target.type == "class":
            name = target.child_by_field_name("name")
            self.add_class(node_text(name) if name is not None else DEFAULT_NAME, target, node, description)

    def visit_expression_statement(self, node: Any) -> None:
        parent = node.parent
        if parent is None or parent.type != "program":
            return
        assignment = next((ch for ch in node.named_children if ch.type == "assignment_expression"), None)
        if assignment is None:
            return
        left = assignment.child_by_field_name("left")
        right = assignment.child_by_field_name("right")
        if left is None or right is None:
            return
        if is_module_exports(left):
            if right.type in FUNCTION_VALUES:
                name = right.child_by_field_name("name")
                label = node_text(name) if name is not None else EXPORTS_NAME
                self.add_function(label, right, assignment, _description(node))
            elif right.type == "class":
                self.add_class(class_name(right) or EXPORTS_NAME, right, assignment, _description(node))
            return
        if left.type != "member_expression" or right.type not in FUNCTION_VALUES:
            return
        obj = left.child_by_field_name("object")
        prop = left.child_by_field_name("property")
        if obj is None or prop is None or prop.type != "property_identifier":
            return
        if (obj.type == "identifier" and node_text(obj) == "exports") or is_module_exports(obj):
            self.add_function(node_text(prop), right, assignment, _description(node))

    def _object_members(self, container: str, obj: Any) -> None:
        for prop in obj.named_children:
            if prop.type == "method_definition":
                name = method_name(prop)
                self.add_function(f"{container}.{name}", prop, prop, _description(prop))
            elif prop.type == "pair":
                value = prop.child_by_field_name("value")
                if value is None or value.type not in FUNCTION_VALUES:
                    continue
                key = prop.child_by_field_name("key")
                # string and computed keys on properties are not indexed
                if key is None or key.type != "property_identifier":
                    continue
                self.add_function(f"{container}.{node_text(key)}", value, prop, _description(prop))


def _methods(class_node: Any) -> Tuple[MethodRecord, ...]:
    body = class_node.child_by_field_name("body")
    if body is None:
        return ()
    methods: Dict[Tuple[str, bool, str], MethodRecord] = {}
    for member in body.named_children:
        if member.type != "method_definition":
            # signatures, fields and static blocks carry no callable body
            continue
        kind = method_kind(member)
        record = MethodRecord(
            name=method_name(member),
            params=params_signature(member),
            line=line_range(member)[0],
            static=has_token(member, "static", "static get"),
            kind=kind,
            description=_description(member),
        )
        accessor = kind.value if kind in (MethodKind.GETTER, MethodKind.SETTER) else "method"
        methods[(record.name, record.static, accessor)] = record
    return tuple(methods.values())


def _exports(root: Any) -> List[ExportRecord]:
    exports: List[ExportRecord] = []
    for stmt in root.named_children:
        if stmt.type != "export_statement":
            continue
        line = line_range(stmt)[0]
        clause = next((ch for ch in stmt.named_children if ch.type == "export_clause"), None)
        if clause is not None:
            all_types = has_token(stmt, "type")
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                exports.append(_export_specifier(spec, all_types, line))
            continue
        if has_token(stmt, "default"):
            exports.append(ExportRecord(name="default", kind=ExportKind.DEFAULT, local_name=_default_local(stmt), line=line))
            continue
        decl = stmt.child_by_field_name("declaration")
        if decl is None:
            continue
        for name, kind in _declared_exports(decl):
            exports.append(ExportRecord(name=name, kind=kind, line=line))
    return exports


def _export_specifier(spec: Any, all_types: bool, line: int) -> ExportRecord:
    name = spec.child_by_field_name("name")
    alias = spec.child_by_field_name("alias")
    local = string_value(name) if name.type == "string" else node_text(name)
    if alias is None:
        exported = local
    else:
        exported = string_value(alias) if alias.type == "string" else node_text(alias)
    kind = ExportKind.TYPE if all_types or has_token(spec, "type") else ExportKind.VALUE
    return ExportRecord(
        name=exported,
        kind=kind,
        local_name=local if local != exported else None,
        line=line,
    )


def _default_local(stmt: Any) -> Optional[str]:
    decl = stmt.child_by_field_name("declaration")
    if decl is not None and (decl.type in FUNCTION_DECLARATIONS or decl.type in CLASS_DECLARATIONS):
        name = decl.child_by_field_name("name")
        return node_text(name) if name is not None else None
    value = stmt.child_by_field_name("value")
    if value is None:
        return None
    if value.type == "identifier":
        return node_text(value)
    if value.type in FUNCTION_VALUES or value.type == "class":
        name = value.child_by_field_name("name")
        return node_text(name) if name is not None else None
    return None


def _declared_exports(decl: Any) -> List[Tuple[str, ExportKind]]:
    if decl.type in FUNCTION_DECLARATIONS or decl.type in CLASS_DECLARATIONS or decl.type == "enum_declaration":
        name = decl.child_by_field_name("name")
        return [(node_text(name), ExportKind.VALUE)] if name is not None else []
    if decl.type in VARIABLE_DECLARATIONS:
        names = []
        for declarator in decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            target = declarator.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                names.append((node_text(target), ExportKind.VALUE))
        return names
    if decl.type in TYPE_DECLARATIONS:
        name = decl.child_by_field_name("name")
        return [(node_text(name), ExportKind.TYPE)] if name is not None else []
    logger.debug("Skipping export of %s", decl.type)
    return []


def extract_declarations(root: Any) -> Declarations:
    extractor = _Extractor()
    for node in iter_nodes(root):
        extractor.visit(node)
    extractor.result.exports = _exports(root)
    return extractor.result
