"""Pass driver: source text -> :class:`~fnmap.models.Module`.

Passes run in a fixed order because each one feeds the next::

    imports -> declarations -> purity -> usage & call graph
"""

from __future__ import annotations

import logging
from typing import Optional

from .callgraph import build_call_graph, record_usage
from .extractor import extract_declarations
from .imports import collect_imports
from .jsdoc import file_description
from .models import Module
from .parser import parse_source
from .purity import is_pure_type

logger = logging.getLogger(__name__)


def analyze_source(code: str, file_path: Optional[str] = None) -> Module:
    """Analyze one JavaScript/TypeScript source.

    Raises :class:`~fnmap.errors.FnmapSyntaxError` when the source does not
    parse cleanly; a partial :class:`Module` is never returned.
    """
    tree = parse_source(code, file_path)
    root = tree.root_node

    table = collect_imports(root)
    declarations = extract_declarations(root)
    pure = is_pure_type(root)
    callables = declarations.callable_names()
    record_usage(root, table, callables)
    call_graph = build_call_graph(root, table, declarations.declared_names(), callables)

    logger.debug(
        "Analyzed %s: %d functions, %d classes, %d call edges",
        file_path or "<source>",
        len(declarations.functions),
        len(declarations.classes),
        sum(len(v) for v in call_graph.values()),
    )
    return Module(
        description=file_description(code),
        imports=table.bindings(),
        functions=tuple(declarations.functions.values()),
        classes=tuple(declarations.classes.values()),
        constants=tuple(declarations.constants.values()),
        exports=tuple(declarations.exports),
        call_graph=call_graph,
        is_pure_type=pure,
    )
