"""Tree-sitter front-end for JavaScript and TypeScript sources.

Picks a grammar from the file extension, parses the source and turns the
first ``ERROR``/``MISSING`` node into a :class:`~fnmap.errors.FnmapSyntaxError`.
Tree-sitter is error-tolerant, so a tree is always produced; the analyzer only
ever sees trees without errors.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from pathlib import PurePath
from typing import Any, Dict, Iterator, Optional, Tuple

from tree_sitter import Language, Node, Parser, Tree

from .errors import FnmapSyntaxError, format_error

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# Map language name -> (module providing the grammar, capsule factory)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}

DEFAULT_LANGUAGE = "javascript"


def language_for_path(file_path: Optional[str]) -> str:
    if not file_path:
        return DEFAULT_LANGUAGE
    return LANGUAGE_MAP.get(PurePath(file_path).suffix.lower(), DEFAULT_LANGUAGE)


@lru_cache(maxsize=None)
def load_language(lang: str) -> Language:
    """Return the tree-sitter ``Language`` for *lang* (grammars are immutable)."""
    mod_name, factory = _GRAMMAR_MODULES[lang]
    mod = importlib.import_module(mod_name)
    # tree-sitter >=0.22 per-language packages expose a function returning
    # the Language capsule.
    logger.debug("Loaded tree-sitter grammar for %s", lang)
    return Language(getattr(mod, factory)())


def parse_source(source: str, file_path: Optional[str] = None) -> Tree:
    """Parse *source* and raise :class:`FnmapSyntaxError` on any syntax error."""
    lang = language_for_path(file_path)
    parser = Parser(load_language(lang))
    tree = parser.parse(source.encode("utf-8"))

    bad = find_syntax_error(tree.root_node)
    if bad is not None:
        line = bad.start_point[0] + 1
        column = bad.start_point[1]
        message = format_error(
            f"Syntax error: {_describe(bad)}",
            file=file_path,
            line=line,
            column=column,
            suggestion="Check syntax errors in the file",
        )
        raise FnmapSyntaxError(message, line=line, column=column)
    return tree


def find_syntax_error(root: Node) -> Optional[Node]:
    """Return the first ``ERROR`` or ``MISSING`` node in document order."""
    if not root.has_error:
        return None
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        # Only subtrees flagged with has_error can contain the culprit.
        stack.extend(ch for ch in reversed(node.children) if ch.has_error or ch.is_missing)
    return root


def _describe(node: Node) -> str:
    if node.is_missing:
        return f"missing '{node.type}'"
    snippet = node_text(node).strip().splitlines()
    if not snippet:
        return "unexpected end of input"
    token = snippet[0][:30]
    return f"unexpected '{token}'"


# ---------------------------------------------------------------------------
# Node helpers shared by every pass
# ---------------------------------------------------------------------------

def node_text(node: Any) -> str:
    return node.text.decode("utf-8")


def string_value(node: Any) -> Optional[str]:
    """Return the contents of a string literal node, or None for other nodes."""
    if node is None or node.type != "string":
        return None
    raw = node_text(node)
    return raw[1:-1] if len(raw) >= 2 else ""


def has_token(node: Any, *tokens: str) -> bool:
    """True if an unnamed child token (``static``, ``get``, ``type``...) is present."""
    return any(not ch.is_named and ch.type in tokens for ch in node.children)


def line_range(node: Any) -> Tuple[int, int]:
    return node.start_point[0] + 1, node.end_point[0] + 1


def iter_nodes(root: Any) -> Iterator[Any]:
    """Yield *root* and every descendant in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
