"""Description extraction from documentation comments."""

from __future__ import annotations

import re
from typing import Any, List, Optional

from .parser import node_text

DESCRIPTION_LIMIT = 60
_DESCRIPTION_TAG = "@description "
_STAR_PREFIX = re.compile(r"^\s*\*\s?")
_FILE_DOC = re.compile(r"^/\*\*[\s\S]*?\*/")


def comment_lines(text: str) -> List[str]:
    """Strip comment delimiters and leading ``*`` from every line of a comment."""
    if text.startswith("//"):
        body = text[2:]
    elif text.startswith("/*"):
        body = text[2:-2] if text.endswith("*/") else text[2:]
    else:
        body = text
    return [_STAR_PREFIX.sub("", line).strip() for line in body.split("\n")]


def extract_description(comment: Optional[Any]) -> str:
    """Return the description carried by a comment node.

    An explicit ``@description`` tag wins; otherwise the first non-empty line
    that is not a tag. Truncated to 60 characters.
    """
    if comment is None:
        return ""
    lines = comment_lines(node_text(comment))
    for line in lines:
        if line.startswith(_DESCRIPTION_TAG):
            return line[len(_DESCRIPTION_TAG):].strip()[:DESCRIPTION_LIMIT]
    for line in lines:
        if line and not line.startswith("@") and not line.startswith("/"):
            return line[:DESCRIPTION_LIMIT]
    return ""


def leading_comment(node: Any) -> Optional[Any]:
    """Return the comment directly preceding *node* or its export wrapper."""
    comment = _preceding_comment(node)
    parent = node.parent
    if comment is None and parent is not None and parent.type == "export_statement":
        comment = _preceding_comment(parent)
    return comment


def _preceding_comment(node: Any) -> Optional[Any]:
    prev = node.prev_sibling
    if prev is None or prev.type != "comment":
        return None
    before = prev.prev_sibling
    # `foo(); // note` belongs to foo(), not to whatever follows it
    if (
        before is not None
        and before.is_named
        and before.type != "comment"
        and before.end_point[0] == prev.start_point[0]
    ):
        return None
    return prev


def file_description(code: str) -> str:
    """Description from a ``/** ... */`` block opening the file."""
    match = _FILE_DOC.match(code)
    if not match:
        return ""
    lines = [
        line
        for line in comment_lines(match.group(0))
        if line and not line.startswith("/") and not line.startswith("@ai")
    ]
    for line in lines:
        if line.startswith(_DESCRIPTION_TAG):
            return line[len(_DESCRIPTION_TAG):].strip()
    for line in lines:
        if not line.startswith("@"):
            return line
    return ""
