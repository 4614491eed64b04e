"""Tests for pure-type file classification."""

import pytest

from fnmap.parser import parse_source
from fnmap.purity import is_pure_type


def _pure(code: str) -> bool:
    return is_pure_type(parse_source(code, "types.ts").root_node)


@pytest.mark.parametrize(
    "code",
    [
        "type A = string;\ninterface B { x: A }\n",
        "import type { A } from './a';\nexport type { A };\n",
        "import { type A, type B } from './a';\n",
        "export interface C { id: number }\nexport type D = C[];\n",
        "export type { A } from './a';\n",
        "enum Color { Red, Green }\n",
        "declare const VERSION: string;\n",
        "// just a comment\n",
        "",
    ],
)
def test_pure_files(code):
    """Type-only statements keep a file pure."""
    assert _pure(code)


@pytest.mark.parametrize(
    "code",
    [
        "type A = string;\nconst x = 1;\n",
        "import { A } from './a';\n",
        "import { type A, b } from './a';\n",
        "import './polyfill';\n",
        "import fs = require('fs');\n",
        "export enum Color { Red }\n",
        "export default interface_value;\n",
        "export { value };\n",
        "function f() {}\n",
    ],
)
def test_impure_files(code):
    """Anything with a runtime effect makes the file impure."""
    assert not _pure(code)


def test_fixture_files(analyze_fixture):
    """The shared fixtures classify as expected."""
    assert analyze_fixture("types.ts").is_pure_type
    assert not analyze_fixture("sample.ts").is_pure_type
    assert not analyze_fixture("sample.js").is_pure_type
