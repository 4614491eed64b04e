"""Tests for import and require collection."""

from fnmap.imports import collect_imports, is_module_load, require_source
from fnmap.parser import iter_nodes, parse_source


def _table(code: str, path: str = "a.js"):
    return collect_imports(parse_source(code, path).root_node)


class TestEsImports:
    """ES module import forms."""

    def test_default_namespace_and_named(self):
        table = _table(
            "import React from 'react';\n"
            "import * as fs from 'fs';\n"
            "import { join, resolve as res } from 'path';\n"
        )
        assert table.members == {
            "react": {"default": None},
            "fs": {"*": None},
            "path": {"join": None, "resolve": None},
        }
        assert table.aliases == {"React": "react", "fs": "fs", "join": "path", "res": "path"}

    def test_side_effect_import_has_no_members(self):
        table = _table("import './setup';\n")
        assert table.members == {"./setup": {}}
        assert table.aliases == {}

    def test_typescript_import_require(self):
        table = _table("import fs = require('fs');\n", "a.ts")
        assert table.members == {"fs": {"fs": None}}
        assert table.aliases == {"fs": "fs"}


class TestRequire:
    """CommonJS require forms."""

    def test_plain_require(self):
        table = _table("const path = require('path');\n")
        assert table.members == {"path": {"path": None}}
        assert table.aliases == {"path": "path"}

    def test_destructured_require(self):
        table = _table("const { readFile, writeFile: save } = require('fs');\n")
        assert table.members == {"fs": {"readFile": None, "writeFile": None}}
        assert table.aliases == {"readFile": "fs", "save": "fs"}

    def test_require_member(self):
        table = _table("const parse = require('url').parse;\nrequire('os').platform();\n")
        assert table.members == {"url": {"parse": None}, "os": {"platform": None}}
        assert table.aliases == {"parse": "url"}

    def test_dynamic_require_is_skipped(self):
        table = _table("const mod = require(name);\n")
        assert table.members == {}

    def test_is_module_load(self):
        root = parse_source("const a = require('a').b;\nconst c = f('a');\n", "a.js").root_node
        values = [n.child_by_field_name("value") for n in iter_nodes(root) if n.type == "variable_declarator"]
        assert [is_module_load(v) for v in values] == [True, False]
        assert require_source(values[1]) is None


class TestUsage:
    """Usage bookkeeping on the import table."""

    def test_bindings_merge_usage_per_module(self):
        table = _table("import { a, b } from 'm';\n")
        table.record_use("a", "first")
        table.record_use("b", "second")
        table.record_use("a", "first")

        (binding,) = table.bindings()
        assert binding.module == "m"
        assert binding.members == ("a", "b")
        assert binding.used_in == ("first", "second")

    def test_rebinding_alias_resets_usage(self):
        table = _table("import x from 'one';\n")
        table.record_use("x", "caller")
        table.add("two", "default", "x")

        assert table.aliases["x"] == "two"
        assert {b.module: b.used_in for b in table.bindings()} == {"one": (), "two": ()}
