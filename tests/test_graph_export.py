"""Tests for Mermaid call-graph export."""

import re

from fnmap.analyzer import analyze_source
from fnmap.graph_export import export_file_mermaid, export_project_mermaid, safe_id
from fnmap.models import FileEntry, FunctionRecord, Module


SAMPLE_DIAGRAM = "\n".join(
    [
        "flowchart TD",
        '  subgraph id_sample["sample"]',
        '    id_add["add"]',
        '    id_multiply["multiply"]',
        '    id_calculate["calculate"]',
        "  end",
        "  id_calculate --> id_add",
        "  id_calculate --> id_multiply",
    ]
)

_NODE = re.compile(r"^\s+(\S+)\[\"")


def _node_ids(diagram: str):
    return [m.group(1) for m in map(_NODE.match, diagram.splitlines()) if m]


class TestSafeId:
    def test_alphanumerics_pass_through(self):
        assert safe_id("calculate2") == "id_calculate2"

    def test_other_characters_are_encoded(self):
        assert safe_id("Class.method") == "id_Class_46_method"
        assert safe_id('say"hi"') == "id_say_34_hi_34_"

    def test_distinct_names_stay_distinct(self):
        assert safe_id("test.js") != safe_id("test_js")


class TestFileDiagram:
    """Single-file flowcharts."""

    def test_sample_diagram(self, sample_module):
        assert export_file_mermaid("sample.js", sample_module) == SAMPLE_DIAGRAM

    def test_no_callables_gives_none(self):
        module = analyze_source("const x = 1;\n")
        assert export_file_mermaid("consts.js", module) is None

    def test_quotes_in_names(self):
        """Quotes are escaped in labels and encoded in ids."""
        module = Module(functions=(FunctionRecord(name='say"hi"', params="", start_line=1, end_line=1),))
        diagram = export_file_mermaid("q.js", module)
        assert 'id_say_34_hi_34_["say#quot;hi#quot;"]' in diagram

    def test_method_edges_resolve_within_class(self, service_module):
        diagram = export_file_mermaid("service.js", service_module)
        assert "  id_ApiClient_46_fetchJson --> id_ApiClient_46_parse" in diagram
        # imported callees have no node in the diagram
        assert "axios" not in diagram.split("  end", 1)[1]

    def test_node_ids_unique(self, service_module):
        ids = _node_ids(export_file_mermaid("service.js", service_module))
        assert len(ids) == len(set(ids))


class TestProjectDiagram:
    """Cross-file flowcharts."""

    def test_files_with_similar_names(self):
        """test.js and test_js get distinct clusters."""
        one = analyze_source("function a() {}\n")
        two = analyze_source("function a() {}\n")
        diagram = export_project_mermaid([FileEntry("test.js", one), FileEntry("test_js", two)])

        assert '  subgraph id_test_46_js["test.js"]' in diagram
        assert '  subgraph id_test_95_js["test_js"]' in diagram
        assert "    id_test_46_js_id_a[\"a\"]" in diagram
        assert "    id_test_95_js_id_a[\"a\"]" in diagram

    def test_cross_file_edges(self):
        lib = analyze_source("function helper() {}\n")
        app = analyze_source(
            "const { helper } = require('./lib');\n"
            "function main() {\n"
            "  helper();\n"
            "  helper();\n"
            "}\n"
        )
        diagram = export_project_mermaid([FileEntry("lib.js", lib), FileEntry("app.js", app)])

        edge = "  id_app_46_js_id_main --> id_lib_46_js_id_helper"
        assert diagram.count(edge) == 1

    def test_same_file_wins(self, sample_module):
        other = analyze_source("function add() {}\n")
        diagram = export_project_mermaid(
            [FileEntry("other.js", other), FileEntry("sample.js", sample_module)]
        )
        assert "id_sample_46_js_id_calculate --> id_sample_46_js_id_add" in diagram
        assert "--> id_other_46_js_id_add" not in diagram

    def test_files_without_callables_are_skipped(self, analyze_fixture, sample_module):
        diagram = export_project_mermaid(
            [FileEntry("types.ts", analyze_fixture("types.ts")), FileEntry("sample.js", sample_module)]
        )
        assert "types" not in diagram
        ids = _node_ids(diagram)
        assert len(ids) == len(set(ids)) == 3
