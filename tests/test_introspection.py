"""
Unit tests for shinline introspection (function listing).
"""
import os
import tempfile

from shast.config import ResolverConfig
from shast.introspection import exported_functions, list_functions
from shast.parser import ParseOptions, parse


class TestListFunctions:
    """Tests for list_functions()."""

    def test_top_level_functions(self):
        script = parse("a() { echo a; }\nb() { echo b; }", ParseOptions(insert_loc=True))
        assert list_functions(script) == [
            {"type": "function", "name": "a", "line": 1, "nested": False},
            {"type": "function", "name": "b", "line": 2, "nested": False},
        ]

    def test_nested_functions(self):
        """Inner functions are listed before the function holding them."""
        script = parse("outer() {\n  inner() { echo; }\n}", ParseOptions(insert_loc=True))
        functions = list_functions(script)
        assert [(f["name"], f["line"], f["nested"]) for f in functions] == [
            ("inner", 2, True),
            ("outer", 1, False),
        ]

    def test_without_locations(self):
        functions = list_functions(parse("f() { :; }"))
        assert functions[0]["line"] is None

    def test_no_functions(self):
        assert list_functions(parse("echo hi | wc -c")) == []

    def test_tree_unchanged(self):
        script = parse("f() { echo; }\nls")
        before = script.model_dump()
        list_functions(script)
        assert script.model_dump() == before


class TestExportedFunctions:
    """Tests for exported_functions()."""

    def test_qualified_names(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'net.sh')
            with open(path, 'w') as f:
                f.write('# helpers\nfetch() { curl "$1"; }\n\npost() {\n  curl -X POST "$1"\n}\necho loaded\n')

            assert exported_functions(path) == [
                {"type": "function", "name": "fetch", "qualified": "net::fetch", "line": 2},
                {"type": "function", "name": "post", "qualified": "net::post", "line": 4},
            ]

    def test_custom_separator(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'util.sh')
            with open(path, 'w') as f:
                f.write('greet() { echo hi; }')

            functions = exported_functions(path, ResolverConfig(separator="."))
            assert functions[0]["qualified"] == "util.greet"
