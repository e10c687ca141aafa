"""
Tests for the bundled rules.

Each rule runs over a Python snippet parsed with the tree-sitter adapter.
"""

import logging
import pytest
from pathlib import Path
from typing import Any, Dict, List
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

pytest.importorskip("tree_sitter")
pytest.importorskip("tree_sitter_python")

from treequery.python_adapter import PythonAdapter
from treequery.reporting import apply_edits
from treequery.types import Finding, RuleContext
from treequery_rules import (
    OverviewStripImplementationsRule, StructureNestedDataclassRule, SymbolsDefinitionsRule,
    UsageCallSitesRule,
)

_adapter = PythonAdapter()


def create_test_context(code: str, config: Dict[str, Any] = None) -> RuleContext:
    """Create a RuleContext for testing."""
    return RuleContext(
        file_path="test.py",
        text=code,
        tree=_adapter.parse(code),
        adapter=_adapter,
        config=config or {},
    )


def run_rule(rule, code: str, config: Dict[str, Any] = None) -> List[Finding]:
    return list(rule.visit(create_test_context(code, config)))


class TestNestedDataclass:

    def test_top_level_dataclass_is_info(self):
        code = (
            "from dataclasses import dataclass\n"
            "\n"
            "@dataclass\n"
            "class Point:\n"
            "    x: int\n"
        )
        findings = run_rule(StructureNestedDataclassRule(), code)
        assert len(findings) == 1
        assert findings[0].severity == "info"
        assert findings[0].meta == {"name": "Point", "enclosing": []}

    def test_nested_dataclass_is_warned(self):
        code = (
            "import dataclasses\n"
            "\n"
            "class Outer:\n"
            "    class Middle:\n"
            "        @dataclasses.dataclass(frozen=True)\n"
            "        class Inner:\n"
            "            y: int\n"
        )
        findings = run_rule(StructureNestedDataclassRule(), code)
        assert len(findings) == 1
        assert findings[0].severity == "warn"
        assert findings[0].meta["enclosing"] == ["Middle", "Outer"]
        assert "nested inside class 'Middle'" in findings[0].message

    def test_dataclass_inside_function_is_not_nested_in_class(self):
        code = (
            "def factory():\n"
            "    @dataclass\n"
            "    class Local:\n"
            "        z: int\n"
            "    return Local\n"
        )
        findings = run_rule(StructureNestedDataclassRule(), code)
        assert [f.severity for f in findings] == ["info"]

    def test_plain_classes_are_ignored(self):
        code = (
            "class Outer:\n"
            "    @staticmethod\n"
            "    def helper():\n"
            "        pass\n"
            "    class Inner:\n"
            "        pass\n"
        )
        assert run_rule(StructureNestedDataclassRule(), code) == []


class TestStripImplementations:

    CODE = (
        "def annotated(a: int = 3, b=4) -> int:\n"
        "    return a + b\n"
        "\n"
        "\n"
        "def untyped(a):\n"
        "    return a\n"
        "\n"
        "\n"
        "class Service:\n"
        "    def run(self) -> None:\n"
        "        print('running')\n"
        "\n"
        "    @property\n"
        "    def name(self) -> str:\n"
        "        return 'svc'\n"
        "\n"
        "    class Nested:\n"
        "        def inner(self) -> bool:\n"
        "            return True\n"
    )

    def stripped(self, config=None):
        findings = run_rule(OverviewStripImplementationsRule(), self.CODE, config)
        edits = [e for f in findings for e in f.autofix]
        return findings, apply_edits(self.CODE, edits)

    def test_reports_each_annotated_function(self):
        findings, _ = self.stripped()
        assert [f.meta["name"] for f in findings] == ["annotated", "run", "name", "inner"]

    def test_bodies_and_annotated_defaults_are_replaced(self):
        _, result = self.stripped()
        assert "def annotated(a: int = ..., b=4) -> int:" in result
        assert "return a + b" not in result
        assert "print('running')" not in result
        assert "return 'svc'" not in result
        assert "return True" not in result
        assert "@property" in result

    def test_unannotated_functions_are_kept(self):
        _, result = self.stripped()
        assert "def untyped(a):\n    return a\n" in result

    def test_placeholder_is_configurable(self):
        _, result = self.stripped({"overview.strip_implementations": {"placeholder": "raise NotImplementedError"}})
        assert "raise NotImplementedError" in result
        assert "return a + b" not in result

    def test_annotated_assignment_values_are_replaced(self):
        code = (
            "LIMIT: int = compute_limit()\n"
            "plain = compute_plain()\n"
            "\n"
            "\n"
            "class C:\n"
            "    size: int = len(DATA)\n"
            "    name: str\n"
            "\n"
            "    def f(self) -> int:\n"
            "        local: int = 5\n"
            "        return local\n"
        )
        findings = run_rule(OverviewStripImplementationsRule(), code)
        assert [f.meta["name"] for f in findings] == ["LIMIT", "size", "f"]
        assert findings[0].message == "Stripped value of 'LIMIT'"

        result = apply_edits(code, [e for f in findings for e in f.autofix])
        assert "LIMIT: int = ...\n" in result
        assert "plain = compute_plain()" in result
        assert "size: int = ...\n" in result
        assert "name: str\n" in result
        assert "local: int = 5" not in result

    def test_functions_nested_in_stripped_bodies_are_not_reported(self):
        code = (
            "def outer() -> int:\n"
            "    def helper() -> int:\n"
            "        return 1\n"
            "    return helper()\n"
        )
        findings = run_rule(OverviewStripImplementationsRule(), code)
        assert [f.meta["name"] for f in findings] == ["outer"]


class TestCallSites:

    CODE = (
        "import os\n"
        "\n"
        "def load(path):\n"
        "    data = eval(open(path).read())\n"
        "    return os.path.join(path, data)\n"
        "\n"
        "value = builtins.eval('1')\n"
    )

    def test_reports_configured_calls(self):
        findings = run_rule(UsageCallSitesRule(), self.CODE, {"usage.call_sites": {"functions": ["eval"]}})
        assert [f.meta["callee"] for f in findings] == ["eval", "builtins.eval"]
        assert findings[0].meta["enclosing_function"] == "load"
        assert findings[0].meta["parent_kind"] == "assignment"
        assert findings[1].meta["enclosing_function"] is None

    def test_dotted_names_match_exactly(self):
        config = {"usage.call_sites": {"functions": ["os.path.join", "path.read"]}}
        findings = run_rule(UsageCallSitesRule(), self.CODE, config)
        assert [f.meta["callee"] for f in findings] == ["os.path.join"]
        assert findings[0].meta["syntax"] == "os.path.join(path, data)"

    def test_no_configuration_reports_nothing(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert run_rule(UsageCallSitesRule(), self.CODE) == []
        assert "No functions configured" in caplog.text


class TestSymbolDefinitions:

    def test_qualified_names(self):
        code = (
            "class A:\n"
            "    def m(self):\n"
            "        def local():\n"
            "            pass\n"
            "\n"
            "    class B:\n"
            "        pass\n"
            "\n"
            "def top():\n"
            "    pass\n"
        )
        findings = run_rule(SymbolsDefinitionsRule(), code)
        assert [f.message for f in findings] == [
            "class A",
            "function A.m",
            "function A.m.local",
            "class A.B",
            "function top",
        ]
        assert findings[0].meta["owner"] == "<module>"
        assert findings[2].meta["owner"] == "A.m"

    def test_empty_module(self):
        assert run_rule(SymbolsDefinitionsRule(), "") == []
