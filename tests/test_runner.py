"""
Tests for the CLI runner.
"""

import importlib.util
import io
import json
import logging
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from treequery.config import get_default_config
from treequery.python_adapter import PythonAdapter
from treequery.registry import get_registry
from treequery.runner import analyze_file, analyze_paths, build_parser, main, strip_source
from treequery.types import Finding, Requires, RuleMeta

needs_grammar = pytest.mark.skipif(
    not all(importlib.util.find_spec(m) for m in ("tree_sitter", "tree_sitter_python")),
    reason="tree-sitter-python not installed",
)

SAMPLE = (
    "from dataclasses import dataclass\n"
    "\n"
    "\n"
    "class Registry:\n"
    "    @dataclass\n"
    "    class Entry:\n"
    "        key: str\n"
    "\n"
    "    def lookup(self, key: str) -> str:\n"
    "        return eval(key)  # treequery: ignore[usage.call_sites]\n"
    "\n"
    "\n"
    "def run() -> None:\n"
    "    eval('1')\n"
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    (tmp_path / "app.py").write_text(SAMPLE, encoding="utf-8")
    (tmp_path / "treequery.yml").write_text(
        "rule_configs:\n"
        "  usage.call_sites:\n"
        "    functions: [eval]\n"
        "rule_severities:\n"
        "  symbols.definitions: warn\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def run_cli(*argv):
    sink = io.StringIO()
    code = main(list(argv), sink=sink)
    return code, sink.getvalue()


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_find_sources(project):
    (project / "pkg").mkdir()
    (project / "pkg" / "mod.py").write_text("", encoding="utf-8")
    code, output = run_cli("find-sources", str(project))
    assert code == 0
    assert [Path(line).name for line in output.splitlines()] == ["app.py", "mod.py"]


@needs_grammar
def test_show_tree(project):
    code, output = run_cli("show-tree", "app.py", "--width", "60")
    assert code == 0
    assert "File: app.py" in output
    assert "class_definition" in output
    assert "name: identifier" in output


@needs_grammar
def test_lint_json(project):
    code, output = run_cli("lint", "--paths", ".", "--format", "json")
    assert code == 0
    report = json.loads(output)
    rules = {f["rule_id"] for f in report["findings"]}
    assert rules == {
        "structure.nested_dataclass", "overview.strip_implementations",
        "usage.call_sites", "symbols.definitions",
    }

    # the suppressed eval call is gone, the other one stays
    calls = [f for f in report["findings"] if f["rule_id"] == "usage.call_sites"]
    assert len(calls) == 1
    assert calls[0]["range"]["startLine"] == 14

    severities = {f["severity"] for f in report["findings"] if f["rule_id"] == "symbols.definitions"}
    assert severities == {"warn"}


@needs_grammar
def test_lint_rule_patterns(project):
    code, output = run_cli("lint", "--paths", "app.py", "--rules", "structure.*", "--format", "pretty")
    assert code == 0
    assert "Found 1 findings" in output
    assert "WARN 6:5: Dataclass 'Entry' nested inside class 'Registry'" in output


@needs_grammar
def test_strip(project):
    code, output = run_cli("strip", "app.py")
    assert code == 0
    assert "def lookup(self, key: str) -> str:" in output
    assert "return eval(key)" not in output
    assert "eval('1')" not in output
    assert "key: str\n" in output


def test_lint_without_files(project):
    code, _ = run_cli("lint", "--paths", str(project / "missing"))
    assert code == 1


def test_bad_config_is_reported(project):
    (project / "broken.yml").write_text("unknown_key: 1\n", encoding="utf-8")
    code, _ = run_cli("--config", "broken.yml", "find-sources", ".")
    assert code == 1


class ExplodingRule:
    """Text-only rule that fails on files mentioning 'boom'."""
    meta = RuleMeta(id="test.exploding", category="test", langs=["python"])
    requires = Requires(syntax=False)

    def visit(self, ctx):
        if "boom" in ctx.text:
            raise RuntimeError("rule blew up")
        yield Finding(rule=self.meta.id, message="checked", file=ctx.file_path,
                      start_byte=0, end_byte=0, severity="info")


class TreeSeenRule:
    """Records whether it was handed a parse tree."""
    meta = RuleMeta(id="test.tree_seen", category="test", langs=["python"])
    requires = Requires(syntax=False)

    def visit(self, ctx):
        yield Finding(rule=self.meta.id, message=str(ctx.tree is None), file=ctx.file_path,
                      start_byte=0, end_byte=0, severity="info")


@pytest.fixture
def failing_rules():
    registry = get_registry()
    registry.register_rule(ExplodingRule())
    registry.register_rule(TreeSeenRule())
    yield registry
    registry.clear()


def test_failing_rule_does_not_stop_other_rules(caplog):
    rules = [ExplodingRule(), TreeSeenRule()]
    with caplog.at_level(logging.WARNING):
        findings = analyze_file("bad.py", PythonAdapter(), rules, get_default_config(), content="boom\n")
    assert [f.rule for f in findings] == ["test.tree_seen"]
    # text-only rules are not handed a tree
    assert findings[0].message == "True"
    assert "Rule test.exploding failed on bad.py: rule blew up" in caplog.text


def test_failing_file_does_not_stop_the_run(tmp_path, failing_rules, caplog):
    (tmp_path / "a_bad.py").write_text("boom = 1\n", encoding="utf-8")
    (tmp_path / "b_ok.py").write_text("fine = 1\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        findings, files, rules, _, _ = analyze_paths([str(tmp_path)], ["test.*"], get_default_config())

    assert [Path(f).name for f in files] == ["a_bad.py", "b_ok.py"]
    assert sorted(r.meta.id for r in rules) == ["test.exploding", "test.tree_seen"]
    checked = [Path(f.file).name for f in findings if f.rule == "test.exploding"]
    assert checked == ["b_ok.py"]
    assert "a_bad.py" in caplog.text


@needs_grammar
def test_strip_source_replaces_annotated_values():
    code = "class C:\n    limit: int = compute_limit()\n\n    def f(self) -> int:\n        return 1\n"
    result = strip_source(code, get_default_config())
    assert "limit: int = ...\n" in result
    assert "compute_limit" not in result
    assert "return 1" not in result
