"""
CLI runner for the treequery engine.

This module provides the ``treequery`` command: it parses files with the
Python adapter, runs rules over the resulting query trees and writes reports.

Examples:
  treequery show-tree app.py
  treequery lint --paths src/ --rules "symbols.*,usage.*" --format pretty
  treequery strip app.py > app_overview.py
  treequery find-sources src/
"""

import argparse
import logging
import sys
import time
from typing import Dict, List, Optional, TextIO, Tuple

from .config import EngineConfig, find_config_file, get_rule_severity, load_config
from .errors import TreeQueryError
from .python_adapter import PythonAdapter
from .registry import discover_rules, get_enabled_rules
from .reporting import Reporter, apply_edits
from .suppressions import filter_suppressed_findings
from .types import Finding, RuleContext

logger = logging.getLogger(__name__)

DEFAULT_RULE_PACKAGES = ["treequery_rules"]


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI use (messages go to stderr)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_source(file_path: str) -> str:
    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def analyze_file(file_path: str, adapter: PythonAdapter, rules: List, config: EngineConfig,
                 content: Optional[str] = None) -> List[Finding]:
    """Parse one file, run the rules over its tree and return the surviving findings.

    Args:
        file_path: Path to the file (used for context even if content is provided)
        adapter: Language adapter producing the query tree
        rules: Rules to run
        config: Engine configuration
        content: Optional file content (if None, reads from disk)
    """
    if content is None:
        content = read_source(file_path)

    # Text-only rule sets skip the parse
    needs_syntax = any(getattr(rule, "requires", None) is None or rule.requires.syntax for rule in rules)
    tree = adapter.parse(content) if needs_syntax else None
    context = RuleContext(
        file_path=file_path,
        text=content,
        tree=tree,
        adapter=adapter,
        config=config.rule_configs,
    )

    findings = []
    for rule in rules:
        try:
            rule_findings = list(rule.visit(context))
        except Exception as e:
            logger.warning("Rule %s failed on %s: %s", rule.meta.id, file_path, e)
            continue

        for finding in rule_findings:
            severity = get_rule_severity(rule.meta.id, config, finding.severity)
            if severity != finding.severity:
                finding = finding._replace(severity=severity)
            findings.append(finding)

    findings = filter_suppressed_findings(findings, content)
    if len(findings) > config.max_findings_per_file:
        logger.info("Truncating %d findings in %s to %d", len(findings), file_path, config.max_findings_per_file)
        findings = findings[:config.max_findings_per_file]
    return findings


def analyze_paths(paths: List[str], rule_patterns: List[str], config: EngineConfig,
                  discovery_packages: Optional[List[str]] = None) -> Tuple[List[Finding], List[str], List, Dict[str, str], Dict[str, float]]:
    """
    Library entry point: analyze files under ``paths`` with the matching rules.

    Returns:
        (findings, files, rules, texts, metrics). Files that cannot be read or
        analyzed, and rules that fail on a file, are logged and skipped.
    """
    total_start = time.time()
    adapter = PythonAdapter(named_only=config.named_only)

    discovered = discover_rules(discovery_packages or DEFAULT_RULE_PACKAGES)
    logger.debug("Discovered %d new rules", discovered)

    rules = get_enabled_rules(rule_patterns, adapter.language_id)
    logger.debug("Running %d rules: %s", len(rules), [r.meta.id for r in rules])

    files = adapter.list_files(paths)
    findings: List[Finding] = []
    texts: Dict[str, str] = {}
    for file_path in files:
        try:
            content = read_source(file_path)
        except OSError as e:
            logger.warning("Skipping %s: %s", file_path, e)
            continue
        texts[file_path] = content
        try:
            findings.extend(analyze_file(file_path, adapter, rules, config, content))
        except Exception as e:
            logger.warning("Failed to analyze %s: %s", file_path, e)

    metrics = {"total_ms": (time.time() - total_start) * 1000}
    return findings, files, rules, texts, metrics


def strip_source(content: str, config: EngineConfig, file_path: str = "<string>") -> str:
    """Return ``content`` with the strip-implementations edits applied."""
    from treequery_rules import OverviewStripImplementationsRule

    adapter = PythonAdapter(named_only=config.named_only)
    findings = analyze_file(file_path, adapter, [OverviewStripImplementationsRule()], config, content)
    edits = [edit for finding in findings for edit in (finding.autofix or [])]
    return apply_edits(content, edits)


def _split_patterns(value: str) -> List[str]:
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treequery",
        description="Tree queries and syntactic reports over Python source",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show-tree", help="Print the structure of a file's tree")
    show.add_argument("path", help="Python file to show")
    show.add_argument("--width", type=int, help="Maximum line width (default from config)")

    lint = subparsers.add_parser("lint", help="Run rules over files or directories")
    lint.add_argument("--paths", nargs="+", required=True, help="Paths to files or directories to analyze")
    lint.add_argument("--rules", help="Comma-separated rule ids or patterns (default from config)")
    lint.add_argument("--discover", default=",".join(DEFAULT_RULE_PACKAGES),
                      help="Comma-separated packages to discover rules from")
    lint.add_argument("--format", choices=["json", "pretty"], default="pretty", help="Output format")

    strip = subparsers.add_parser("strip", help="Print a file with annotated function bodies stripped")
    strip.add_argument("path", help="Python file to strip")

    sources = subparsers.add_parser("find-sources", help="List Python source files below a directory")
    sources.add_argument("root", help="Directory to search")

    return parser


def main(argv: Optional[List[str]] = None, sink: Optional[TextIO] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    reporter = Reporter(sink)

    try:
        config_path = args.config or find_config_file(".")
        config = load_config(config_path)
        logger.debug("Using config: %s", config_path or "defaults")

        if args.command == "show-tree":
            adapter = PythonAdapter(named_only=config.named_only)
            tree = adapter.parse(read_source(args.path))
            reporter.show_tree(args.path, tree, args.width or config.tree_width)

        elif args.command == "lint":
            patterns = _split_patterns(args.rules) if args.rules else config.enabled_rules
            findings, files, rules, texts, metrics = analyze_paths(
                args.paths, patterns, config, _split_patterns(args.discover)
            )
            if not files:
                logger.error("No files found to analyze")
                return 1
            reporter.show_findings(
                findings, args.format, texts=texts, linecol=PythonAdapter().byte_to_linecol,
                files_count=len(files), rules_count=len(rules), metrics=metrics,
            )

        elif args.command == "strip":
            reporter.sink.write(strip_source(read_source(args.path), config, args.path))

        elif args.command == "find-sources":
            for file_path in PythonAdapter().list_files([args.root]):
                reporter.line(file_path)

    except (TreeQueryError, OSError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
