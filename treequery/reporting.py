"""
Text and JSON reporting for treequery.

Everything here writes to an injectable sink (any object with a ``write``
method), so reports can be captured in tests instead of going to stdout.
"""

import json
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from .node import Node
from .types import Finding

PROTOCOL_VERSION = "1"

LineCol = Callable[[str, int], Tuple[int, int]]

_SEVERITY_LABELS = {"info": "INFO", "warn": "WARN", "error": "ERROR"}


def truncate_syntax(text: str, max_length: int = 100) -> str:
    """Shorten text longer than ``max_length``, marking the cut with " ..."."""
    if len(text) > max_length:
        return text[:max_length] + " ..."
    return text


def render_tree(root: Node, width: int = 80, indent: str = "  ") -> str:
    """
    Render the structure of a tree, one node per line.

    Each line shows the kind, the field name (if any) and the byte span; leaves
    also show their text, shortened so the line stays within ``width``.
    """
    lines = []
    stack = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        field = current.get("field")
        label = f"{indent * depth}{field + ': ' if field else ''}{current.kind} [{current.start_byte}..{current.end_byte}]"

        if current.is_leaf and current.text is not None:
            flat = current.text.replace("\n", "\\n")
            room = max(width - len(label) - 3, 8)
            if len(flat) > room:
                flat = flat[:room - 3] + "..."
            label = f'{label} "{flat}"'

        lines.append(label)
        stack.extend((child, depth + 1) for child in reversed(current.children))

    return "\n".join(lines)


def finding_to_dict(finding: Finding, text: Optional[str] = None, linecol: Optional[LineCol] = None) -> Dict[str, Any]:
    """Convert a finding into a JSON-friendly dict, with a line/column range when possible."""
    result: Dict[str, Any] = {
        "rule_id": finding.rule,
        "message": finding.message,
        "file_path": finding.file,
        "start_byte": finding.start_byte,
        "end_byte": finding.end_byte,
        "severity": finding.severity,
    }
    if text is not None and linecol is not None:
        start_line, start_col = linecol(text, finding.start_byte)
        end_line, end_col = linecol(text, finding.end_byte)
        result["range"] = {
            "startLine": start_line,
            "startCol": start_col,
            "endLine": end_line,
            "endCol": end_col,
        }
    if finding.autofix:
        result["autofix"] = [
            {"start_byte": e.start_byte, "end_byte": e.end_byte, "replacement": e.replacement}
            for e in finding.autofix
        ]
    if finding.meta:
        result["meta"] = finding.meta
    return result


def format_findings(findings: List[Finding], format_type: str, texts: Optional[Dict[str, str]] = None,
                    linecol: Optional[LineCol] = None, files_count: int = 0, rules_count: int = 0,
                    metrics: Optional[Dict[str, float]] = None) -> str:
    """Format findings as "json" or "pretty" text."""
    texts = texts or {}

    if format_type == "json":
        output = {
            "treequery.protocol": PROTOCOL_VERSION,
            "files_scanned": files_count,
            "rules_run": rules_count,
            "findings": [finding_to_dict(f, texts.get(f.file), linecol) for f in findings],
            "metrics": metrics or {},
        }
        return json.dumps(output, indent=2)

    elif format_type == "pretty":
        lines = [f"Scanned {files_count} files with {rules_count} rules",
                 f"Found {len(findings)} findings", ""]

        # Group findings by file
        by_file: Dict[str, List[Finding]] = {}
        for finding in findings:
            by_file.setdefault(finding.file, []).append(finding)

        for file_path, file_findings in sorted(by_file.items()):
            lines.append(file_path)
            text = texts.get(file_path)
            for finding in file_findings:
                if text is not None and linecol is not None:
                    line, col = linecol(text, finding.start_byte)
                    location = f"{line}:{col}"
                else:
                    location = f"byte {finding.start_byte}"
                label = _SEVERITY_LABELS.get(finding.severity, finding.severity.upper())
                lines.append(f"  {label} {location}: {finding.message} ({finding.rule})")
            lines.append("")

        if metrics:
            lines.append("Metrics:")
            for name, value in metrics.items():
                lines.append(f"  {name}: {value:.1f}")

        return "\n".join(lines)

    else:
        raise ValueError(f"Unknown format: {format_type}")


def apply_edits(text: str, edits) -> str:
    """Apply non-overlapping byte-range edits to ``text`` and return the new text."""
    data = text.encode('utf-8')
    result = []
    position = 0
    for edit in sorted(edits, key=lambda e: e.start_byte):
        if edit.start_byte < position:
            raise ValueError(f"Overlapping edit at byte {edit.start_byte}")
        result.append(data[position:edit.start_byte])
        result.append(edit.replacement.encode('utf-8'))
        position = edit.end_byte
    result.append(data[position:])
    return b"".join(result).decode('utf-8')


class Reporter:
    """Writes report text to a sink (stdout by default)."""

    def __init__(self, sink: Optional[TextIO] = None):
        self.sink = sink if sink is not None else sys.stdout

    def line(self, text: str = "") -> None:
        self.sink.write(text + "\n")

    def show_tree(self, file_path: str, root: Node, width: int = 80) -> None:
        self.line()
        self.line(f"File: {file_path}")
        self.line()
        self.line(render_tree(root, width))

    def show_findings(self, findings: List[Finding], format_type: str, **kwargs) -> None:
        self.line(format_findings(findings, format_type, **kwargs))
