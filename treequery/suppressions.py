"""
Suppression comments for treequery rules.

A comment like ``# treequery: ignore[usage.call_sites, symbols.*]`` hides
findings of the listed rules (ids or fnmatch patterns) that start on the
same line.
"""

import fnmatch
import re
from typing import Dict, List, Set

_IGNORE_RE = re.compile(r'#\s*treequery:\s*ignore\s*\[\s*([^\]]+)\s*\]', re.IGNORECASE)


class SuppressionParser:
    """Parser for treequery suppression comments."""

    def __init__(self, text: str):
        self.text = text
        self._encoded = text.encode('utf-8')
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}

        for line_num, line in enumerate(text.split('\n'), 1):
            patterns = self._extract_suppression_patterns(line)
            if patterns:
                self.line_suppressions[line_num] = patterns

    @staticmethod
    def _extract_suppression_patterns(line: str) -> Set[str]:
        patterns = set()
        for match in _IGNORE_RE.finditer(line):
            for pattern in match.group(1).split(','):
                pattern = pattern.strip()
                if pattern:
                    patterns.add(pattern)
        return patterns

    def is_suppressed(self, rule_id: str, start_byte: int) -> bool:
        """Check if a finding of ``rule_id`` starting at ``start_byte`` is suppressed."""
        patterns = self.line_suppressions.get(self._byte_to_line(start_byte), ())
        return any(rule_id == pattern or fnmatch.fnmatch(rule_id, pattern) for pattern in patterns)

    def _byte_to_line(self, byte_offset: int) -> int:
        """Convert byte offset to 1-based line number."""
        byte_offset = max(0, min(byte_offset, len(self._encoded)))
        return self._encoded.count(b'\n', 0, byte_offset) + 1


def filter_suppressed_findings(findings: List, text: str) -> List:
    """Filter out suppressed findings from a list."""
    if not findings:
        return findings

    parser = SuppressionParser(text)
    if not parser.line_suppressions:
        return list(findings)

    return [f for f in findings if not parser.is_suppressed(f.rule, f.start_byte)]
