"""
Core types for the treequery rule engine.

This module provides shared dataclasses and types used across the engine,
adapters, and rules.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Literal, Optional, Protocol, Tuple

from .node import Node
from .query import Query


# Type aliases for clarity
Severity = Literal["info", "warn", "error"]
NodeRange = Tuple[int, int]  # (start_byte, end_byte) 0-based


@dataclass(frozen=True)
class Edit:
    """A suggested edit replacing a byte range of the source."""
    start_byte: int
    end_byte: int
    replacement: str


@dataclass(frozen=True)
class Finding:
    """A finding represents something a rule reports about a file."""
    rule: str
    message: str
    file: str
    start_byte: int
    end_byte: int
    severity: Severity
    autofix: Optional[List[Edit]] = None
    meta: Optional[Dict[str, Any]] = None

    def _replace(self, **kwargs):
        """Provide NamedTuple-like _replace method for compatibility."""
        return replace(self, **kwargs)


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule.

    Attributes:
        id: Unique rule identifier (e.g., "structure.nested_dataclass")
        category: Rule category for grouping
        description: Human-readable description
        langs: List of supported languages
    """
    id: str
    category: str
    description: str = ""
    langs: List[str] = None

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', [])


@dataclass(frozen=True)
class Requires:
    """Represents what a rule needs to run. Text-only rules get ``ctx.tree = None``."""
    syntax: bool = True


@dataclass
class RuleContext:
    """Context passed to rules during execution."""
    file_path: str
    text: str
    tree: Optional[Node]
    adapter: 'LanguageAdapter'
    config: Dict[str, Any]

    @property
    def query(self) -> Query:
        """Axis queries rooted at the file's tree."""
        return Query(self.tree)

    @property
    def language(self) -> Optional[str]:
        return self.adapter.language_id if self.adapter else None

    def get_text(self, start_byte: int, end_byte: int) -> str:
        """Get text slice from byte positions."""
        return self.text.encode('utf-8')[start_byte:end_byte].decode('utf-8', errors='ignore')

    def node_text(self, node: Node) -> str:
        """Source text of a node, falling back to its byte span."""
        if node.text is not None:
            return node.text
        return self.get_text(node.start_byte, node.end_byte)


class Rule(Protocol):
    """Protocol for all rules in the engine.

    Rules analyze a tree and return findings. They should be stateless and thread-safe.
    """
    meta: RuleMeta
    requires: Requires

    def visit(self, ctx: RuleContext) -> Iterable[Finding]:
        """Visit a file and return findings.

        Args:
            ctx: Rule context containing file path, text, tree, adapter, and config

        Returns:
            Iterable of findings for this file
        """
        ...


class LanguageAdapter(ABC):
    """Abstract base class for language adapters producing query trees."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'python')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.py',))."""
        pass

    @property
    @abstractmethod
    def vocabulary(self) -> FrozenSet[Hashable]:
        """Return every node kind this adapter can emit."""
        pass

    @abstractmethod
    def parse(self, text: str) -> Node:
        """Parse text and return the root of a query tree."""
        pass

    @abstractmethod
    def list_files(self, paths: List[str]) -> List[str]:
        """List all files matching this adapter's extensions in the given paths."""
        pass

    @abstractmethod
    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        pass
