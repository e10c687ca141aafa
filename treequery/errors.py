"""
Exception types for the treequery engine.

Precondition failures (bad starting node, malformed kind filter, non-callable
predicate) are raised at the call boundary before any traversal starts.
Structural failures are raised by the integrity checker.
"""

from typing import Any, Optional


class TreeQueryError(Exception):
    """Base class for all treequery errors."""


class InvalidNodeError(TreeQueryError, ValueError):
    """The starting node of a query is absent or not a Node."""

    def __init__(self, value: Any, operation: Optional[str] = None):
        self.value = value
        self.operation = operation
        where = f" in {operation}()" if operation else ""
        super().__init__(f"Expected a Node{where}, got {type(value).__name__}")


class KindFilterError(TreeQueryError, ValueError):
    """A kind filter is empty, unhashable or names an unknown kind."""


class InvalidPredicateError(TreeQueryError, ValueError):
    """A predicate passed to a query is not callable."""


class InvariantViolation(TreeQueryError):
    """The parent/child invariant of a tree does not hold."""

    def __init__(self, message: str, node: Any = None):
        self.node = node
        super().__init__(message)


class AdapterError(TreeQueryError):
    """A language adapter could not be set up or could not parse its input."""


class ConfigError(TreeQueryError):
    """A configuration file exists but could not be loaded."""
