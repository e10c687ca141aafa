"""
treequery: XPath-axis style queries over immutable, parent-linked trees.

The query engine (``treequery.node``, ``treequery.kinds``, ``treequery.query``)
works on any tree of kind-tagged nodes. The rest of the package builds such trees
from Python source with tree-sitter and runs report-style rules over them.
"""

from .errors import (
    TreeQueryError, InvalidNodeError, KindFilterError, InvalidPredicateError,
    InvariantViolation, AdapterError, ConfigError
)

from .node import Node, node, rebuild

from .kinds import ANY, KindFilter, as_kind_filter

from .query import (
    Query,
    iter_children, iter_descendants_or_self, iter_descendants,
    iter_topmost_or_self, iter_topmost, iter_ancestors_or_self, iter_ancestors,
    filter_children, find_all_children, find_first_child,
    filter_descendants_or_self, find_all_descendants_or_self, find_first_descendant_or_self,
    filter_descendants, find_all_descendants, find_first_descendant,
    find_topmost_or_self, find_all_topmost_or_self, find_topmost, find_all_topmost,
    filter_ancestors_or_self, find_all_ancestors_or_self, find_first_ancestor_or_self,
    filter_ancestors, find_all_ancestors, find_first_ancestor,
)

from .integrity import TreeStats, check_tree_integrity, is_valid_tree, tree_stats

__version__ = "0.1.0"

__all__ = [
    # Errors
    "TreeQueryError", "InvalidNodeError", "KindFilterError", "InvalidPredicateError",
    "InvariantViolation", "AdapterError", "ConfigError",

    # Node model
    "Node", "node", "rebuild",

    # Kind filters
    "ANY", "KindFilter", "as_kind_filter",

    # Axes
    "Query",
    "iter_children", "iter_descendants_or_self", "iter_descendants",
    "iter_topmost_or_self", "iter_topmost", "iter_ancestors_or_self", "iter_ancestors",
    "filter_children", "find_all_children", "find_first_child",
    "filter_descendants_or_self", "find_all_descendants_or_self", "find_first_descendant_or_self",
    "filter_descendants", "find_all_descendants", "find_first_descendant",
    "find_topmost_or_self", "find_all_topmost_or_self", "find_topmost", "find_all_topmost",
    "filter_ancestors_or_self", "find_all_ancestors_or_self", "find_first_ancestor_or_self",
    "filter_ancestors", "find_all_ancestors", "find_first_ancestor",

    # Integrity
    "TreeStats", "check_tree_integrity", "is_valid_tree", "tree_stats",
]
