"""
Whole-tree integrity checks.

The axis functions in ``treequery.query`` assume that every child's parent link
points back at the node holding it. These helpers verify that assumption for a
whole tree, e.g. after building one by hand or converting it from a parser.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Hashable

from .errors import InvalidNodeError, InvariantViolation
from .node import Node


@dataclass(frozen=True)
class TreeStats:
    """Summary numbers for a tree."""
    node_count: int
    leaf_count: int
    max_depth: int
    kinds: Dict[Hashable, int] = field(default_factory=dict)


def check_tree_integrity(root: Node) -> None:
    """
    Verify the parent/child invariant for the tree below ``root``.

    Raises:
        InvalidNodeError: if ``root`` is not a Node.
        InvariantViolation: if a child's parent is not the node holding it, or a
            node is reachable along two different paths.
    """
    if not isinstance(root, Node):
        raise InvalidNodeError(root, "check_tree_integrity")

    seen = set()
    stack = [root]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            raise InvariantViolation(f"{current!r} is reachable more than once", node=current)
        seen.add(id(current))

        for child in current.children:
            if child.parent is not current:
                raise InvariantViolation(
                    f"{child!r} is a child of {current!r} but its parent is {child.parent!r}",
                    node=child,
                )
            stack.append(child)


def is_valid_tree(root: Node) -> bool:
    """Return True when ``check_tree_integrity`` passes."""
    try:
        check_tree_integrity(root)
    except InvariantViolation:
        return False
    return True


def tree_stats(root: Node) -> TreeStats:
    """Count nodes, leaves and kinds, and measure the depth of the tree."""
    if not isinstance(root, Node):
        raise InvalidNodeError(root, "tree_stats")

    kinds: Counter = Counter()
    node_count = leaf_count = max_depth = 0
    stack = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        node_count += 1
        kinds[current.kind] += 1
        max_depth = max(max_depth, depth)
        if current.is_leaf:
            leaf_count += 1
        stack.extend((child, depth + 1) for child in current.children)

    return TreeStats(node_count=node_count, leaf_count=leaf_count,
                     max_depth=max_depth, kinds=dict(kinds))
