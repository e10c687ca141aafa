"""
Tree query support reminiscent of XPath axes.

Every axis combines a kind filter with an optional predicate. The kind filter
runs first; the predicate is only evaluated on nodes whose kind was accepted.
A missing predicate means "always true", so ``find_all_descendants(n, k)`` and
``filter_descendants(n, k)`` return the same list.

All walks use an explicit stack, so deep trees cannot exhaust the interpreter's
recursion limit. Queries only read the tree and keep no state of their own.

Example:
    >>> from treequery.node import node
    >>> tree =node("A", node("B", node("C"), node("D", node("E"))), node("F"))
    >>> [n.kind for n in find_all_descendants(tree)]
    ['B', 'C', 'D', 'E', 'F']
    >>> [n.kind for n in find_all_topmost(tree, {"B", "D"})]
    ['B']
"""

from typing import Callable, Iterator, List, Optional, Tuple

from .errors import InvalidNodeError, InvalidPredicateError
from .kinds import ANY, KindSpec, as_kind_filter
from .node import Node

Predicate = Callable[[Node], bool]


def _prepare(node: Node, kinds: KindSpec, predicate: Optional[Predicate],
             operation: str) -> Callable[[Node], bool]:
    """Validate query arguments and build the combined kind/predicate test."""
    if not isinstance(node, Node):
        raise InvalidNodeError(node, operation)
    if predicate is not None and not callable(predicate):
        raise InvalidPredicateError(f"Predicate passed to {operation}() is not callable: {predicate!r}")

    kind_filter = as_kind_filter(kinds)

    if predicate is None:
        return kind_filter.matches
    if kind_filter is ANY:
        return lambda n: bool(predicate(n))
    return lambda n: kind_filter.matches(n) and bool(predicate(n))


# Walkers. These assume validated arguments.

def _walk_pre_order(start: List[Node], test: Callable[[Node], bool]) -> Iterator[Node]:
    # start is in reverse document order (top of stack last)
    stack = start
    while stack:
        current = stack.pop()
        if test(current):
            yield current
        stack.extend(reversed(current.children))


def _walk_topmost(start: List[Node], test: Callable[[Node], bool]) -> Iterator[Node]:
    stack = start
    while stack:
        current = stack.pop()
        if test(current):
            yield current
        else:
            stack.extend(reversed(current.children))


def _walk_up(start: Optional[Node], test: Callable[[Node], bool]) -> Iterator[Node]:
    current = start
    while current is not None:
        if test(current):
            yield current
        current = current.parent


def _first(iterator: Iterator[Node]) -> Optional[Node]:
    return next(iterator, None)


# Lazy iterators

def iter_children(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield matching children in document order."""
    test = _prepare(node, kinds, predicate, "iter_children")
    return (child for child in node.children if test(child))


def iter_descendants_or_self(node: Node, kinds: KindSpec = ANY,
                             predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield matching nodes of the descendant-or-self axis in pre-order."""
    test = _prepare(node, kinds, predicate, "iter_descendants_or_self")
    return _walk_pre_order([node], test)


def iter_descendants(node: Node, kinds: KindSpec = ANY,
                     predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield matching proper descendants in pre-order."""
    test = _prepare(node, kinds, predicate, "iter_descendants")
    return _walk_pre_order(list(reversed(node.children)), test)


def iter_topmost_or_self(node: Node, kinds: KindSpec = ANY,
                         predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield topmost matches, testing ``node`` itself first."""
    test = _prepare(node, kinds, predicate, "iter_topmost_or_self")
    return _walk_topmost([node], test)


def iter_topmost(node: Node, kinds: KindSpec = ANY,
                 predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield topmost matches among the proper descendants."""
    test = _prepare(node, kinds, predicate, "iter_topmost")
    return _walk_topmost(list(reversed(node.children)), test)


def iter_ancestors_or_self(node: Node, kinds: KindSpec = ANY,
                           predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield ``node`` and then its ancestors, nearest first."""
    test = _prepare(node, kinds, predicate, "iter_ancestors_or_self")
    return _walk_up(node, test)


def iter_ancestors(node: Node, kinds: KindSpec = ANY,
                   predicate: Optional[Predicate] = None) -> Iterator[Node]:
    """Lazily yield proper ancestors, nearest first and the root last."""
    test = _prepare(node, kinds, predicate, "iter_ancestors")
    return _walk_up(node.parent, test)


# Child axis

def filter_children(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> List[Node]:
    return list(iter_children(node, kinds, predicate))


def find_all_children(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return filter_children(node, kinds)


def find_first_child(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> Optional[Node]:
    return _first(iter_children(node, kinds, predicate))


# Descendant-or-self axis

def filter_descendants_or_self(node: Node, kinds: KindSpec = ANY,
                               predicate: Optional[Predicate] = None) -> List[Node]:
    return list(iter_descendants_or_self(node, kinds, predicate))


def find_all_descendants_or_self(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return filter_descendants_or_self(node, kinds)


def find_first_descendant_or_self(node: Node, kinds: KindSpec = ANY,
                                  predicate: Optional[Predicate] = None) -> Optional[Node]:
    return _first(iter_descendants_or_self(node, kinds, predicate))


# Descendant axis

def filter_descendants(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> List[Node]:
    return list(iter_descendants(node, kinds, predicate))


def find_all_descendants(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return filter_descendants(node, kinds)


def find_first_descendant(node: Node, kinds: KindSpec = ANY,
                          predicate: Optional[Predicate] = None) -> Optional[Node]:
    return _first(iter_descendants(node, kinds, predicate))


# Like descendant-or-self, but only topmost matches

def find_topmost_or_self(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> List[Node]:
    """
    Return the outermost matching nodes of the descendant-or-self axis.

    If ``node`` matches, the result is ``[node]``. Otherwise each child is searched
    the same way, and a match hides everything beneath it.
    """
    return list(iter_topmost_or_self(node, kinds, predicate))


def find_all_topmost_or_self(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return find_topmost_or_self(node, kinds)


# Like descendant, but only topmost matches

def find_topmost(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> List[Node]:
    """
    Return the outermost matching proper descendants of ``node``.

    Matching nodes are reported without descending into them; non-matching nodes
    are searched further. Sibling branches are always searched, so two
    independent matches are both reported while nested ones are not.
    """
    return list(iter_topmost(node, kinds, predicate))


def find_all_topmost(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return find_topmost(node, kinds)


# Ancestor-or-self axis

def filter_ancestors_or_self(node: Node, kinds: KindSpec = ANY,
                             predicate: Optional[Predicate] = None) -> List[Node]:
    return list(iter_ancestors_or_self(node, kinds, predicate))


def find_all_ancestors_or_self(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return filter_ancestors_or_self(node, kinds)


def find_first_ancestor_or_self(node: Node, kinds: KindSpec = ANY,
                                predicate: Optional[Predicate] = None) -> Optional[Node]:
    return _first(iter_ancestors_or_self(node, kinds, predicate))


# Ancestor axis

def filter_ancestors(node: Node, kinds: KindSpec = ANY, predicate: Optional[Predicate] = None) -> List[Node]:
    return list(iter_ancestors(node, kinds, predicate))


def find_all_ancestors(node: Node, kinds: KindSpec = ANY) -> List[Node]:
    return filter_ancestors(node, kinds)


def find_first_ancestor(node: Node, kinds: KindSpec = ANY,
                        predicate: Optional[Predicate] = None) -> Optional[Node]:
    return _first(iter_ancestors(node, kinds, predicate))


class Query:
    """Fluent wrapper offering the axis functions as methods on one node.

    ``Query(tree).filter_descendants("call", pred)`` is the same as
    ``filter_descendants(tree, "call", pred)``.
    """

    __slots__ = ("node",)

    _AXES: Tuple[str, ...] = (
        "iter_children", "iter_descendants_or_self", "iter_descendants",
        "iter_topmost_or_self", "iter_topmost", "iter_ancestors_or_self", "iter_ancestors",
        "filter_children", "find_all_children", "find_first_child",
        "filter_descendants_or_self", "find_all_descendants_or_self", "find_first_descendant_or_self",
        "filter_descendants", "find_all_descendants", "find_first_descendant",
        "find_topmost_or_self", "find_all_topmost_or_self", "find_topmost", "find_all_topmost",
        "filter_ancestors_or_self", "find_all_ancestors_or_self", "find_first_ancestor_or_self",
        "filter_ancestors", "find_all_ancestors", "find_first_ancestor",
    )

    def __init__(self, node: Node):
        if not isinstance(node, Node):
            raise InvalidNodeError(node, "Query")
        self.node = node

    def __getattr__(self, name: str):
        if name in Query._AXES:
            axis = globals()[name]
            start = self.node
            return lambda *args, **kwargs: axis(start, *args, **kwargs)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(Query._AXES))

    def __repr__(self) -> str:
        return f"Query({self.node!r})"
