"""
Node model for the treequery engine.

A tree is made of Node objects, each carrying a kind discriminator, an ordered
tuple of children and a back-reference to its parent. The parent link is set
exactly once, by the parent's constructor, after all children exist; nodes are
read-only afterwards.
"""

from typing import Any, Dict, Hashable, Iterable, Optional, Tuple

from .errors import InvariantViolation


class Node:
    """An immutable, parent-linked tree node."""

    __slots__ = ("_kind", "_children", "_parent", "_text", "_start_byte", "_end_byte", "_attrs")

    def __init__(self, kind: Hashable, children: Iterable["Node"] = (), *,
                 text: Optional[str] = None, start_byte: int = 0, end_byte: int = 0,
                 attrs: Optional[Dict[str, Any]] = None):
        try:
            hash(kind)
        except TypeError:
            raise TypeError(f"Node kind must be hashable, got {type(kind).__name__}")

        self._kind = kind
        self._children: Tuple["Node", ...] = tuple(children)
        self._parent: Optional["Node"] = None
        self._text = text
        self._start_byte = start_byte
        self._end_byte = end_byte
        self._attrs = dict(attrs) if attrs else {}

        for child in self._children:
            if not isinstance(child, Node):
                raise TypeError(f"Child of {kind!r} must be a Node, got {type(child).__name__}")
            if child._parent is not None:
                raise InvariantViolation(
                    f"Node {child!r} already belongs to {child._parent!r}", node=child
                )
            child._parent = self

    @property
    def kind(self) -> Hashable:
        return self._kind

    @property
    def children(self) -> Tuple["Node", ...]:
        return self._children

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent

    @property
    def text(self) -> Optional[str]:
        return self._text

    @property
    def start_byte(self) -> int:
        return self._start_byte

    @property
    def end_byte(self) -> int:
        return self._end_byte

    @property
    def attrs(self) -> Dict[str, Any]:
        """Free-form metadata (a copy, so callers cannot mutate the node)."""
        return dict(self._attrs)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a single metadata value."""
        return self._attrs.get(key, default)

    @property
    def is_leaf(self) -> bool:
        return not self._children

    @property
    def is_root(self) -> bool:
        return self._parent is None

    def span(self) -> Tuple[int, int]:
        """Return (start_byte, end_byte)."""
        return (self._start_byte, self._end_byte)

    def root(self) -> "Node":
        """Walk the parent links up to the root."""
        current = self
        while current._parent is not None:
            current = current._parent
        return current

    def depth(self) -> int:
        """Number of proper ancestors (0 for the root)."""
        depth = 0
        current = self._parent
        while current is not None:
            depth += 1
            current = current._parent
        return depth

    def index_in_parent(self) -> Optional[int]:
        """Position among the parent's children, or None for the root."""
        if self._parent is None:
            return None
        for index, sibling in enumerate(self._parent._children):
            if sibling is self:
                return index
        raise InvariantViolation(f"{self!r} is not among its parent's children", node=self)

    def __repr__(self) -> str:
        if self._text is not None and not self._children:
            text = self._text if len(self._text) <= 20 else self._text[:17] + "..."
            return f"Node({self._kind!r}, text={text!r})"
        return f"Node({self._kind!r}, children={len(self._children)})"


def node(kind: Hashable, *children: Node, **payload: Any) -> Node:
    """Build a node from positional children, e.g. node("A", node("B"), node("C"))."""
    return Node(kind, children, **payload)


def rebuild(original: Node, children: Iterable[Node]) -> Node:
    """
    Build a new node with the payload of ``original`` and the given children.

    Children must be fresh (parentless) nodes. The original tree is left untouched,
    so transformations produce new trees rather than editing existing ones.
    """
    return Node(
        original.kind,
        children,
        text=original.text,
        start_byte=original.start_byte,
        end_byte=original.end_byte,
        attrs=original._attrs,
    )
