"""
Kind filters for tree queries.

A kind filter selects nodes by their ``kind`` discriminator before any
predicate runs. ``ANY`` accepts every node; a ``KindFilter`` accepts nodes
whose kind is in a fixed set.
"""

from collections.abc import Iterable, Mapping
from typing import AbstractSet, FrozenSet, Hashable, Optional, Union

from .errors import KindFilterError


class _AnyKind:
    """Sentinel filter that accepts every node kind."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def matches(self, node) -> bool:
        return True

    def accepts(self, kind: Hashable) -> bool:
        return True

    def __repr__(self) -> str:
        return "ANY"


ANY = _AnyKind()


class KindFilter:
    """An immutable set of requested node kinds.

    Args:
        kinds: The node kinds to accept. Must be non-empty and hashable.
        vocabulary: Optional set of kinds the tree producer can emit. When given,
            every requested kind must be part of it.

    Raises:
        KindFilterError: if the filter is empty, holds unhashable values, or
            names a kind outside the vocabulary.
    """

    __slots__ = ("_kinds",)

    def __init__(self, kinds: Iterable[Hashable], vocabulary: Optional[AbstractSet[Hashable]] = None):
        if isinstance(kinds, (str, bytes)):
            kinds = (kinds,)
        try:
            frozen = frozenset(kinds)
        except TypeError as e:
            raise KindFilterError(f"Node kinds must be hashable: {e}") from e

        if not frozen:
            raise KindFilterError("Kind filter must name at least one kind")

        if vocabulary is not None:
            unknown = sorted(str(k) for k in frozen if k not in vocabulary)
            if unknown:
                raise KindFilterError(f"Unknown node kind(s): {', '.join(unknown)}")

        self._kinds: FrozenSet[Hashable] = frozen

    @property
    def kinds(self) -> FrozenSet[Hashable]:
        return self._kinds

    def accepts(self, kind: Hashable) -> bool:
        return kind in self._kinds

    def matches(self, node) -> bool:
        return node.kind in self._kinds

    def __eq__(self, other) -> bool:
        return isinstance(other, KindFilter) and other._kinds == self._kinds

    def __hash__(self) -> int:
        return hash(self._kinds)

    def __repr__(self) -> str:
        return f"KindFilter({sorted(map(str, self._kinds))})"


KindSpec = Union[None, _AnyKind, KindFilter, Hashable, Iterable[Hashable]]


def as_kind_filter(spec: KindSpec, vocabulary: Optional[AbstractSet[Hashable]] = None):
    """
    Coerce a user-supplied kind specification into a filter.

    Accepts ``None`` or ``ANY`` (every kind), a ``KindFilter``, a single kind such
    as ``"call"``, or any iterable of kinds such as ``{"class_definition",
    "function_definition"}``, a generator or a ``dict.keys()`` view. Strings and
    bytes are single kinds; mappings are rejected, pass ``.keys()`` instead.
    """
    if spec is None or spec is ANY:
        return ANY
    if isinstance(spec, KindFilter):
        if vocabulary is not None:
            return KindFilter(spec.kinds, vocabulary)
        return spec
    if isinstance(spec, (str, bytes)):
        return KindFilter((spec,), vocabulary)
    if isinstance(spec, Mapping):
        raise KindFilterError(f"Unsupported kind filter: {spec!r}")
    if isinstance(spec, Iterable):
        return KindFilter(spec, vocabulary)
    try:
        hash(spec)
    except TypeError:
        raise KindFilterError(f"Unsupported kind filter: {spec!r}")
    return KindFilter((spec,), vocabulary)
