"""
Tests for the Node model and the kind filters.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from treequery.errors import InvariantViolation, KindFilterError
from treequery.kinds import ANY, KindFilter, as_kind_filter
from treequery.node import Node, node, rebuild


def test_parent_links_are_set_by_constructor():
    c = node("C")
    d = node("D")
    b = node("B", c, d)
    assert c.parent is b
    assert d.parent is b
    assert b.parent is None
    assert b.children == (c, d)


def test_child_cannot_be_adopted_twice():
    shared = node("X")
    node("A", shared)
    with pytest.raises(InvariantViolation):
        node("B", shared)


def test_children_must_be_nodes():
    with pytest.raises(TypeError):
        Node("A", ["not a node"])


def test_kind_must_be_hashable():
    with pytest.raises(TypeError):
        Node(["unhashable"])


def test_parent_is_read_only():
    child = node("C")
    node("P", child)
    with pytest.raises(AttributeError):
        child.parent = None


def test_navigation_helpers():
    e = node("E")
    d = node("D", e)
    c = node("C")
    b = node("B", c, d)
    a = node("A", b, node("F"))
    assert e.root() is a
    assert e.depth() == 3
    assert a.depth() == 0
    assert d.index_in_parent() == 1
    assert a.index_in_parent() is None
    assert c.is_leaf and not b.is_leaf
    assert a.is_root and not b.is_root


def test_payload():
    n = Node("identifier", text="foo", start_byte=4, end_byte=7, attrs={"field": "name"})
    assert n.span() == (4, 7)
    assert n.get("field") == "name"
    assert n.get("missing", 1) == 1
    # attrs is a copy
    n.attrs["field"] = "changed"
    assert n.get("field") == "name"
    assert "identifier" in repr(n)


def test_rebuild_leaves_original_untouched():
    old_child = node("old")
    original = Node("block", [old_child], start_byte=1, end_byte=9, attrs={"field": "body"})

    new_child = node("new")
    copy = rebuild(original, [new_child])

    assert copy is not original
    assert copy.children == (new_child,)
    assert new_child.parent is copy
    assert original.children == (old_child,)
    assert old_child.parent is original
    assert copy.span() == (1, 9)
    assert copy.get("field") == "body"


class TestKindFilter:

    def test_matches_by_membership(self):
        kinds = KindFilter(["call", "attribute"])
        assert kinds.matches(node("call"))
        assert not kinds.matches(node("identifier"))
        assert kinds.accepts("attribute")

    def test_empty_filter_is_rejected(self):
        with pytest.raises(KindFilterError):
            KindFilter([])

    def test_vocabulary_is_enforced(self):
        vocabulary = {"call", "identifier"}
        assert KindFilter(["call"], vocabulary).kinds == frozenset({"call"})
        with pytest.raises(KindFilterError, match="no_such_kind"):
            KindFilter(["call", "no_such_kind"], vocabulary)

    def test_equality(self):
        assert KindFilter(["a", "b"]) == KindFilter(("b", "a"))
        assert hash(KindFilter(["a"])) == hash(KindFilter({"a"}))

    def test_as_kind_filter_coercions(self):
        assert as_kind_filter(None) is ANY
        assert as_kind_filter(ANY) is ANY
        assert as_kind_filter("call") == KindFilter(["call"])
        assert as_kind_filter(["a", "b"]) == KindFilter(["a", "b"])
        assert as_kind_filter(frozenset({"a"})) == KindFilter(["a"])
        existing = KindFilter(["x"])
        assert as_kind_filter(existing) is existing

    def test_as_kind_filter_applies_vocabulary_to_existing_filter(self):
        with pytest.raises(KindFilterError):
            as_kind_filter(KindFilter(["x"]), vocabulary={"y"})

    def test_as_kind_filter_rejects_mappings(self):
        with pytest.raises(KindFilterError):
            as_kind_filter({"kind": "call"})

    def test_as_kind_filter_accepts_any_iterable(self):
        assert as_kind_filter(k for k in ("a", "b")) == KindFilter(["a", "b"])
        assert as_kind_filter({"a": 1}.keys()) == KindFilter(["a"])
        assert as_kind_filter(b"a") == KindFilter([b"a"])
        assert as_kind_filter(3) == KindFilter([3])

    def test_as_kind_filter_checks_iterables_against_vocabulary(self):
        with pytest.raises(KindFilterError, match="missing"):
            as_kind_filter(iter(["call", "missing"]), vocabulary={"call"})

    def test_any_accepts_everything(self):
        assert ANY.matches(node(object()))
        assert repr(ANY) == "ANY"
