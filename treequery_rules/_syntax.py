"""Small helpers for reading tree-sitter Python trees."""

from typing import Optional

from treequery.node import Node
from treequery.query import find_first_child

DEFINITION_KINDS = frozenset({"class_definition", "function_definition"})


def field_child(node: Node, field: str) -> Optional[Node]:
    """The child stored under a grammar field name, e.g. "name" or "body"."""
    return find_first_child(node, predicate=lambda n: n.get("field") == field)


def definition_name(definition: Node) -> str:
    name = field_child(definition, "name")
    if name is None or name.text is None:
        return "<anonymous>"
    return name.text


def decorators_of(definition: Node):
    """Decorator nodes of a class or function definition, outermost first."""
    parent = definition.parent
    if parent is None or parent.kind != "decorated_definition":
        return []
    return [child for child in parent.children if child.kind == "decorator"]
