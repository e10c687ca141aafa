# treequery_rules/structure_nested_dataclass.py
"""
Rule: structure.nested_dataclass

Reports dataclasses, and warns about dataclasses nested inside another class.
A nested dataclass rarely needs anything from its enclosing class, so it is
usually clearer as a module-level definition.
"""

from typing import Iterator

from treequery.query import filter_ancestors, filter_descendants, find_first_child
from treequery.types import Finding, Requires, RuleContext, RuleMeta

from ._syntax import decorators_of, definition_name, field_child


class StructureNestedDataclassRule:
    """Flag dataclasses defined inside other classes."""

    meta = RuleMeta(
        id="structure.nested_dataclass",
        category="structure",
        description="Dataclass nested inside another class",
        langs=["python"]
    )

    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if ctx.tree is None:
            return

        for class_def in filter_descendants(ctx.tree, "class_definition", lambda n: self._is_dataclass(ctx, n)):
            enclosing = filter_ancestors(class_def, "class_definition")
            name = definition_name(class_def)

            if enclosing:
                yield Finding(
                    rule=self.meta.id,
                    message=f"Dataclass '{name}' nested inside class '{definition_name(enclosing[0])}'",
                    file=ctx.file_path,
                    start_byte=class_def.start_byte,
                    end_byte=class_def.end_byte,
                    severity="warn",
                    meta={"name": name, "enclosing": [definition_name(c) for c in enclosing]},
                )
            else:
                yield Finding(
                    rule=self.meta.id,
                    message=f"Dataclass '{name}' encountered",
                    file=ctx.file_path,
                    start_byte=class_def.start_byte,
                    end_byte=class_def.end_byte,
                    severity="info",
                    meta={"name": name, "enclosing": []},
                )

    def _is_dataclass(self, ctx: RuleContext, class_def) -> bool:
        for decorator in decorators_of(class_def):
            expression = find_first_child(decorator, predicate=lambda n: n.get("named", True))
            if expression is None:
                continue
            # @dataclass(frozen=True) -> look at the callee
            if expression.kind == "call":
                expression = field_child(expression, "function")
                if expression is None:
                    continue
            if ctx.node_text(expression).split(".")[-1] == "dataclass":
                return True
        return False
