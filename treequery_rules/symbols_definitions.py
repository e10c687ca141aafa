# treequery_rules/symbols_definitions.py
"""
Rule: symbols.definitions

Lists every class and function definition together with its qualified name,
built from the enclosing class and function definitions.
"""

from typing import Iterator

from treequery.query import filter_ancestors, filter_descendants
from treequery.types import Finding, Requires, RuleContext, RuleMeta

from ._syntax import DEFINITION_KINDS, definition_name

_KIND_LABELS = {"class_definition": "class", "function_definition": "function"}


class SymbolsDefinitionsRule:
    """Report class and function definitions with qualified names."""

    meta = RuleMeta(
        id="symbols.definitions",
        category="symbols",
        description="Class and function definitions with qualified names",
        langs=["python"]
    )

    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if ctx.tree is None:
            return

        for definition in filter_descendants(ctx.tree, DEFINITION_KINDS):
            owners = [definition_name(d) for d in reversed(filter_ancestors(definition, DEFINITION_KINDS))]
            name = definition_name(definition)
            qualified_name = ".".join(owners + [name])
            label = _KIND_LABELS[definition.kind]

            yield Finding(
                rule=self.meta.id,
                message=f"{label} {qualified_name}",
                file=ctx.file_path,
                start_byte=definition.start_byte,
                end_byte=definition.end_byte,
                severity="info",
                meta={
                    "kind": label,
                    "name": name,
                    "qualified_name": qualified_name,
                    "owner": ".".join(owners) if owners else "<module>",
                },
            )
