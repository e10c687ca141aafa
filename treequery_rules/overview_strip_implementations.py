# treequery_rules/overview_strip_implementations.py
"""
Rule: overview.strip_implementations

Strips the bodies of annotated functions to give a quick overview of how a
code base hangs together. Run it on a copy of the code, then read the result.

Only functions with a return annotation are stripped, so the stripped code
still documents what each function returns. Annotated parameter defaults are
stripped too, as are the values of annotated assignments at module and class
level. Class bodies are searched for methods and nested classes; the
bodies of stripped functions (including anything nested in them) disappear.
"""

from typing import Iterator, List

from treequery.node import Node
from treequery.query import find_all_topmost
from treequery.types import Edit, Finding, Requires, RuleContext, RuleMeta

from ._syntax import DEFINITION_KINDS, definition_name, field_child

# Definitions plus annotated assignments such as ``limit: int = compute_limit()``
STRIPPABLE_KINDS = DEFINITION_KINDS | {"assignment"}


class OverviewStripImplementationsRule:
    """Replace annotated function bodies with a placeholder."""

    meta = RuleMeta(
        id="overview.strip_implementations",
        category="overview",
        description="Strip implementations of annotated functions",
        langs=["python"]
    )

    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if ctx.tree is None:
            return

        placeholder = ctx.config.get(self.meta.id, {}).get("placeholder", "...")

        # Class bodies are processed with an explicit stack instead of recursion
        pending: List[Node] = list(reversed(find_all_topmost(ctx.tree, STRIPPABLE_KINDS)))
        while pending:
            member = pending.pop()
            if member.kind == "class_definition":
                body = field_child(member, "body")
                if body is not None:
                    pending.extend(reversed(find_all_topmost(body, STRIPPABLE_KINDS)))
            elif member.kind == "assignment":
                finding = self._strip_assignment(ctx, member, placeholder)
                if finding is not None:
                    yield finding
            else:
                finding = self._strip_function(ctx, member, placeholder)
                if finding is not None:
                    yield finding

    def _strip_assignment(self, ctx: RuleContext, assignment: Node, placeholder: str):
        # limit: int = compute_limit()
        value = field_child(assignment, "right")
        if field_child(assignment, "type") is None or value is None:
            return None

        name = ctx.node_text(field_child(assignment, "left"))
        return Finding(
            rule=self.meta.id,
            message=f"Stripped value of '{name}'",
            file=ctx.file_path,
            start_byte=assignment.start_byte,
            end_byte=assignment.end_byte,
            severity="info",
            autofix=[Edit(value.start_byte, value.end_byte, placeholder)],
            meta={"name": name},
        )

    def _strip_function(self, ctx: RuleContext, function_def: Node, placeholder: str):
        if field_child(function_def, "return_type") is None:
            return None
        body = field_child(function_def, "body")
        if body is None:
            return None

        edits = []
        parameters = field_child(function_def, "parameters")
        if parameters is not None:
            for param in parameters.children:
                if param.kind != "typed_default_parameter":
                    continue
                value = field_child(param, "value")
                if value is not None:
                    edits.append(Edit(value.start_byte, value.end_byte, placeholder))

        edits.append(Edit(body.start_byte, body.end_byte, placeholder))

        name = definition_name(function_def)
        return Finding(
            rule=self.meta.id,
            message=f"Stripped implementation of '{name}'",
            file=ctx.file_path,
            start_byte=function_def.start_byte,
            end_byte=function_def.end_byte,
            severity="info",
            autofix=edits,
            meta={"name": name},
        )
