# treequery_rules/usage_call_sites.py
"""
Rule: usage.call_sites

Shows where configured functions are called. Configure the function names
under ``rule_configs``::

    rule_configs:
      usage.call_sites:
        functions: ["requests.get", "eval"]

A dotted name matches the callee text exactly; a plain name also matches the
last segment of an attribute call (``eval`` matches ``builtins.eval``).
"""

import logging
from typing import Iterator

from treequery.query import filter_descendants, find_first_ancestor
from treequery.reporting import truncate_syntax
from treequery.types import Finding, Requires, RuleContext, RuleMeta

from ._syntax import definition_name, field_child

logger = logging.getLogger(__name__)


class UsageCallSitesRule:
    """Report call sites of configured functions."""

    meta = RuleMeta(
        id="usage.call_sites",
        category="usage",
        description="Call sites of configured functions",
        langs=["python"]
    )

    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if ctx.tree is None:
            return

        functions = ctx.config.get(self.meta.id, {}).get("functions") or []
        if not functions:
            logger.warning("No functions configured for %s, nothing to report", self.meta.id)
            return

        dotted = {name for name in functions if "." in name}
        plain = {name for name in functions if "." not in name}

        def is_match(call) -> bool:
            callee = field_child(call, "function")
            if callee is None:
                return False
            text = ctx.node_text(callee)
            return text in dotted or text in plain or text.split(".")[-1] in plain

        for call in filter_descendants(ctx.tree, "call", is_match):
            callee_text = ctx.node_text(field_child(call, "function"))
            enclosing = find_first_ancestor(call, "function_definition")
            parent = call.parent
            grandparent = parent.parent if parent is not None else None

            yield Finding(
                rule=self.meta.id,
                message=f"Call of '{callee_text}'",
                file=ctx.file_path,
                start_byte=call.start_byte,
                end_byte=call.end_byte,
                severity="info",
                meta={
                    "callee": callee_text,
                    "syntax": truncate_syntax(ctx.node_text(call)),
                    "enclosing_function": definition_name(enclosing) if enclosing is not None else None,
                    "parent_kind": parent.kind if parent is not None else None,
                    "grandparent_kind": grandparent.kind if grandparent is not None else None,
                },
            )
