"""
Rules for the treequery engine.

Every rule is a syntactic report over a query tree produced by a language
adapter. Rules are discovered through the ``RULES`` list below.
"""

from .overview_strip_implementations import OverviewStripImplementationsRule
from .structure_nested_dataclass import StructureNestedDataclassRule
from .symbols_definitions import SymbolsDefinitionsRule
from .usage_call_sites import UsageCallSitesRule

RULES = [
    StructureNestedDataclassRule,
    OverviewStripImplementationsRule,
    UsageCallSitesRule,
    SymbolsDefinitionsRule,
]

__all__ = [
    "RULES",
    "StructureNestedDataclassRule",
    "OverviewStripImplementationsRule",
    "UsageCallSitesRule",
    "SymbolsDefinitionsRule",
]
