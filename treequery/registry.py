"""
Rule registry.

Rules are plain objects with ``meta``, ``requires`` and ``visit``. They are
collected from rule packages by ``discover_rules`` and selected per run with
fnmatch patterns over their ids.
"""

import fnmatch
import importlib
import logging
import pkgutil
from typing import Dict, List, Optional

from .types import Rule

logger = logging.getLogger(__name__)


class Registry:
    """Rules by id, kept in registration order."""

    def __init__(self):
        self._by_id: Dict[str, Rule] = {}

    def register_rule(self, rule: Rule) -> None:
        # first registration of an id wins; rediscovery is a no-op
        if rule.meta.id in self._by_id:
            logger.debug("Rule %s already registered", rule.meta.id)
            return
        self._by_id[rule.meta.id] = rule

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._by_id.get(rule_id)

    def get_all_rules(self) -> List[Rule]:
        return list(self._by_id.values())

    def get_rule_ids(self) -> List[str]:
        return list(self._by_id)

    def get_enabled_rules(self, enabled_patterns: List[str], language: Optional[str] = None) -> List[Rule]:
        """Rules whose id matches any pattern, limited to ``language`` when given."""
        return [
            rule for rule in self._by_id.values()
            if (language is None or language in rule.meta.langs)
            and any(fnmatch.fnmatch(rule.meta.id, pattern) for pattern in enabled_patterns)
        ]

    def discover_rules(self, entry_packages: List[str]) -> int:
        """
        Import each package and its submodules and register the rules they define.

        A module's ``RULES`` list (classes or instances) takes precedence; without
        one, every public class carrying ``meta``, ``requires`` and ``visit`` is
        instantiated. Import errors propagate.

        Returns:
            How many rules were newly registered.
        """
        before = len(self._by_id)
        for package_name in entry_packages:
            package = importlib.import_module(package_name)
            self._register_module(package)
            for _finder, module_name, _ispkg in pkgutil.walk_packages(getattr(package, "__path__", []),
                                                                       package.__name__ + "."):
                self._register_module(importlib.import_module(module_name))
                logger.debug("Scanned %s for rules", module_name)
        return len(self._by_id) - before

    def _register_module(self, module) -> None:
        declared = getattr(module, "RULES", None)
        if isinstance(declared, list):
            for rule in declared:
                self.register_rule(rule() if isinstance(rule, type) else rule)
            return

        for attr_name in dir(module):
            if attr_name.startswith("_"):
                continue
            candidate = getattr(module, attr_name)
            if isinstance(candidate, type) and all(hasattr(candidate, a) for a in ("meta", "requires", "visit")):
                self.register_rule(candidate())

    def clear(self) -> None:
        self._by_id.clear()


_global_registry = Registry()


def get_registry() -> Registry:
    """The process-wide registry used by the runner."""
    return _global_registry


def get_enabled_rules(enabled_patterns: List[str], language: Optional[str] = None) -> List[Rule]:
    return _global_registry.get_enabled_rules(enabled_patterns, language)


def discover_rules(entry_packages: List[str]) -> int:
    return _global_registry.discover_rules(entry_packages)
