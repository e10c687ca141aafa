"""
Python language adapter for tree-sitter.

Parses Python source with tree-sitter and converts the concrete syntax tree into
immutable treequery nodes, so rules can run axis queries over it.
"""
import logging
import os
from typing import FrozenSet, List, Optional, Tuple

import tree_sitter

from .errors import AdapterError
from .node import Node
from .types import LanguageAdapter

logger = logging.getLogger(__name__)

# Kind tree-sitter uses for unparsable regions; it has no regular kind id.
ERROR_KIND = "ERROR"


class PythonAdapter(LanguageAdapter):
    """Tree-sitter adapter for the Python language.

    Args:
        named_only: Drop anonymous tokens (punctuation, keywords) from the tree.
    """

    def __init__(self, named_only: bool = True):
        self.named_only = named_only
        self._parser: Optional[tree_sitter.Parser] = None
        self._language: Optional[tree_sitter.Language] = None
        self._vocabulary: Optional[FrozenSet[str]] = None

    @property
    def language_id(self) -> str:
        return "python"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        return (".py", ".pyi")

    def _get_language(self) -> tree_sitter.Language:
        if self._language is None:
            try:
                from tree_sitter_python import language
            except ImportError as e:
                raise AdapterError(f"tree-sitter-python is not available: {e}") from e
            self._language = tree_sitter.Language(language())
        return self._language

    def _get_parser(self) -> tree_sitter.Parser:
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            parser = tree_sitter.Parser()
            parser.language = self._get_language()
            self._parser = parser
            logger.debug("Python parser initialized")
        return self._parser

    @property
    def vocabulary(self) -> FrozenSet[str]:
        """Node kinds the grammar can produce (named kinds only when named_only)."""
        if self._vocabulary is None:
            language = self._get_language()
            kinds = {ERROR_KIND}
            for kind_id in range(language.node_kind_count):
                kind = language.node_kind_for_id(kind_id)
                if not kind:
                    continue
                if self.named_only and not language.node_kind_is_named(kind_id):
                    continue
                kinds.add(kind)
            self._vocabulary = frozenset(kinds)
        return self._vocabulary

    def parse(self, text) -> Node:
        """Parse source text (str or bytes) into a query tree rooted at a "module" node."""
        source = text.encode('utf-8') if isinstance(text, str) else text
        ts_tree = self._get_parser().parse(source)
        root = self._convert(ts_tree.root_node)
        if ts_tree.root_node.has_error:
            logger.debug("Parse tree contains syntax errors")
        return root

    def _convert(self, ts_root) -> Node:
        """Convert a tree-sitter node into a Node tree without recursion.

        Nodes are first listed in pre-order, then built in reverse pre-order so
        every child exists before the parent that adopts it.
        """
        order = []  # (ts_node, field_name, parent_index)
        stack = [(ts_root, None, -1)]
        while stack:
            ts_node, field_name, parent_index = stack.pop()
            index = len(order)
            order.append((ts_node, field_name, parent_index))

            kept = []
            for child_index, child in enumerate(ts_node.children):
                if self.named_only and not child.is_named:
                    continue
                kept.append((child, ts_node.field_name_for_child(child_index), index))
            stack.extend(reversed(kept))

        built: List[List[Node]] = [[] for _ in order]
        root = None
        for index in range(len(order) - 1, -1, -1):
            ts_node, field_name, parent_index = order[index]
            children = built[index]
            children.reverse()

            text = None
            if not children and ts_node.text is not None:
                text = ts_node.text.decode('utf-8', errors='replace')

            attrs = {"named": ts_node.is_named}
            if field_name:
                attrs["field"] = field_name

            converted = Node(
                ts_node.type,
                children,
                text=text,
                start_byte=ts_node.start_byte,
                end_byte=ts_node.end_byte,
                attrs=attrs,
            )
            if parent_index < 0:
                root = converted
            else:
                built[parent_index].append(converted)

        return root

    def list_files(self, paths: List[str]) -> List[str]:
        """List all Python files in the given paths."""
        python_files = []

        for path in paths:
            if os.path.isfile(path):
                if any(path.endswith(ext) for ext in self.file_extensions):
                    python_files.append(path)
            elif os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    # Skip common ignore directories
                    dirs[:] = sorted(d for d in dirs if not d.startswith('.') and d not in ['__pycache__', 'node_modules'])

                    for file in sorted(files):
                        if any(file.endswith(ext) for ext in self.file_extensions):
                            python_files.append(os.path.join(root, file))
            else:
                logger.warning("Path does not exist: %s", path)

        return python_files

    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        text_bytes = text.encode('utf-8')
        byte = max(0, min(byte, len(text_bytes)))

        lines = text_bytes[:byte].decode('utf-8', errors='ignore').split('\n')
        return (len(lines), len(lines[-1]) + 1)
