"""Tree-sitter parsing for TypeScript sources.

The rewrite rules work directly on tree-sitter nodes: kind tag is
``node.type``, ranges are byte offsets, and ``node.parent`` gives the
upward link the chain resolver needs. Nodes are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rxmigrate.core.errors import ParseError

# Extension to grammar name
EXTENSION_MAP: dict[str, str] = {
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
}


@dataclass
class ParseResult:
    """Result of parsing a file."""

    tree: Any  # Tree-sitter Tree (not serializable)
    language: str
    source: bytes
    error_count: int
    total_nodes: int

    @property
    def root_node(self) -> Any:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


def detect_language(path: Path) -> str | None:
    """Grammar name for a path, or None for unsupported files."""
    return EXTENSION_MAP.get(path.suffix.lower().lstrip("."))


def is_declaration_file(path: Path) -> bool:
    return path.name.endswith((".d.ts", ".d.mts", ".d.cts"))


@dataclass
class TreeSitterParser:
    """
    Tree-sitter parser for TypeScript and TSX.

    Usage::

        parser = TreeSitterParser()
        result = parser.parse(Path("src/app.ts"), content)
        result.root_node  # program node
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        import tree_sitter

        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, lang_name: str) -> Any:
        """Get or load a Tree-sitter language."""
        if lang_name in self._languages:
            return self._languages[lang_name]

        try:
            import tree_sitter
            import tree_sitter_typescript
        except ImportError as e:
            raise ParseError.grammar_unavailable(lang_name, str(e)) from e

        if lang_name == "tsx":
            lang = tree_sitter.Language(tree_sitter_typescript.language_tsx())
        else:
            lang = tree_sitter.Language(tree_sitter_typescript.language_typescript())
        self._languages[lang_name] = lang
        return lang

    def parse(self, path: Path, content: bytes | None = None) -> ParseResult:
        """
        Parse a file with Tree-sitter.

        Args:
            path: Path to file (used for language detection)
            content: File content as bytes. If None, reads from path.

        Returns:
            ParseResult with tree, language, and error info.
        """
        language = detect_language(path)
        if language is None:
            raise ParseError.unsupported_language(str(path))

        if content is None:
            content = path.read_bytes()
        return self.parse_source(content, language=language)

    def parse_source(self, content: bytes, *, language: str = "typescript") -> ParseResult:
        """Parse in-memory source text."""
        self._parser.language = self._get_language(language)
        tree = self._parser.parse(content)

        error_count = 0
        total_nodes = 0
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            total_nodes += 1
            if node.type == "ERROR" or node.is_missing:
                error_count += 1
            stack.extend(node.children)

        return ParseResult(
            tree=tree,
            language=language,
            source=content,
            error_count=error_count,
            total_nodes=total_nodes,
        )
