"""Tree-sitter parsing for TypeScript sources."""

from rxmigrate.parsing.parser import (
    ParseResult,
    TreeSitterParser,
    detect_language,
    is_declaration_file,
)

__all__ = [
    "ParseResult",
    "TreeSitterParser",
    "detect_language",
    "is_declaration_file",
]
