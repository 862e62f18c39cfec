# Tree-sitter setup and AST parsing: parse JavaScript/TypeScript/JSX source into AST trees.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import tree_sitter
from tree_sitter import Language
from tree_sitter_typescript import language_tsx as _tsx_language_capsule

logger = logging.getLogger(__name__)

# TSX grammar: a superset of plain JavaScript, TypeScript annotations and JSX.
_TSX_LANGUAGE = Language(_tsx_language_capsule())

DEFAULT_MAX_SOURCE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class ParseSuccess:
    """A syntactically clean parse; `source` is the UTF-8 text that was parsed."""

    tree: tree_sitter.Tree
    source: bytes


@dataclass(frozen=True)
class ParseFailure:
    """Source that did not parse; line and column are 0-based when known."""

    message: str
    line: Optional[int] = None
    column: Optional[int] = None


ParseResult = Union[ParseSuccess, ParseFailure]


def get_tsx_language() -> Language:
    """Return the Tree-sitter Language object for TSX."""
    return _TSX_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create and return a Tree-sitter Parser configured for TSX."""
    parser = tree_sitter.Parser(_TSX_LANGUAGE)
    return parser


def parse_bytes(
    source: bytes,
    parser: Optional[tree_sitter.Parser] = None,
) -> tree_sitter.Tree:
    """
    Parse UTF-8 source bytes into an AST.

    Args:
        source: UTF-8 encoded JavaScript/TypeScript source code.
        parser: Optional parser instance; if None, a new one is created.

    Returns:
        The parse tree. Check tree.root_node.has_error for syntax errors.
    """
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    if tree.root_node.has_error:
        logger.warning(
            "Parse completed with errors: root=%s",
            tree.root_node.type,
        )
    else:
        logger.debug(
            "Parse succeeded: root=%s",
            tree.root_node.type,
        )
    return tree


def _first_error_node(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Return the first ERROR or MISSING node in document order, or None."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def utf16_column(source: bytes, byte_offset: int, byte_column: int) -> int:
    """
    Convert a tree-sitter byte column into a UTF-16 code unit column.

    Editors and the Language Server Protocol count columns in UTF-16 units, so
    a character outside the Basic Multilingual Plane (emoji) counts as two.
    """
    line_start = byte_offset - byte_column
    prefix = source[line_start:byte_offset].decode("utf-8", errors="replace")
    return len(prefix.encode("utf-16-le")) // 2


def _describe_error(source: bytes, node: tree_sitter.Node) -> ParseFailure:
    row, byte_col = node.start_point
    column = utf16_column(source, node.start_byte, byte_col)
    if node.is_missing:
        message = f"Missing '{node.type}' at line {row + 1}, column {column + 1}"
    else:
        message = f"Unexpected syntax at line {row + 1}, column {column + 1}"
    return ParseFailure(message=message, line=row, column=column)


def parse(
    text: str,
    parser: Optional[tree_sitter.Parser] = None,
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES,
) -> ParseResult:
    """
    Parse source text, reporting syntax errors as a ParseFailure value.

    Never raises for any input text. Sources larger than max_source_bytes
    are refused without being parsed.
    """
    source = text.encode("utf-8", errors="replace")
    if len(source) > max_source_bytes:
        logger.warning(
            "Source too large to parse: %d bytes (limit %d)",
            len(source),
            max_source_bytes,
        )
        return ParseFailure(
            message=f"Source is {len(source)} bytes, above the {max_source_bytes} byte limit"
        )

    tree = parse_bytes(source, parser=parser)
    if not tree.root_node.has_error:
        return ParseSuccess(tree=tree, source=source)

    error_node = _first_error_node(tree.root_node)
    if error_node is None:
        failure = ParseFailure(message="Source contains syntax errors")
    else:
        failure = _describe_error(source, error_node)
    logger.warning("AST parsing failed: %s", failure.message)
    return failure
