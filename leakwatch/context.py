# Per-document analysis context: store source text, AST (when it parsed), and helper methods.
# Handles reading/parsing JS/TS files, degrading to a tree-less context on parse
# failure, bounded tree walks, and node -> SourceSpan conversion for rules.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from tree_sitter import Node as TSNode
from tree_sitter import Parser, Tree

from leakwatch.findings.models import SourceSpan
from leakwatch.parser import DEFAULT_MAX_SOURCE_BYTES, ParseFailure, create_parser, parse, utf16_column

logger = logging.getLogger(__name__)


def walk(node: TSNode, max_nodes: Optional[int] = None) -> Iterator[TSNode]:
    """
    Yield node and every descendant in document order (pre-order DFS).

    Stops after max_nodes nodes when a limit is given, logging a warning.
    """
    stack = [node]
    visited = 0
    while stack:
        if max_nodes is not None and visited >= max_nodes:
            logger.warning("Tree walk stopped after %d nodes; findings may be incomplete", visited)
            return
        current = stack.pop()
        visited += 1
        yield current
        stack.extend(reversed(current.children))


def count_tree_stats(root: TSNode, max_nodes: Optional[int] = None) -> tuple[int, int]:
    """
    Return (node count, call expression count) for the tree, up to max_nodes nodes.

    Useful for logging how much was parsed.
    """
    nodes = 0
    calls = 0
    for node in walk(root, max_nodes):
        nodes += 1
        if node.type == "call_expression":
            calls += 1
    return nodes, calls


class AnalysisContext:
    """
    Per-document state for one analysis: raw text, UTF-8 bytes, and AST.

    tree is None when the source failed to parse; parse_error then holds the
    failure. Pattern rules only need text; structural rules need tree.
    """

    def __init__(
        self,
        text: str,
        source: bytes,
        tree: Optional[Tree],
        *,
        path: Optional[Path] = None,
        parse_error: Optional[ParseFailure] = None,
        max_nodes: Optional[int] = None,
    ) -> None:
        self.text = text
        self.source = source
        self.tree = tree
        self.path = path
        self.parse_error = parse_error
        self.max_nodes = max_nodes

    @property
    def root_node(self) -> Optional[TSNode]:
        """Convenience access to the AST root (None when parsing failed)."""
        return self.tree.root_node if self.tree is not None else None

    def walk(self) -> Iterator[TSNode]:
        """Walk the whole tree, honoring max_nodes. Yields nothing without a tree."""
        root = self.root_node
        if root is None:
            return iter(())
        return walk(root, self.max_nodes)


def get_source_span(context: AnalysisContext, node: TSNode) -> str:
    """
    Return the substring of context.source for the given node's byte range.

    Decodes with errors="replace" so bad UTF-8 does not crash.
    """
    return context.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_span(context: AnalysisContext, node: TSNode) -> SourceSpan:
    """
    SourceSpan covering node exactly: start of its first char to just past its last.

    Columns are UTF-16 code units, as editors count them.
    """
    start_row, start_byte_col = node.start_point
    end_row, end_byte_col = node.end_point
    return SourceSpan(
        start_line=start_row,
        start_column=utf16_column(context.source, node.start_byte, start_byte_col),
        end_line=end_row,
        end_column=utf16_column(context.source, node.end_byte, end_byte_col),
    )


def create_context(
    text: str,
    *,
    path: Optional[Path] = None,
    parser: Optional[Parser] = None,
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES,
    max_nodes: Optional[int] = None,
) -> AnalysisContext:
    """
    Parse text into an AnalysisContext.

    - Valid source: context with tree set; logs node and call counts.
    - Syntax errors or oversized source: context with tree=None and
      parse_error set; the failure was already logged by the parser.
    """
    result = parse(text, parser=parser, max_source_bytes=max_source_bytes)
    if isinstance(result, ParseFailure):
        return AnalysisContext(
            text=text,
            source=text.encode("utf-8", errors="replace"),
            tree=None,
            path=path,
            parse_error=result,
            max_nodes=max_nodes,
        )

    if logger.isEnabledFor(logging.DEBUG):
        node_count, call_count = count_tree_stats(result.tree.root_node, max_nodes)
        logger.debug(
            "Parsed %s: %d nodes, %d call(s)",
            path if path is not None else "<text>",
            node_count,
            call_count,
        )
    return AnalysisContext(
        text=text,
        source=result.source,
        tree=result.tree,
        path=path,
        max_nodes=max_nodes,
    )


def read_source(path: Path) -> Optional[str]:
    """
    Read a source file as text, or return None (logged) if it cannot be read.

    Undecodable bytes are replaced rather than failing the file.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None
    return raw.decode("utf-8", errors="replace")


def load_contexts(
    paths: list[Path],
    parser: Optional[Parser] = None,
    max_nodes: Optional[int] = None,
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES,
) -> list[AnalysisContext]:
    """
    Read and parse multiple files into AnalysisContexts.

    Unreadable or missing files are skipped (logged); files with syntax errors
    still get a context with tree=None. Order matches input order.
    """
    if parser is None:
        parser = create_parser()

    contexts: list[AnalysisContext] = []
    for path in paths:
        text = read_source(path)
        if text is None:
            continue
        contexts.append(
            create_context(
                text,
                path=path,
                parser=parser,
                max_source_bytes=max_source_bytes,
                max_nodes=max_nodes,
            )
        )
    return contexts
