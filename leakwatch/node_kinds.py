# Closed set of syntax-node kinds the structural rules reason about.
# Tree-sitter node types outside this set classify as OTHER; rule predicates
# treat OTHER as "shape not recognized, do not flag".

from __future__ import annotations

from enum import Enum
from typing import Optional

from tree_sitter import Node as TSNode


class NodeKind(Enum):
    CALL_EXPRESSION = "call_expression"
    ARROW_FUNCTION = "arrow_function"
    BLOCK_STATEMENT = "statement_block"
    RETURN_STATEMENT = "return_statement"
    IDENTIFIER = "identifier"
    PARENTHESIZED = "parenthesized_expression"
    OTHER = "other"


_KINDS_BY_TYPE = {kind.value: kind for kind in NodeKind if kind is not NodeKind.OTHER}


def classify(node: Optional[TSNode]) -> NodeKind:
    """Map a tree-sitter node to its NodeKind (OTHER for None or unknown types)."""
    if node is None:
        return NodeKind.OTHER
    return _KINDS_BY_TYPE.get(node.type, NodeKind.OTHER)


def named_children(node: TSNode) -> list[TSNode]:
    """Named children of node, without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def unwrap_parentheses(node: Optional[TSNode]) -> Optional[TSNode]:
    """Strip any number of enclosing parentheses: ((x)) -> x."""
    while classify(node) is NodeKind.PARENTHESIZED:
        inner = named_children(node)
        if len(inner) != 1:
            return node
        node = inner[0]
    return node
