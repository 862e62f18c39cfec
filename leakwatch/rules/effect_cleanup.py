# Effect cleanup detection: flags effect registrations (useEffect) whose callback never returns a teardown

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from tree_sitter import Node as TSNode

from leakwatch.context import AnalysisContext, get_source_span, node_span
from leakwatch.findings.models import Finding
from leakwatch.node_kinds import NodeKind, classify, named_children, unwrap_parentheses
from leakwatch.rules.base import StructuralRule

DEFAULT_EFFECT_FUNCTIONS = frozenset({"useEffect"})


def _called_effect_name(
    context: AnalysisContext, call_node: TSNode, effect_functions: frozenset[str]
) -> Optional[str]:
    """Return the callee name if call_node is `<effect>(...)` with a bare identifier callee."""
    callee = call_node.child_by_field_name("function")
    if classify(callee) is not NodeKind.IDENTIFIER:
        return None
    name = get_source_span(context, callee)
    return name if name in effect_functions else None


def _effect_callback(call_node: TSNode) -> Optional[TSNode]:
    """The first argument when it is an arrow function, else None."""
    args = call_node.child_by_field_name("arguments")
    if args is None:
        return None
    positional = named_children(args)
    if not positional:
        return None
    first = positional[0]
    if classify(first) is not NodeKind.ARROW_FUNCTION:
        return None
    return first


def _returns_cleanup(statement: TSNode) -> bool:
    """True for `return <arrow function>;` (parentheses around the arrow allowed)."""
    if classify(statement) is not NodeKind.RETURN_STATEMENT:
        return False
    returned = named_children(statement)
    if not returned:
        return False
    return classify(unwrap_parentheses(returned[0])) is NodeKind.ARROW_FUNCTION


def has_cleanup(callback: TSNode) -> bool:
    """
    Whether an effect callback returns a cleanup function.

    Only the direct statements of a block body are inspected: a cleanup
    returned from inside an `if` or nested block is not seen. An expression
    body never counts as a cleanup.
    """
    body = callback.child_by_field_name("body")
    if classify(body) is not NodeKind.BLOCK_STATEMENT:
        return False
    return any(_returns_cleanup(statement) for statement in named_children(body))


class EffectMissingCleanupRule(StructuralRule):
    """Flags `useEffect(() => { ... })` calls whose callback has no top-level `return () => ...`."""

    id = "effect-missing-cleanup"
    name = "Missing Cleanup in useEffect"
    description = "Effect callback does not return a cleanup function."

    def __init__(self, effect_functions: Optional[Iterable[str]] = None) -> None:
        self.effect_functions = (
            frozenset(effect_functions) if effect_functions is not None else DEFAULT_EFFECT_FUNCTIONS
        )

    def check(self, context: AnalysisContext) -> Iterator[Finding]:
        for node in context.walk():
            if classify(node) is not NodeKind.CALL_EXPRESSION:
                continue
            effect_name = _called_effect_name(context, node, self.effect_functions)
            if effect_name is None:
                continue
            callback = _effect_callback(node)
            if callback is None:
                # Ambiguous shape (no callback, or not an arrow function): do not flag.
                continue
            if has_cleanup(callback):
                continue
            yield Finding(
                rule_id=self.id,
                rule_name=self.name,
                message=(
                    f"{effect_name} is missing a cleanup function (no return). "
                    "This may cause memory leaks."
                ),
                severity=self.severity,
                span=node_span(context, node),
            )
