# Textual leak heuristics: regex rules for timers, subscriptions and listeners

from __future__ import annotations

import re

from leakwatch.rules.base import PatternRule

# Any character except a line terminator, as JavaScript regexes define `.`
_LINE_CHAR = r"[^\n\r\u2028\u2029]"


def build_pattern_rules() -> list[PatternRule]:
    """
    Return the built-in pattern rules, in reporting order.

    The patterns are deliberately loose: repetition is greedy and unanchored, so a
    match can run across several statements on the same line, and calls inside
    comments or strings match too.
    """
    return [
        PatternRule(
            id="effect-missing-cleanup-text",
            name="Missing Cleanup in useEffect",
            description=(
                "useEffect is missing a cleanup function. This can cause memory leaks "
                "if listeners or timers are left active."
            ),
            pattern=r"useEffect\s*\(\s*\(.*\)\s*=>\s*\{[^}]*\}\s*,\s*\[.*\]\s*\)",
            flags=re.DOTALL,
            suggestion="Add a return cleanup function inside useEffect to remove listeners, intervals, etc.",
        ),
        PatternRule(
            id="uncleared-interval",
            name="Uncleared setInterval",
            description="setInterval is used without being cleared. This causes intervals to stack over time.",
            pattern=rf"setInterval\s*\({_LINE_CHAR}*\)[^;]*;",
            suggestion="Store interval ID and call clearInterval in a cleanup function.",
        ),
        PatternRule(
            id="uncleared-timeout",
            name="Uncleared setTimeout",
            description="setTimeout used without clearing or guarding for unmounted component.",
            pattern=rf"setTimeout\s*\({_LINE_CHAR}*\)[^;]*;",
            suggestion="Store timeout ID and clear it on unmount if needed.",
        ),
        PatternRule(
            id="unsubscribed-listener",
            name="Missing Firebase unsubscribe",
            description="Firebase onSnapshot or onAuthStateChanged used without unsubscribing.",
            pattern=rf"on(Snapshot|AuthStateChanged)\s*\({_LINE_CHAR}*=>{_LINE_CHAR}*\)",
            suggestion="Store the unsubscribe function and call it in your cleanup return.",
        ),
        PatternRule(
            id="unremoved-event-listener",
            name="DeviceEventEmitter leak",
            description="DeviceEventEmitter.addListener is used without being removed.",
            pattern=rf"DeviceEventEmitter\.addListener\s*\({_LINE_CHAR}*\)",
            suggestion="Store the subscription and call subscription.remove() on unmount.",
        ),
    ]
