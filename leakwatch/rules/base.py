# Rule interface (abstract base class): defines the contract all rules must implement.
# Two strategies share it: StructuralRule walks the AST, PatternRule scans raw text.

from __future__ import annotations

import bisect
import re
from abc import ABC, abstractmethod
from typing import Iterator

from leakwatch.context import AnalysisContext
from leakwatch.errors import ConfigurationError
from leakwatch.findings.models import LINE_END_COLUMN, Finding, Severity, SourceSpan


class Rule(ABC):
    """
    Abstract base class for all leak detection rules.

    Subclasses must define:
    - id: str, unique rule identifier (e.g. "uncleared-interval")
    - name: str, human-readable rule name (e.g. "Uncleared setInterval")
    - description: str, what the rule reports
    - run(context) -> list[Finding], analyze one document and return findings

    Rules hold no state between runs; run() is a pure function of the context.
    """

    id: str
    name: str
    description: str
    severity: Severity = Severity.WARNING

    @property
    def needs_tree(self) -> bool:
        """True when the rule can only run on a successfully parsed document."""
        return False

    @abstractmethod
    def run(self, context: AnalysisContext) -> list[Finding]:
        """
        Analyze one document and return any findings, in document order.

        Args:
            context: Per-document state (text, UTF-8 source, AST or None).

        Returns:
            List of Finding objects; empty if no issues.
        """
        ...


class StructuralRule(Rule):
    """A rule that matches AST node shapes. Produces nothing without a tree."""

    @property
    def needs_tree(self) -> bool:
        return True

    def run(self, context: AnalysisContext) -> list[Finding]:
        if context.tree is None:
            return []
        return list(self.check(context))

    @abstractmethod
    def check(self, context: AnalysisContext) -> Iterator[Finding]:
        """Yield findings for a context whose tree is known to exist."""
        ...


class _LineIndex:
    """Offsets of line starts in a text, for offset -> 0-based line lookups."""

    def __init__(self, text: str) -> None:
        self._starts = [0]
        self._starts.extend(m.end() for m in re.finditer("\n", text))

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._starts, offset) - 1


class PatternRule(Rule):
    """
    A rule that matches a regular expression against the raw source text.

    Shape-unaware: a commented-out call still matches, and greedy patterns can
    run across several statements on one line. Findings only carry line
    precision (column 0 to LINE_END_COLUMN).
    """

    def __init__(
        self,
        id: str,
        name: str,
        description: str,
        pattern: str,
        suggestion: str,
        flags: int = 0,
        severity: Severity = Severity.WARNING,
    ) -> None:
        self.id = id
        self.name = name
        self.description = description
        self.suggestion = suggestion
        self.severity = severity
        try:
            self.regex = re.compile(pattern, flags)
        except re.error as exc:
            raise ConfigurationError(f"Rule {id!r} has an invalid pattern: {exc}") from exc

    def __repr__(self) -> str:
        return f"PatternRule(id={self.id!r}, pattern={self.regex.pattern!r})"

    @property
    def message(self) -> str:
        return f"{self.name}: {self.description}\nSuggestion: {self.suggestion}"

    def run(self, context: AnalysisContext) -> list[Finding]:
        return self.scan(context.text)

    def scan(self, text: str) -> list[Finding]:
        """Return one finding per match of the pattern, left to right."""
        findings: list[Finding] = []
        lines = None
        for match in self.regex.finditer(text):
            if lines is None:
                lines = _LineIndex(text)
            findings.append(
                Finding(
                    rule_id=self.id,
                    rule_name=self.name,
                    message=self.message,
                    severity=self.severity,
                    span=SourceSpan(
                        start_line=lines.line_of(match.start()),
                        start_column=0,
                        end_line=lines.line_of(match.end()),
                        end_column=LINE_END_COLUMN,
                    ),
                )
            )
        return findings
