# Leak detection engine: run the rule registry over one document and collect findings.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from tree_sitter import Parser

from leakwatch.config import Config, RuleRegistry, get_default_config
from leakwatch.context import AnalysisContext, create_context
from leakwatch.findings.models import Finding
from leakwatch.parser import create_parser
from leakwatch.rules.base import Rule

logger = logging.getLogger(__name__)


class LeakDetectionEngine:
    """
    Applies a RuleRegistry to documents.

    Holds no per-document state: each call parses its own tree and returns its
    own list, so one engine may serve several documents concurrently. A
    tree-sitter Parser is created per call for the same reason.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None, config: Optional[Config] = None) -> None:
        self.config = config if config is not None else get_default_config()
        self.registry = registry if registry is not None else self.config.registry

    def _run_rules(self, rules: Iterable[Rule], context: AnalysisContext) -> list[Finding]:
        findings: list[Finding] = []
        for rule in rules:
            try:
                findings.extend(rule.run(context))
            except Exception as exc:
                logger.exception(
                    "Rule %s failed on %s: %s",
                    rule.id,
                    context.path if context.path is not None else "<text>",
                    exc,
                )
        return findings

    def context_for(self, text: str, path: Optional[Path] = None, parser: Optional[Parser] = None) -> AnalysisContext:
        """Parse text into a context using this engine's limits."""
        return create_context(
            text,
            path=path,
            parser=parser if parser is not None else create_parser(),
            max_source_bytes=self.config.max_source_bytes,
            max_nodes=self.config.max_nodes,
        )

    def detect(self, context: AnalysisContext) -> list[Finding]:
        """Run the structural rules. Returns [] when the context has no tree."""
        if context.tree is None:
            return []
        return self._run_rules(self.registry.structural_rules, context)

    def detect_by_pattern(self, text: str) -> list[Finding]:
        """Run the pattern rules over raw text; independent of parse success."""
        context = AnalysisContext(text=text, source=b"", tree=None)
        return self._run_rules(self.registry.pattern_rules, context)

    def analyze_context(self, context: AnalysisContext) -> list[Finding]:
        findings = self.detect(context)
        if self.config.run_patterns:
            findings.extend(self._run_rules(self.registry.pattern_rules, context))
        return findings

    def analyze(self, source_text: str, path: Optional[Path] = None) -> list[Finding]:
        """
        Analyze one document: structural findings first, then pattern findings.

        Never raises. A document that fails to parse still gets pattern findings.
        """
        context = self.context_for(source_text, path=path)
        findings = self.analyze_context(context)
        logger.debug(
            "Analyzed %s: %d finding(s)",
            path if path is not None else "<text>",
            len(findings),
        )
        return findings


def analyze(source_text: str, config: Optional[Config] = None) -> list[Finding]:
    """Analyze source text with the given (or default) configuration."""
    return LeakDetectionEngine(config=config).analyze(source_text)
