"""
Scanner configuration: the rule registry and analysis limits.

The registry is an immutable, validated value. The built-in one is built once
per process by get_default_registry(); callers that want a different rule set
build their own RuleRegistry (or derive one with without()) and hand it to the
engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, Iterator, Optional, Sequence

from leakwatch.errors import ConfigurationError
from leakwatch.parser import DEFAULT_MAX_SOURCE_BYTES
from leakwatch.rules.base import Rule
from leakwatch.rules.effect_cleanup import EffectMissingCleanupRule
from leakwatch.rules.leak_patterns import build_pattern_rules

DEFAULT_MAX_NODES = 500_000


class RuleRegistry:
    """
    Ordered, read-only collection of rules.

    Validated on construction: every entry must be a Rule with a non-empty,
    unique id. Order is reporting order.
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        rules = tuple(rules)
        seen: set[str] = set()
        for rule in rules:
            if not isinstance(rule, Rule):
                raise ConfigurationError(f"Registry entry {rule!r} is not a Rule")
            rule_id = getattr(rule, "id", None)
            if not rule_id:
                raise ConfigurationError(f"Rule {rule!r} has no id")
            if rule_id in seen:
                raise ConfigurationError(f"Duplicate rule id: {rule_id}")
            seen.add(rule_id)
        self._rules = rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return any(rule.id == rule_id for rule in self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry({[rule.id for rule in self._rules]!r})"

    @property
    def ids(self) -> list[str]:
        return [rule.id for rule in self._rules]

    @property
    def structural_rules(self) -> tuple[Rule, ...]:
        return tuple(rule for rule in self._rules if rule.needs_tree)

    @property
    def pattern_rules(self) -> tuple[Rule, ...]:
        return tuple(rule for rule in self._rules if not rule.needs_tree)

    def get(self, rule_id: str) -> Optional[Rule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def without(self, rule_ids: Iterable[str]) -> "RuleRegistry":
        """Return a new registry without the given rule ids (unknown ids are an error)."""
        excluded = set(rule_ids)
        unknown = excluded - set(self.ids)
        if unknown:
            raise ConfigurationError(f"Unknown rule id(s): {', '.join(sorted(unknown))}")
        return RuleRegistry(rule for rule in self._rules if rule.id not in excluded)

    def without_patterns(self) -> "RuleRegistry":
        return RuleRegistry(rule for rule in self._rules if rule.needs_tree)


@lru_cache(maxsize=None)
def get_default_registry() -> RuleRegistry:
    """
    Return the built-in registry: the structural effect rule, then the pattern rules.

    Built and validated on first use, then shared read-only.
    """
    rules: list[Rule] = [EffectMissingCleanupRule()]
    rules.extend(build_pattern_rules())
    return RuleRegistry(rules)


@dataclass
class Config:
    """
    Scanner configuration.

    registry: rules to run, in order.
    max_nodes: upper bound on AST nodes visited per document.
    max_source_bytes: documents larger than this are not parsed.
    run_patterns: whether pattern rules run at all.
    """

    registry: RuleRegistry = field(default_factory=get_default_registry)
    max_nodes: Optional[int] = DEFAULT_MAX_NODES
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES
    run_patterns: bool = True

    def __post_init__(self) -> None:
        if self.max_nodes is not None and self.max_nodes < 1:
            raise ConfigurationError(f"max_nodes must be positive, got {self.max_nodes}")
        if self.max_source_bytes < 1:
            raise ConfigurationError(f"max_source_bytes must be positive, got {self.max_source_bytes}")


def get_default_config() -> Config:
    """Return the default configuration with all built-in rules enabled."""
    return Config()


def get_enabled_rules(config: Config | None = None) -> Sequence[Rule]:
    """
    Return the rules that will actually run under config (or the default config).

    Pattern rules are dropped when config.run_patterns is False.
    """
    if config is None:
        config = get_default_config()
    registry = config.registry if config.run_patterns else config.registry.without_patterns()
    return list(registry)
