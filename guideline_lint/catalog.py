"""Immutable rule catalog assembled from guideline records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from guideline_lint.errors import CatalogError
from guideline_lint.rules import BUILTIN_RULES, PARSE_ERROR_RULE_ID, Category, GuidelineRule


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing."""

    rule_id: str
    category: str
    severity: str
    description: str
    enabled: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "category": self.category,
            "severity": self.severity,
            "description": self.description,
            "enabled": self.enabled,
        }


class RuleCatalog:
    """Ordered, read-only set of guideline rules."""

    __slots__ = ("_rules", "_by_id")

    def __init__(self, rules: Iterable[GuidelineRule]) -> None:
        ordered = tuple(rules)
        by_id: dict[str, GuidelineRule] = {}
        for rule in ordered:
            if rule.rule_id == PARSE_ERROR_RULE_ID:
                raise CatalogError(f"Rule id '{PARSE_ERROR_RULE_ID}' is reserved.")
            if rule.rule_id in by_id:
                raise CatalogError(f"Duplicate rule id: {rule.rule_id}")
            by_id[rule.rule_id] = rule
        self._rules = ordered
        self._by_id: Mapping[str, GuidelineRule] = MappingProxyType(by_id)

    def __iter__(self) -> Iterator[GuidelineRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    @property
    def rule_ids(self) -> tuple[str, ...]:
        return tuple(rule.rule_id for rule in self._rules)

    def get(self, rule_id: str) -> GuidelineRule:
        try:
            return self._by_id[rule_id]
        except KeyError:
            raise CatalogError(f"Unknown rule id: {rule_id}") from None

    def rules_for(self, category: Category | str) -> tuple[GuidelineRule, ...]:
        """Return the rules of one category in catalog order."""
        wanted = Category(category)
        return tuple(rule for rule in self._rules if rule.category is wanted)


def load_catalog(
    rules: Iterable[GuidelineRule] | None = None,
    *,
    enabled: list[str] | None = None,
    disabled: list[str] | None = None,
) -> RuleCatalog:
    """Build a catalog, optionally narrowed by enable/disable id lists.

    ``enabled`` acts as a whitelist when given; ``disabled`` always wins.
    Unknown ids in either list raise ``CatalogError``.
    """
    full = RuleCatalog(BUILTIN_RULES if rules is None else rules)
    requested = set(enabled or []) | set(disabled or [])
    unknown = [rule_id for rule_id in requested if rule_id not in full]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise CatalogError(f"Unknown rule ids: {joined}")
    if enabled is None and not disabled:
        return full

    disabled_set = set(disabled or [])
    enabled_set = set(enabled) if enabled is not None else None
    return RuleCatalog(
        rule
        for rule in full
        if rule.rule_id not in disabled_set
        and (enabled_set is None or rule.rule_id in enabled_set)
    )


def list_rule_info(
    *,
    enabled: list[str] | None = None,
    disabled: list[str] | None = None,
) -> list[RuleInfo]:
    """Return metadata for every built-in rule with its enabled state."""
    active = set(load_catalog(enabled=enabled, disabled=disabled).rule_ids)
    return [
        RuleInfo(
            rule_id=rule.rule_id,
            category=rule.category.value,
            severity=rule.severity.value,
            description=rule.description,
            enabled=rule.rule_id in active,
        )
        for rule in BUILTIN_RULES
    ]
