"""Naming guidelines: pronounceable and descriptive names."""

from __future__ import annotations

import re

from guideline_lint.model import Declaration, DeclarationKind, SourceModel
from guideline_lint.rules.base import Category, GuidelineRule, Hit, RuleOptions, Severity

VOWELS = frozenset("aeiouy")
LOOP_COUNTERS = frozenset({"i", "j", "k", "_"})
_SEGMENT_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+")
_DUNDER_RE = re.compile(r"^__\w+__$")


def pronounceable(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    name = declaration.name
    if not _is_plain_name(name) or _DUNDER_RE.match(name):
        return []
    allowlist = {item.lower() for item in options.pronounceable_allowlist}
    letters = re.sub(r"[^A-Za-z]", "", name).lower()
    if letters in allowlist:
        return []

    if len(letters) > 2 and not VOWELS.intersection(letters):
        return [Hit(f"'{name}' has no vowels; use a pronounceable name.")]

    for segment in _SEGMENT_RE.findall(name):
        lowered = segment.lower()
        if len(lowered) <= 3 or lowered in allowlist:
            continue
        if not VOWELS.intersection(lowered):
            return [Hit(f"'{name}' contains the unpronounceable part '{segment}'.")]
    return []


def descriptive(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    name = declaration.name
    if not _is_plain_name(name):
        return []
    if declaration.kind is DeclarationKind.VARIABLE and name in LOOP_COUNTERS:
        return []
    bare = name.strip("_$#")
    if len(bare) >= options.min_name_length:
        return []
    return [
        Hit(
            f"{declaration.kind.value.capitalize()} name '{name}' is shorter than "
            f"{options.min_name_length} characters; use a descriptive name."
        )
    ]


def _is_plain_name(name: str) -> bool:
    # Computed members and destructuring patterns are reported with brackets.
    return bool(name) and name[0] not in "[{("


PRONOUNCEABLE = GuidelineRule(
    rule_id="Naming.Pronounceable",
    category=Category.NAMING,
    severity=Severity.SUGGESTION,
    description="Names should be pronounceable words, not consonant clusters.",
    predicate=pronounceable,
)

DESCRIPTIVE = GuidelineRule(
    rule_id="Naming.Descriptive",
    category=Category.NAMING,
    severity=Severity.SUGGESTION,
    description="Names should be long enough to describe what they hold or do.",
    predicate=descriptive,
)

RULES = (PRONOUNCEABLE, DESCRIPTIVE)
