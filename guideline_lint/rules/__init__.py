"""Rules package."""

from guideline_lint.rules import arguments, comments, control_flow, errors, functions, naming
from guideline_lint.rules.base import (
    DEFAULT_PRONOUNCEABLE_ALLOWLIST,
    PARSE_ERROR_RULE_ID,
    Category,
    Finding,
    FindingKind,
    GuidelineRule,
    Hit,
    RuleOptions,
    Severity,
)

BUILTIN_RULES: tuple[GuidelineRule, ...] = (
    *naming.RULES,
    *functions.RULES,
    *arguments.RULES,
    *control_flow.RULES,
    *errors.RULES,
    *comments.RULES,
)

__all__ = [
    "BUILTIN_RULES",
    "DEFAULT_PRONOUNCEABLE_ALLOWLIST",
    "PARSE_ERROR_RULE_ID",
    "Category",
    "Finding",
    "FindingKind",
    "GuidelineRule",
    "Hit",
    "RuleOptions",
    "Severity",
]
