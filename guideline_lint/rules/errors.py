"""Error-handling guidelines."""

from __future__ import annotations

from guideline_lint.model import Declaration, SourceModel
from guideline_lint.rules.base import Category, Hit, RuleOptions, Severity, function_rule


def empty_catch(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    count = declaration.empty_catch_count
    if count <= 0:
        return []
    noun = "handler" if count == 1 else "handlers"
    return [
        Hit(
            f"Function '{declaration.name}' has {count} empty exception {noun}; "
            "handle or propagate the error."
        )
    ]


def null_return(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if not declaration.returns_null:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' returns null; raise an error or return "
            "an empty value instead."
        )
    ]


EMPTY_CATCH = function_rule(
    "Errors.EmptyCatch",
    Category.ERRORS,
    Severity.WARNING,
    "Exception handlers should not be empty.",
    empty_catch,
)

NULL_RETURN = function_rule(
    "Errors.NullReturn",
    Category.ERRORS,
    Severity.SUGGESTION,
    "Functions should not return null to signal failure.",
    null_return,
)

RULES = (EMPTY_CATCH, NULL_RETURN)
