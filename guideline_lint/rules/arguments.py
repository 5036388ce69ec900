"""Argument guidelines."""

from __future__ import annotations

from guideline_lint.model import Declaration, SourceModel
from guideline_lint.rules.base import Category, Hit, RuleOptions, Severity, function_rule


def output_argument(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if not declaration.has_output_param:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' writes its result into a parameter; "
            "return the value instead."
        )
    ]


OUTPUT_ARGUMENT = function_rule(
    "Arguments.OutputArgument",
    Category.ARGUMENTS,
    Severity.SUGGESTION,
    "Functions should return results instead of filling output parameters.",
    output_argument,
)

RULES = (OUTPUT_ARGUMENT,)
