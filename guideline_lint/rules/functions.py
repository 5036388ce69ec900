"""Function design guidelines: few arguments, no flags, small bodies."""

from __future__ import annotations

from guideline_lint.model import Declaration, SourceModel
from guideline_lint.rules.base import Category, Hit, RuleOptions, Severity, function_rule


def argument_count(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if declaration.param_count <= options.max_params:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' takes {declaration.param_count} parameters "
            f"(max {options.max_params}); group related arguments into an object."
        )
    ]


def boolean_flag(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if not options.boolean_flag_detection or not declaration.uses_boolean_flag_param:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' takes a boolean flag parameter; "
            "split it into functions that each do one thing."
        )
    ]


def size(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if declaration.body_statement_count <= options.max_statements:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' has {declaration.body_statement_count} statements "
            f"(max {options.max_statements}); extract smaller functions."
        )
    ]


ARGUMENT_COUNT = function_rule(
    "Functions.ArgumentCount",
    Category.FUNCTIONS,
    Severity.WARNING,
    "Functions should take at most a few parameters.",
    argument_count,
)

BOOLEAN_FLAG = function_rule(
    "Functions.BooleanFlag",
    Category.FUNCTIONS,
    Severity.WARNING,
    "Functions should not take boolean flag parameters.",
    boolean_flag,
)

SIZE = function_rule(
    "Functions.Size",
    Category.FUNCTIONS,
    Severity.SUGGESTION,
    "Function bodies should stay small.",
    size,
)

RULES = (ARGUMENT_COUNT, BOOLEAN_FLAG, SIZE)
