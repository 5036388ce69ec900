"""Control-flow guidelines: command/query separation and shallow nesting."""

from __future__ import annotations

from guideline_lint.model import Declaration, SourceModel
from guideline_lint.rules.base import Category, Hit, RuleOptions, Severity, function_rule


def command_query(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if not declaration.returns_value:
        return []
    prefix = _mutator_prefix(declaration.name, options.mutator_prefixes)
    if prefix is None:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' looks like a command ('{prefix}') but also "
            "returns a value; separate the command from the query."
        )
    ]


def nesting(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    if declaration.nesting_depth <= options.max_nesting:
        return []
    return [
        Hit(
            f"Function '{declaration.name}' nests control flow {declaration.nesting_depth} "
            f"levels deep (max {options.max_nesting}); use early returns or extract helpers."
        )
    ]


def _mutator_prefix(name: str, prefixes: tuple[str, ...]) -> str | None:
    bare = name.lstrip("_#$")
    for prefix in prefixes:
        if not bare.lower().startswith(prefix.lower()):
            continue
        rest = bare[len(prefix):]
        # Prefix must end at a word boundary: ``settings`` is not a setter.
        if not rest or rest[0].isupper() or rest[0] == "_" or rest[0].isdigit():
            return prefix
    return None


COMMAND_QUERY = function_rule(
    "ControlFlow.CommandQuery",
    Category.CONTROL_FLOW,
    Severity.WARNING,
    "Functions should either change state or answer a question, not both.",
    command_query,
)

NESTING = function_rule(
    "ControlFlow.Nesting",
    Category.CONTROL_FLOW,
    Severity.SUGGESTION,
    "Control flow should not nest deeply.",
    nesting,
)

RULES = (COMMAND_QUERY, NESTING)
