"""Exception types raised by guideline-lint."""

from __future__ import annotations


class GuidelineLintError(Exception):
    """Base class for guideline-lint failures."""


class CatalogError(GuidelineLintError):
    """Raised when the rule catalog cannot be assembled."""


class ConfigError(GuidelineLintError, ValueError):
    """Raised when a configuration file is missing or invalid."""


class ParseError(GuidelineLintError):
    """Raised when a source file cannot be turned into a source model."""

    def __init__(self, message: str, *, line: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class RuleExecutionError(GuidelineLintError):
    """A rule predicate raised while evaluating a declaration."""

    def __init__(self, rule_id: str, declaration_name: str, cause: BaseException) -> None:
        super().__init__(
            f"{rule_id} failed on '{declaration_name}': {cause.__class__.__name__}: {cause}"
        )
        self.rule_id = rule_id
        self.declaration_name = declaration_name
        self.cause = cause
