"""Rule records, predicate contract, and finding model."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from guideline_lint.model import Declaration, DeclarationKind, SourceModel

PARSE_ERROR_RULE_ID = "ParseError"

DEFAULT_PRONOUNCEABLE_ALLOWLIST = (
    "api",
    "btn",
    "cfg",
    "cls",
    "cmd",
    "csv",
    "ctx",
    "db",
    "dst",
    "env",
    "fn",
    "fmt",
    "html",
    "http",
    "https",
    "img",
    "json",
    "msg",
    "pkg",
    "png",
    "px",
    "rgb",
    "sql",
    "src",
    "str",
    "svg",
    "tmp",
    "txt",
    "url",
    "xml",
)


class Category(str, Enum):
    """Guideline categories, in catalog order."""

    NAMING = "Naming"
    FUNCTIONS = "Functions"
    ARGUMENTS = "Arguments"
    CONTROL_FLOW = "ControlFlow"
    ERRORS = "Errors"
    COMMENTS = "Comments"


class Severity(str, Enum):
    WARNING = "warning"
    SUGGESTION = "suggestion"
    ERROR = "error"


class FindingKind(str, Enum):
    VIOLATION = "violation"
    RULE_ERROR = "rule-error"
    PARSE_ERROR = "parse-error"


@dataclass(frozen=True, slots=True)
class RuleOptions:
    """Thresholds handed to every predicate."""

    max_params: int = 2
    boolean_flag_detection: bool = True
    comment_overlap_threshold: float = 0.8
    max_statements: int = 20
    max_nesting: int = 3
    min_name_length: int = 2
    mutator_prefixes: tuple[str, ...] = ("set", "create", "update")
    pronounceable_allowlist: tuple[str, ...] = DEFAULT_PRONOUNCEABLE_ALLOWLIST


@dataclass(frozen=True, slots=True)
class Hit:
    """A predicate match; the evaluator turns it into a finding."""

    message: str
    line: int | None = None


Predicate = Callable[[Declaration, SourceModel, RuleOptions], list[Hit]]


@dataclass(frozen=True, slots=True)
class GuidelineRule:
    """One guideline: an id, its metadata, and a pure predicate."""

    rule_id: str
    category: Category
    severity: Severity
    description: str
    predicate: Predicate
    kinds: frozenset[DeclarationKind] = frozenset(DeclarationKind)

    def applies_to(self, declaration: Declaration) -> bool:
        return declaration.kind in self.kinds


@dataclass(frozen=True, slots=True)
class Finding:
    """A single guideline violation or engine failure."""

    rule_id: str
    declaration_name: str
    file_path: str
    line: int
    message: str
    severity: Severity
    kind: FindingKind = FindingKind.VIOLATION

    def sort_key(self) -> tuple[str, int, str, str, str]:
        return (self.file_path, self.line, self.rule_id, self.declaration_name, self.message)

    def to_dict(self) -> dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "declaration_name": self.declaration_name,
            "file_path": self.file_path,
            "line": self.line,
            "message": self.message,
            "severity": self.severity.value,
            "kind": self.kind.value,
        }


def function_rule(
    rule_id: str,
    category: Category,
    severity: Severity,
    description: str,
    predicate: Predicate,
) -> GuidelineRule:
    return GuidelineRule(
        rule_id=rule_id,
        category=category,
        severity=severity,
        description=description,
        predicate=predicate,
        kinds=frozenset({DeclarationKind.FUNCTION}),
    )
