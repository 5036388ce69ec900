"""Comment guidelines: no restating the code, no dead code in comments."""

from __future__ import annotations

import re

from guideline_lint.model import CommentSpan, Declaration, SourceModel
from guideline_lint.rules.base import Category, GuidelineRule, Hit, RuleOptions, Severity

STOP_WORDS = frozenset(
    {"a", "an", "the", "to", "of", "and", "or", "in", "on", "for", "is", "it", "this", "we", "by"}
)
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
_CODE_PATTERNS = (
    re.compile(r"[;{}]\s*$"),
    re.compile(r"^(?:const|let|var)\s+[\w$]+\s*[:=]"),
    re.compile(r"^(?:return|throw|raise|yield)\s+(?:\S+|.*[()\]])$"),
    re.compile(r"^(?:if|for|while|switch)\s*\(.*\)\s*\{?$"),
    re.compile(r"^(?:def|class|function|async\s+def)\s+\w+\s*[(:]"),
    re.compile(r"^(?:if|elif|else|for|while|try|except|with)\b.*:$"),
    re.compile(r"^(?:from\s+[\w.]+\s+)?import\s+[\w.]+(?:\s+as\s+\w+)?$"),
    re.compile(r"^[\w.\[\]'\"]+\s*(?:[-+*/%|&]?=)\s*[^=\s].*$"),
    re.compile(r"^[\w.]+\(.*\)$"),
)
_DIRECTIVE_RE = re.compile(
    r"^(?:type:|noqa|pragma|eslint|prettier|istanbul|@ts-|jshint|fmt:|pylint:|mypy:|-\*-|!)"
)


def redundant(declaration: Declaration, model: SourceModel, options: RuleOptions) -> list[Hit]:
    hits: list[Hit] = []
    for comment in declaration.comments:
        ratio = overlap_ratio(comment.text, comment.following_code)
        if ratio is None or ratio < options.comment_overlap_threshold:
            continue
        hits.append(
            Hit(
                f"Comment restates the code it describes ({ratio:.0%} word overlap); "
                "explain intent or remove it.",
                line=comment.line,
            )
        )
    return hits


def commented_out_code(
    declaration: Declaration, model: SourceModel, options: RuleOptions
) -> list[Hit]:
    return [
        Hit("Comment contains commented-out code; delete it.", line=comment.line)
        for comment in declaration.comments
        if looks_like_code(comment)
    ]


def overlap_ratio(comment: str, code: str) -> float | None:
    """Share of the comment's meaningful words that also appear in ``code``."""
    words = _words(comment) - STOP_WORDS
    if not words or not code:
        return None
    return len(words & _words(code)) / len(words)


def looks_like_code(comment: CommentSpan) -> bool:
    text = comment.text.strip()
    if not text or _DIRECTIVE_RE.match(text):
        return False
    return any(pattern.search(text) for pattern in _CODE_PATTERNS)


def _words(text: str) -> set[str]:
    return {word.lower() for word in _WORD_RE.findall(text)}


REDUNDANT = GuidelineRule(
    rule_id="Comments.Redundant",
    category=Category.COMMENTS,
    severity=Severity.SUGGESTION,
    description="Comments should add information the code does not already state.",
    predicate=redundant,
)

COMMENTED_OUT_CODE = GuidelineRule(
    rule_id="Comments.CommentedOutCode",
    category=Category.COMMENTS,
    severity=Severity.SUGGESTION,
    description="Dead code should be deleted, not commented out.",
    predicate=commented_out_code,
)

RULES = (REDUNDANT, COMMENTED_OUT_CODE)
