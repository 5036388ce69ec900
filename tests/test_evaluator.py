"""Tests for rule evaluation and fault isolation."""

from __future__ import annotations

import logging

import pytest

from guideline_lint.catalog import RuleCatalog, load_catalog
from guideline_lint.evaluator import evaluate
from guideline_lint.model import Declaration, DeclarationKind, SourceModel
from guideline_lint.parsing import build_source_model
from guideline_lint.rules import (
    Category,
    FindingKind,
    GuidelineRule,
    Hit,
    RuleOptions,
    Severity,
)


def _model() -> SourceModel:
    return SourceModel(
        path="src/users.js",
        language="javascript",
        declarations=(
            Declaration(kind=DeclarationKind.FUNCTION, name="first", line=1, end_line=3),
            Declaration(kind=DeclarationKind.VARIABLE, name="second", line=5, end_line=5),
            Declaration(kind=DeclarationKind.FUNCTION, name="third", line=7, end_line=9),
        ),
    )


def _rule(rule_id: str, predicate, *, kinds=frozenset(DeclarationKind)) -> GuidelineRule:
    return GuidelineRule(
        rule_id=rule_id,
        category=Category.FUNCTIONS,
        severity=Severity.WARNING,
        description=rule_id,
        predicate=predicate,
        kinds=kinds,
    )


def _always(declaration, model, options):
    return [Hit(f"{declaration.name} matched")]


def _explode(declaration, model, options):
    raise RuntimeError("boom")


def test_findings_follow_catalog_then_declaration_order() -> None:
    catalog = RuleCatalog(
        [
            _rule("Test.Functions", _always, kinds=frozenset({DeclarationKind.FUNCTION})),
            _rule("Test.All", _always),
        ]
    )

    findings = evaluate(catalog, _model())

    assert [(item.rule_id, item.declaration_name) for item in findings] == [
        ("Test.Functions", "first"),
        ("Test.Functions", "third"),
        ("Test.All", "first"),
        ("Test.All", "second"),
        ("Test.All", "third"),
    ]
    assert {item.file_path for item in findings} == {"src/users.js"}
    assert findings[0].line == 1
    assert findings[0].kind is FindingKind.VIOLATION


def test_hit_line_overrides_declaration_line() -> None:
    catalog = RuleCatalog([_rule("Test.Line", lambda d, m, o: [Hit("at comment", line=42)])])

    findings = evaluate(catalog, _model())

    assert {item.line for item in findings} == {42}


def test_throwing_rule_does_not_suppress_other_rules(caplog: pytest.LogCaptureFixture) -> None:
    catalog = RuleCatalog(
        [
            _rule("Test.First", _always),
            _rule("Test.Broken", _explode),
            _rule("Test.Third", _always),
        ]
    )

    with caplog.at_level(logging.WARNING, logger="guideline_lint.evaluator"):
        findings = evaluate(catalog, _model())

    by_rule: dict[str, list] = {}
    for finding in findings:
        by_rule.setdefault(finding.rule_id, []).append(finding)

    assert len(by_rule["Test.First"]) == 3
    assert len(by_rule["Test.Third"]) == 3
    assert len(by_rule["Test.Broken"]) == 1
    error = by_rule["Test.Broken"][0]
    assert error.kind is FindingKind.RULE_ERROR
    assert error.severity is Severity.ERROR
    assert error.declaration_name == "first"
    assert "RuntimeError: boom" in error.message
    assert "Test.Broken failed on 'first'" in caplog.text


def test_every_finding_names_a_catalog_rule() -> None:
    catalog = load_catalog()
    model = build_source_model(
        "\n".join(
            [
                "function setRecord(a, b, c, isDraft) {",
                "  try { write(a); } catch (e) {}",
                "  return null;",
                "}",
            ]
        ),
        path="records.js",
    )

    findings = evaluate(catalog, model)

    assert findings
    assert {item.rule_id for item in findings} <= set(catalog.rule_ids)


def test_evaluation_is_idempotent() -> None:
    catalog = load_catalog()
    model = build_source_model(
        "def update_user(user, is_admin, name, email):\n    user.append(name)\n    return None\n",
        path="users.py",
    )

    assert evaluate(catalog, model) == evaluate(catalog, model)


def test_five_parameter_function_gives_exactly_one_argument_count_finding() -> None:
    model = SourceModel(
        path="x.js",
        language="javascript",
        declarations=(
            Declaration(
                kind=DeclarationKind.FUNCTION,
                name="x",
                line=1,
                end_line=1,
                param_count=5,
                uses_boolean_flag_param=True,
                returns_null=True,
            ),
        ),
    )

    findings = evaluate(load_catalog(), model)

    assert [item.rule_id for item in findings].count("Functions.ArgumentCount") == 1


def test_options_flow_into_predicates() -> None:
    model = build_source_model("function pair(a, b, c) {}", path="pair.js")
    catalog = load_catalog(enabled=["Functions.ArgumentCount"])

    assert len(evaluate(catalog, model)) == 1
    assert evaluate(catalog, model, RuleOptions(max_params=3)) == []
