"""Apply catalog rules to a source model."""

from __future__ import annotations

import logging

from guideline_lint.catalog import RuleCatalog
from guideline_lint.errors import RuleExecutionError
from guideline_lint.model import Declaration, SourceModel
from guideline_lint.rules import Finding, FindingKind, GuidelineRule, RuleOptions, Severity

logger = logging.getLogger(__name__)


def evaluate(
    catalog: RuleCatalog,
    model: SourceModel,
    options: RuleOptions | None = None,
) -> list[Finding]:
    """Run every rule against every declaration it targets.

    Findings come out in catalog order, then declaration order. A rule whose
    predicate raises contributes a single ``rule-error`` finding for this model
    and is skipped for the remaining declarations; other rules still run.
    """
    effective = options or RuleOptions()
    findings: list[Finding] = []
    for rule in catalog:
        findings.extend(_run_rule(rule, model, effective))
    return findings


def _run_rule(rule: GuidelineRule, model: SourceModel, options: RuleOptions) -> list[Finding]:
    findings: list[Finding] = []
    for declaration in model.declarations:
        if not rule.applies_to(declaration):
            continue
        try:
            hits = rule.predicate(declaration, model, options)
        except Exception as exc:
            error = RuleExecutionError(rule.rule_id, declaration.name, exc)
            logger.warning("%s: %s", model.path, error, exc_info=logger.isEnabledFor(logging.DEBUG))
            # Findings already produced by this rule for the model are kept.
            findings.append(_rule_error(rule, declaration, model, error))
            return findings
        for hit in hits:
            findings.append(
                Finding(
                    rule_id=rule.rule_id,
                    declaration_name=declaration.name,
                    file_path=model.path,
                    line=hit.line if hit.line is not None else declaration.line,
                    message=hit.message,
                    severity=rule.severity,
                )
            )
    return findings


def _rule_error(
    rule: GuidelineRule,
    declaration: Declaration,
    model: SourceModel,
    error: RuleExecutionError,
) -> Finding:
    return Finding(
        rule_id=rule.rule_id,
        declaration_name=declaration.name,
        file_path=model.path,
        line=declaration.line,
        message=f"Rule crashed: {error}",
        severity=Severity.ERROR,
        kind=FindingKind.RULE_ERROR,
    )
