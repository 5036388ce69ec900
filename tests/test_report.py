"""Report assembly and rendering tests."""

from __future__ import annotations

import json
import random

import click

from guideline_lint import __version__
from guideline_lint.report import assemble, render_json, render_summary, render_text
from guideline_lint.rules import Finding, FindingKind, Severity


def _finding(
    path: str,
    line: int,
    rule_id: str,
    *,
    name: str = "handler",
    severity: Severity = Severity.WARNING,
    kind: FindingKind = FindingKind.VIOLATION,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        declaration_name=name,
        file_path=path,
        line=line,
        message=f"{rule_id} on {name}",
        severity=severity,
        kind=kind,
    )


FINDINGS = [
    _finding("src/a.js", 3, "Functions.BooleanFlag"),
    _finding("src/a.js", 3, "Functions.ArgumentCount"),
    _finding("src/a.js", 12, "Errors.NullReturn", severity=Severity.SUGGESTION),
    _finding("src/a.js", 12, "Errors.NullReturn", name="alpha", severity=Severity.SUGGESTION),
    _finding("src/b.py", 1, "Naming.Descriptive"),
    _finding("lib/z.js", 40, "ControlFlow.Nesting", severity=Severity.SUGGESTION),
]


def test_assemble_orders_by_file_line_rule_regardless_of_input_order() -> None:
    expected = [
        ("lib/z.js", 40, "ControlFlow.Nesting", "handler"),
        ("src/a.js", 3, "Functions.ArgumentCount", "handler"),
        ("src/a.js", 3, "Functions.BooleanFlag", "handler"),
        ("src/a.js", 12, "Errors.NullReturn", "alpha"),
        ("src/a.js", 12, "Errors.NullReturn", "handler"),
        ("src/b.py", 1, "Naming.Descriptive", "handler"),
    ]
    rng = random.Random(7)
    for _ in range(5):
        shuffled = list(FINDINGS)
        rng.shuffle(shuffled)
        report = assemble(shuffled)
        assert [
            (item.file_path, item.line, item.rule_id, item.declaration_name)
            for item in report.findings
        ] == expected


def test_render_text_one_line_per_finding() -> None:
    report = assemble(FINDINGS[:2])

    assert render_text(report).splitlines() == [
        "src/a.js:3: [Functions.ArgumentCount] Functions.ArgumentCount on handler",
        "src/a.js:3: [Functions.BooleanFlag] Functions.BooleanFlag on handler",
    ]
    assert render_text(assemble([])) == ""


def test_render_json_is_stable_and_complete() -> None:
    first = render_json(assemble(FINDINGS), files_checked=4)
    second = render_json(assemble(list(reversed(FINDINGS))), files_checked=4)
    assert first == second

    payload = json.loads(first)
    assert set(payload.keys()) == {"findings", "summary", "meta"}
    assert payload["meta"] == {"version": __version__}
    assert payload["summary"] == {
        "total": 6,
        "by_severity": {"warning": 3, "suggestion": 3, "error": 0},
        "files_with_findings": 3,
        "parse_errors": 0,
        "files_checked": 4,
    }
    assert set(payload["findings"][0].keys()) == {
        "rule_id",
        "declaration_name",
        "file_path",
        "line",
        "message",
        "severity",
        "kind",
    }


def test_report_queries() -> None:
    parse_error = _finding(
        "src/broken.js",
        2,
        "ParseError",
        name="",
        severity=Severity.ERROR,
        kind=FindingKind.PARSE_ERROR,
    )
    report = assemble([*FINDINGS, parse_error])

    assert report.has_errors() is True
    assert assemble(FINDINGS).has_errors() is False
    assert report.counts_by_severity()["error"] == 1
    assert report.files == ("lib/z.js", "src/a.js", "src/b.py", "src/broken.js")
    assert assemble([]).is_empty() is True


def test_render_summary() -> None:
    empty = click.unstyle(render_summary(assemble([]), files_checked=3))
    assert empty == "No findings in 3 file(s)."

    summary = click.unstyle(render_summary(assemble(FINDINGS), files_checked=5))
    assert summary == "6 finding(s) in 3 of 5 file(s): 3 warning, 3 suggestion"
