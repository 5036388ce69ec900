"""Report assembly and rendering."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import click

from guideline_lint import __version__
from guideline_lint.rules import Finding, FindingKind, Severity

_SEVERITY_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.SUGGESTION: "cyan",
}


@dataclass(frozen=True, slots=True)
class Report:
    """Deterministically ordered findings for one lint run."""

    findings: tuple[Finding, ...] = ()

    def is_empty(self) -> bool:
        return not self.findings

    def has_errors(self) -> bool:
        """Return whether any file failed to parse."""
        return any(item.kind is FindingKind.PARSE_ERROR for item in self.findings)

    def counts_by_severity(self) -> dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    @property
    def files(self) -> tuple[str, ...]:
        return tuple(sorted({finding.file_path for finding in self.findings}))


def assemble(findings: Iterable[Finding]) -> Report:
    """Sort findings by file, line and rule id into a report.

    Remaining ties fall back to declaration name and message so the same
    findings always serialize identically.
    """
    return Report(findings=tuple(sorted(findings, key=Finding.sort_key)))


def render_text(report: Report) -> str:
    """Render one ``path:line: [rule] message`` line per finding."""
    return "\n".join(
        f"{finding.file_path}:{finding.line}: [{finding.rule_id}] {finding.message}"
        for finding in report.findings
    )


def render_summary(report: Report, *, files_checked: int) -> str:
    """Render a compact colorized summary for stderr."""
    if report.is_empty():
        return click.style(f"No findings in {files_checked} file(s).", fg="green", bold=True)

    counts = report.counts_by_severity()
    parts = [
        click.style(f"{counts[severity.value]} {severity.value}", fg=color)
        for severity, color in _SEVERITY_COLORS.items()
        if counts[severity.value]
    ]
    headline = click.style(
        f"{len(report.findings)} finding(s) in {len(report.files)} of {files_checked} file(s)",
        bold=True,
    )
    return f"{headline}: {', '.join(parts)}"


def render_json(report: Report, *, files_checked: int | None = None) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(report, files_checked=files_checked), sort_keys=True)


def build_json_payload(report: Report, *, files_checked: int | None = None) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "total": len(report.findings),
        "by_severity": report.counts_by_severity(),
        "files_with_findings": len(report.files),
        "parse_errors": sum(
            1 for item in report.findings if item.kind is FindingKind.PARSE_ERROR
        ),
    }
    if files_checked is not None:
        summary["files_checked"] = files_checked
    return {
        "findings": [finding.to_dict() for finding in report.findings],
        "summary": summary,
        "meta": {"version": __version__},
    }
