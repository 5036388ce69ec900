"""File discovery and the build, evaluate, assemble pipeline."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from guideline_lint.catalog import RuleCatalog, load_catalog
from guideline_lint.errors import ParseError
from guideline_lint.evaluator import evaluate
from guideline_lint.parsing import build_source_model, is_supported_path
from guideline_lint.report import Report, assemble
from guideline_lint.rules import PARSE_ERROR_RULE_ID, Finding, FindingKind, RuleOptions, Severity

logger = logging.getLogger(__name__)

SKIP_DIRECTORIES = {".git", ".hg", ".tox", ".venv", "venv", "__pycache__", "node_modules"}


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A file to lint and the path it is reported under."""

    path: Path
    display_path: str


@dataclass(frozen=True, slots=True)
class LintResult:
    report: Report
    files_checked: int


def lint_source(
    content: str,
    *,
    path: str = "<input>",
    language: str | None = None,
    catalog: RuleCatalog | None = None,
    options: RuleOptions | None = None,
) -> list[Finding]:
    """Lint one in-memory source text; parse failures become findings."""
    try:
        model = build_source_model(content, path=path, language=_language_or_none(language))
    except ParseError as exc:
        logger.info("Skipping %s: %s (line %d)", path, exc.message, exc.line)
        return [parse_error_finding(path, exc.message, line=exc.line)]
    return evaluate(catalog if catalog is not None else load_catalog(), model, options)


def lint_paths(
    paths: Sequence[Path],
    *,
    catalog: RuleCatalog | None = None,
    options: RuleOptions | None = None,
    language: str | None = None,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    jobs: int = 1,
    cwd: Path | None = None,
) -> LintResult:
    """Lint files and directories, merging everything into one sorted report."""
    if jobs < 1:
        raise ValueError("jobs must be >= 1")
    active_catalog = catalog if catalog is not None else load_catalog()
    sources = discover_files(paths, include=include, exclude=exclude, cwd=cwd)

    def lint_one(source: SourceFile) -> list[Finding]:
        return _lint_file(source, catalog=active_catalog, options=options, language=language)

    if jobs == 1 or len(sources) <= 1:
        per_file = [lint_one(source) for source in sources]
    else:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            per_file = list(executor.map(lint_one, sources))

    findings = [finding for batch in per_file for finding in batch]
    return LintResult(report=assemble(findings), files_checked=len(sources))


def discover_files(
    paths: Iterable[Path],
    *,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    cwd: Path | None = None,
) -> list[SourceFile]:
    """Expand directories into supported source files.

    Paths named explicitly are always kept; ``include`` and ``exclude`` globs
    filter only the files found by walking directories.
    """
    base = (cwd or Path.cwd()).resolve()
    seen: set[Path] = set()
    sources: list[SourceFile] = []
    for raw in paths:
        if raw.is_dir():
            candidates = [
                item
                for item in _walk(raw)
                if _selected(_display_path(item, base), include=include, exclude=exclude)
            ]
        else:
            candidates = [raw]
        for item in candidates:
            key = item.resolve()
            if key in seen:
                continue
            seen.add(key)
            sources.append(SourceFile(path=item, display_path=_display_path(item, base)))
    return sources


def parse_error_finding(path: str, message: str, *, line: int = 1) -> Finding:
    return Finding(
        rule_id=PARSE_ERROR_RULE_ID,
        declaration_name="",
        file_path=path,
        line=line,
        message=f"Could not parse file: {message}",
        severity=Severity.ERROR,
        kind=FindingKind.PARSE_ERROR,
    )


def _lint_file(
    source: SourceFile,
    *,
    catalog: RuleCatalog,
    options: RuleOptions | None,
    language: str | None,
) -> list[Finding]:
    logger.debug("Checking %s", source.display_path)
    try:
        content = source.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.info("Unable to read %s: %s", source.display_path, exc)
        return [parse_error_finding(source.display_path, f"unable to read file ({exc})")]
    return lint_source(
        content,
        path=source.display_path,
        language=language,
        catalog=catalog,
        options=options,
    )


def _walk(root: Path) -> list[Path]:
    found: list[Path] = []
    for item in sorted(root.rglob("*")):
        if any(part in SKIP_DIRECTORIES for part in item.relative_to(root).parts[:-1]):
            continue
        if item.is_file() and is_supported_path(item.name):
            found.append(item)
    return found


def _selected(path: str, *, include: Sequence[str], exclude: Sequence[str]) -> bool:
    if include and not any(fnmatch.fnmatch(path, pattern) for pattern in include):
        return False
    if exclude and any(fnmatch.fnmatch(path, pattern) for pattern in exclude):
        return False
    return True


def _display_path(path: Path, base: Path) -> str:
    resolved = path.resolve()
    try:
        return resolved.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()


def _language_or_none(language: str | None) -> str | None:
    if language is None or language.lower() == "auto":
        return None
    return language
