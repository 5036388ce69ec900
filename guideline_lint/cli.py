"""CLI entrypoint for guideline-lint."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from guideline_lint import __version__
from guideline_lint.catalog import RuleCatalog, list_rule_info, load_catalog
from guideline_lint.config import (
    LANGUAGE_CHOICES,
    OUTPUT_FORMATS,
    AppConfig,
    default_config_template,
    load_app_config,
)
from guideline_lint.errors import CatalogError, ConfigError
from guideline_lint.pipeline import lint_paths
from guideline_lint.report import render_json, render_summary, render_text

app = typer.Typer(
    name="guideline-lint",
    no_args_is_help=True,
    help="Check source files against clean-code guidelines.",
)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("check")
def check_command(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to check.", show_default=False),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: text|json.", show_default="text")
    ] = None,
    jobs: Annotated[
        int | None, typer.Option(help="Number of files to check in parallel.", show_default="1")
    ] = None,
    language: Annotated[
        str | None,
        typer.Option(help="Source language: auto|python|javascript.", show_default="auto"),
    ] = None,
    enable: Annotated[
        list[str] | None,
        typer.Option("--enable", help="Only run this rule id (repeatable)."),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option("--disable", help="Skip this rule id (repeatable)."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress to stderr.")] = False,
) -> None:
    """Check files and print one line per finding."""
    app_config = _load_config_or_raise(Path("."), config_file)
    output_format = _choice_or_default(
        value=format, default=app_config.format, allowed=OUTPUT_FORMATS, field_name="--format"
    )
    resolved_language = _choice_or_default(
        value=language,
        default=app_config.language,
        allowed=LANGUAGE_CHOICES,
        field_name="--language",
    )
    resolved_jobs = jobs if jobs is not None else app_config.jobs
    if resolved_jobs < 1:
        raise typer.BadParameter("jobs must be >= 1", param_hint="--jobs")

    catalog = _build_catalog_or_raise(
        app_config,
        enable=enable,
        disable=disable,
    )
    with _cli_logging(verbose):
        result = lint_paths(
            paths,
            catalog=catalog,
            options=app_config.thresholds.to_options(),
            language=resolved_language,
            include=app_config.include,
            exclude=app_config.exclude,
            jobs=resolved_jobs,
        )

    report = result.report
    if output_format == "json":
        typer.echo(render_json(report, files_checked=result.files_checked))
    elif not report.is_empty():
        typer.echo(render_text(report))
    typer.echo(render_summary(report, files_checked=result.files_checked), err=True)

    if report.has_errors():
        raise typer.Exit(code=2)
    if not report.is_empty():
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    format: Annotated[str, typer.Option(help="Output format: text|json.")] = "text",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available guideline rules."""
    output_format = _choice_or_default(
        value=format, default="text", allowed=OUTPUT_FORMATS, field_name="--format"
    )
    app_config = _load_config_or_raise(Path("."), config_file)
    try:
        rule_info = list_rule_info(
            enabled=app_config.rule_enable, disabled=app_config.rule_disable
        )
    except CatalogError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc

    if output_format == "json":
        payload = {
            "rules": [item.to_dict() for item in rule_info],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.enabled else "disabled"
        lines.append(f"- {item.rule_id} ({item.severity}) [{status}] - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    format: Annotated[str, typer.Option(help="Output format: text|json.")] = "text",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = _choice_or_default(
        value=format, default="text", allowed=OUTPUT_FORMATS, field_name="--format"
    )
    app_config = _load_config_or_raise(Path("."), config_file)
    catalog = _build_catalog_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = list(catalog.rule_ids)

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- jobs: {payload['jobs']}",
        f"- language: {payload['language']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
    ]
    for key, value in payload["thresholds"].items():
        lines.append(f"- thresholds.{key}: {value}")
    lines.append(f"- active_rule_ids: {payload['active_rule_ids']}")
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".guideline-lint.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


@contextmanager
def _cli_logging(verbose: bool) -> Iterator[None]:
    package_logger = logging.getLogger("guideline_lint")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    previous_level = package_logger.level
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    try:
        yield
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)


def _load_config_or_raise(cwd: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(cwd, config_path=config_file)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_catalog_or_raise(
    app_config: AppConfig,
    *,
    enable: list[str] | None = None,
    disable: list[str] | None = None,
) -> RuleCatalog:
    # Command-line ids replace the configured whitelist and extend the disabled list.
    enabled = enable if enable else app_config.rule_enable
    disabled = [*app_config.rule_disable, *(disable or [])]
    try:
        return load_catalog(enabled=enabled, disabled=disabled)
    except CatalogError as exc:
        raise typer.BadParameter(str(exc), param_hint="rules") from exc


def _choice_or_default(
    *,
    value: str | None,
    default: str,
    allowed: set[str],
    field_name: str,
) -> str:
    resolved = (value or default).lower()
    if resolved not in allowed:
        choices = ", ".join(sorted(allowed))
        raise typer.BadParameter(f"{field_name} must be one of: {choices}", param_hint=field_name)
    return resolved
