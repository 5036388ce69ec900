"""CLI tests driven through Typer's runner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from guideline_lint import __version__
from guideline_lint.cli import app

runner = CliRunner()

SAVE_USER = "\n".join(
    [
        "function saveUser(name, email, age, city, isPremium) {",
        "  db.save(name, email, age, city, isPremium);",
        "}",
        "",
    ]
)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "src").mkdir()
    return tmp_path


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "check" in result.stdout
    assert "rules" in result.stdout
    assert "config-init" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_check_reports_findings_and_exits_one(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")

    result = runner.invoke(app, ["check", "src"])

    assert result.exit_code == 1
    lines = result.stdout.splitlines()
    assert any(
        line.startswith(
            "src/users.js:1: [Functions.ArgumentCount] Function 'saveUser' takes 5 parameters"
        )
        for line in lines
    )
    assert any(line.startswith("src/users.js:1: [Functions.BooleanFlag]") for line in lines)
    assert "finding(s) in 1 of 1 file(s)" in result.stderr


def test_check_clean_file_exits_zero(project: Path) -> None:
    (project / "src" / "files.py").write_text(
        "def file_exists(path):\n    return bool(path)\n", encoding="utf-8"
    )

    result = runner.invoke(app, ["check", "src/files.py"])

    assert result.exit_code == 0
    assert result.stdout == ""
    assert "No findings in 1 file(s)." in result.stderr


def test_check_parse_error_exits_two(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")
    (project / "src" / "broken.js").write_text("function broken() {\n", encoding="utf-8")

    result = runner.invoke(app, ["check", "src"])

    assert result.exit_code == 2
    assert "src/broken.js:1: [ParseError] Could not parse file:" in result.stdout


def test_check_json_output(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")

    result = runner.invoke(app, ["check", "src", "--format", "json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["summary"]["files_checked"] == 1
    assert payload["meta"]["version"] == __version__
    keys = [(item["file_path"], item["line"], item["rule_id"]) for item in payload["findings"]]
    assert ("src/users.js", 1, "Functions.ArgumentCount") in keys
    assert keys == sorted(keys)


def test_check_enable_limits_rules(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")

    result = runner.invoke(app, ["check", "src", "--enable", "Functions.BooleanFlag"])

    assert result.exit_code == 1
    assert [line.split(" ")[1] for line in result.stdout.splitlines()] == [
        "[Functions.BooleanFlag]"
    ]


def test_check_config_file_disables_rules(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")
    (project / ".guideline-lint.toml").write_text(
        "\n".join(
            [
                "[thresholds]",
                "max_params = 5",
                "",
                "[rules]",
                'disable = ["Functions.BooleanFlag"]',
            ]
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["check", "src"])

    assert "[Functions.ArgumentCount]" not in result.stdout
    assert "[Functions.BooleanFlag]" not in result.stdout


def test_check_unknown_rule_id_is_usage_error(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")

    result = runner.invoke(app, ["check", "src", "--disable", "Nope.Rule"])

    assert result.exit_code == 2
    assert "Unknown rule ids: Nope.Rule" in result.stderr


def test_check_invalid_config_is_usage_error(project: Path) -> None:
    (project / ".guideline-lint.toml").write_text("jobs = 0\n", encoding="utf-8")

    result = runner.invoke(app, ["check", "src"])

    assert result.exit_code == 2
    assert "jobs must be >= 1" in result.stderr


def test_check_verbose_logs_progress(project: Path) -> None:
    (project / "src" / "users.js").write_text(SAVE_USER, encoding="utf-8")

    result = runner.invoke(app, ["check", "src", "--verbose"])

    assert "DEBUG guideline_lint.pipeline: Checking src/users.js" in result.stderr


def test_rules_json_lists_catalog(project: Path) -> None:
    (project / ".guideline-lint.toml").write_text(
        '[rules]\ndisable = ["Functions.Size"]\n', encoding="utf-8"
    )

    result = runner.invoke(app, ["rules", "--format", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert len(payload["rules"]) == 12
    states = {item["rule_id"]: item["enabled"] for item in payload["rules"]}
    assert states["Functions.Size"] is False
    assert payload["meta"]["config_source"].endswith(".guideline-lint.toml")


def test_rules_text_output(project: Path) -> None:
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    assert result.stdout.splitlines()[0] == "Available rules:"
    assert "- Functions.ArgumentCount (warning) [enabled] - " in result.stdout


def test_config_json_shows_active_rules(project: Path) -> None:
    (project / ".guideline-lint.toml").write_text(
        '[rules]\nenable = ["Errors.EmptyCatch", "Errors.NullReturn"]\n', encoding="utf-8"
    )

    result = runner.invoke(app, ["config", "--format", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["active_rule_ids"] == ["Errors.EmptyCatch", "Errors.NullReturn"]
    assert payload["thresholds"]["max_params"] == 2


def test_config_init_writes_template_and_refuses_overwrite(project: Path) -> None:
    first = runner.invoke(app, ["config-init"])
    assert first.exit_code == 0
    assert (project / ".guideline-lint.toml").exists()

    second = runner.invoke(app, ["config-init"])
    assert second.exit_code == 2
    assert "Refusing to overwrite" in second.stderr

    forced = runner.invoke(app, ["config-init", "--force"])
    assert forced.exit_code == 0
