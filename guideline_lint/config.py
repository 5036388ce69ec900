"""Configuration loading for guideline-lint."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from guideline_lint.errors import ConfigError
from guideline_lint.rules import RuleOptions

CONFIG_FILENAMES = (".guideline-lint.toml", "guideline-lint.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("guideline_lint", "guideline-lint")
OUTPUT_FORMATS = {"text", "json"}
LANGUAGE_CHOICES = {"auto", "python", "javascript"}


@dataclass(slots=True)
class ThresholdsConfig:
    """Rule thresholds, mirrored into ``RuleOptions`` at run time."""

    max_params: int = 2
    boolean_flag_detection: bool = True
    comment_overlap_threshold: float = 0.8
    max_statements: int = 20
    max_nesting: int = 3
    min_name_length: int = 2
    mutator_prefixes: list[str] = field(default_factory=lambda: ["set", "create", "update"])
    pronounceable_allowlist: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "max_params": self.max_params,
            "boolean_flag_detection": self.boolean_flag_detection,
            "comment_overlap_threshold": self.comment_overlap_threshold,
            "max_statements": self.max_statements,
            "max_nesting": self.max_nesting,
            "min_name_length": self.min_name_length,
            "mutator_prefixes": list(self.mutator_prefixes),
        }
        if self.pronounceable_allowlist is not None:
            data["pronounceable_allowlist"] = list(self.pronounceable_allowlist)
        return data

    def to_options(self) -> RuleOptions:
        options = RuleOptions(
            max_params=self.max_params,
            boolean_flag_detection=self.boolean_flag_detection,
            comment_overlap_threshold=self.comment_overlap_threshold,
            max_statements=self.max_statements,
            max_nesting=self.max_nesting,
            min_name_length=self.min_name_length,
            mutator_prefixes=tuple(self.mutator_prefixes),
        )
        if self.pronounceable_allowlist is None:
            return options
        return replace(options, pronounceable_allowlist=tuple(self.pronounceable_allowlist))


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "text"
    jobs: int = 1
    language: str = "auto"
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "jobs": self.jobs,
            "language": self.language,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "thresholds": self.thresholds.to_dict(),
            "source": self.source,
        }


def load_app_config(cwd: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from an explicit path or project-local files with precedence."""
    cwd = cwd.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (cwd / config_path)
        if not resolved.exists():
            raise ConfigError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = cwd / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = cwd / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def parse_config_text(text: str, *, source: str | None = None) -> AppConfig:
    """Parse a standalone config document."""
    try:
        loaded = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {source or 'config'}: {exc}") from exc
    tool_section = _find_pyproject_tool_section(loaded)
    return _from_mapping(tool_section if tool_section is not None else loaded, source=source)


def render_config_toml(config: AppConfig) -> str:
    """Serialize ``config`` so that parsing the result yields the same values."""
    thresholds = config.thresholds
    lines = [
        f"format = {_toml_value(config.format)}",
        f"jobs = {_toml_value(config.jobs)}",
        f"language = {_toml_value(config.language)}",
        f"include = {_toml_value(config.include)}",
        f"exclude = {_toml_value(config.exclude)}",
        "",
        "[thresholds]",
    ]
    for key, value in thresholds.to_dict().items():
        lines.append(f"{key} = {_toml_value(value)}")
    lines.extend(["", "[rules]"])
    if config.rule_enable is not None:
        lines.append(f"enable = {_toml_value(config.rule_enable)}")
    lines.append(f"disable = {_toml_value(config.rule_disable)}")
    lines.append("")
    return "\n".join(lines)


def default_config_template() -> str:
    """Return a starter config template to customize."""
    return "\n".join(
        [
            'format = "text"',
            "jobs = 1",
            'language = "auto"',
            'include = ["src/**"]',
            'exclude = ["**/node_modules/**", "**/vendor/**"]',
            "",
            "[thresholds]",
            "max_params = 2",
            "boolean_flag_detection = true",
            "comment_overlap_threshold = 0.8",
            "max_statements = 20",
            "max_nesting = 3",
            "min_name_length = 2",
            'mutator_prefixes = ["set", "create", "update"]',
            '# pronounceable_allowlist = ["ctx", "cfg", "db"]',
            "",
            "[rules]",
            '# enable = ["Functions.ArgumentCount", "Functions.BooleanFlag"]',
            'disable = ["Comments.CommentedOutCode"]',
            "",
        ]
    )


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        # TOML rejects surrogate escapes and a raw DEL; json already escapes C0 controls.
        return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    raise TypeError(f"Cannot render {type(value).__name__} as TOML")


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str | None) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    thresholds_mapping = _as_table(mapping.get("thresholds"), "thresholds")

    jobs = _as_int(mapping.get("jobs", 1), "jobs")
    if jobs < 1:
        raise ConfigError("jobs must be >= 1")

    return AppConfig(
        format=_as_choice(mapping.get("format", "text"), OUTPUT_FORMATS, "format"),
        jobs=jobs,
        language=_as_choice(mapping.get("language", "auto"), LANGUAGE_CHOICES, "language"),
        include=_as_str_list(mapping.get("include"), "include"),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable"), "rules.enable"),
        rule_disable=_as_str_list(rules_mapping.get("disable"), "rules.disable"),
        thresholds=_parse_thresholds(thresholds_mapping),
        source=source,
    )


def _parse_thresholds(value: dict[str, Any]) -> ThresholdsConfig:
    defaults = ThresholdsConfig()
    overlap = _as_float(
        value.get("comment_overlap_threshold", defaults.comment_overlap_threshold),
        "thresholds.comment_overlap_threshold",
    )
    if not 0.0 <= overlap <= 1.0:
        raise ConfigError("thresholds.comment_overlap_threshold must be between 0 and 1")

    allowlist = value.get("pronounceable_allowlist")
    return ThresholdsConfig(
        max_params=_as_non_negative_int(
            value.get("max_params", defaults.max_params), "thresholds.max_params"
        ),
        boolean_flag_detection=_as_bool(
            value.get("boolean_flag_detection", defaults.boolean_flag_detection),
            "thresholds.boolean_flag_detection",
        ),
        comment_overlap_threshold=overlap,
        max_statements=_as_non_negative_int(
            value.get("max_statements", defaults.max_statements), "thresholds.max_statements"
        ),
        max_nesting=_as_non_negative_int(
            value.get("max_nesting", defaults.max_nesting), "thresholds.max_nesting"
        ),
        min_name_length=_as_non_negative_int(
            value.get("min_name_length", defaults.min_name_length), "thresholds.min_name_length"
        ),
        mutator_prefixes=_as_str_list(
            value.get("mutator_prefixes", defaults.mutator_prefixes),
            "thresholds.mutator_prefixes",
        ),
        pronounceable_allowlist=_as_str_list_or_none(
            allowlist, "thresholds.pronounceable_allowlist"
        ),
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ConfigError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{field_name} must be an integer")
    return raw


def _as_non_negative_int(raw: Any, field_name: str) -> int:
    value = _as_int(raw, field_name)
    if value < 0:
        raise ConfigError(f"{field_name} must be >= 0")
    return value


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigError(f"{field_name} must be a boolean")
    return raw


def _as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{field_name} must be a number")
    return float(raw)
