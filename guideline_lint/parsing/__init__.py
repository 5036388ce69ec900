"""Source model builders."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import PurePath

from guideline_lint.model import SourceModel
from guideline_lint.parsing import curly, python

LANGUAGE_SUFFIXES = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "javascript",
    ".tsx": "javascript",
}
DEFAULT_LANGUAGE = "javascript"

_BUILDERS: dict[str, Callable[..., SourceModel]] = {
    "python": python.build,
    "javascript": curly.build,
}
SUPPORTED_LANGUAGES = tuple(sorted(_BUILDERS))


def detect_language(path: str) -> str:
    """Infer the front end from a file suffix, falling back to javascript."""
    return LANGUAGE_SUFFIXES.get(PurePath(path).suffix.lower(), DEFAULT_LANGUAGE)


def is_supported_path(path: str) -> bool:
    return PurePath(path).suffix.lower() in LANGUAGE_SUFFIXES


def build_source_model(
    content: str, *, path: str = "<input>", language: str | None = None
) -> SourceModel:
    """Build a source model for ``content``.

    Raises ``ParseError`` when the front end cannot make sense of the text and
    ``ValueError`` for an unknown language name.
    """
    resolved = (language or detect_language(path)).lower()
    builder = _BUILDERS.get(resolved)
    if builder is None:
        choices = ", ".join(SUPPORTED_LANGUAGES)
        raise ValueError(f"Unknown language '{language}'. Expected one of: {choices}")
    return builder(content, path=path)
