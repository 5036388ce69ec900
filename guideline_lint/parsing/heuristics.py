"""Name-based heuristics shared by the language front ends."""

from __future__ import annotations

import re

FLAG_PREFIXES = (
    "is",
    "has",
    "should",
    "can",
    "enable",
    "disable",
    "use",
    "allow",
    "force",
    "skip",
    "include",
    "show",
    "hide",
)
FLAG_NAMES = {"flag", "force", "verbose", "debug", "recursive", "silent", "quiet", "dry_run"}

OUTPUT_NAMES = {"out", "output", "result", "results", "dest", "sink"}

MUTATING_METHODS = {
    "append",
    "extend",
    "insert",
    "update",
    "add",
    "push",
    "unshift",
    "splice",
    "set",
    "setdefault",
}

_FLAG_RE = re.compile(
    r"^(?:" + "|".join(FLAG_PREFIXES) + r")(?:[A-Z0-9]|_[a-z0-9])"
)
_OUTPUT_RE = re.compile(r"^out(?:[A-Z]|_[a-z])")


def is_flag_name(name: str) -> bool:
    """Return whether a parameter name reads like a boolean switch."""
    bare = name.lstrip("_")
    return bare in FLAG_NAMES or bare == "dryRun" or bool(_FLAG_RE.match(bare))


def is_output_name(name: str) -> bool:
    """Return whether a parameter name reads like an output slot."""
    bare = name.lstrip("_")
    return bare.lower() in OUTPUT_NAMES or bool(_OUTPUT_RE.match(bare))
