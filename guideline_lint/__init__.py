"""Clean-code guideline checks over a language-agnostic source model."""

__version__ = "0.1.0"
