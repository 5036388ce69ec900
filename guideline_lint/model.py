"""Language-agnostic source model primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DeclarationKind(str, Enum):
    """Kinds of declarations a front end can report."""

    FUNCTION = "function"
    VARIABLE = "variable"
    CLASS = "class"


@dataclass(frozen=True, slots=True)
class CommentSpan:
    """A source comment and the declaration it is loosely associated with."""

    text: str
    line: int
    following_code: str = ""
    declaration_index: int | None = None
    line_offset: int = 0


@dataclass(frozen=True, slots=True)
class Declaration:
    """A function, variable, or class found in one source file."""

    kind: DeclarationKind
    name: str
    line: int
    end_line: int
    param_count: int = 0
    param_names: tuple[str, ...] = ()
    body_statement_count: int = 0
    nesting_depth: int = 0
    uses_boolean_flag_param: bool = False
    has_output_param: bool = False
    has_grouped_param: bool = False
    returns_value: bool = False
    returns_null: bool = False
    empty_catch_count: int = 0
    comments: tuple[CommentSpan, ...] = ()

    @property
    def is_function(self) -> bool:
        return self.kind is DeclarationKind.FUNCTION

    def contains_line(self, line: int) -> bool:
        return self.line <= line <= self.end_line


@dataclass(frozen=True, slots=True)
class SourceModel:
    """Normalized declarations and comments of a single source file."""

    path: str
    language: str
    declarations: tuple[Declaration, ...] = ()
    comments: tuple[CommentSpan, ...] = ()
    line_count: int = 0

    def declaration_for(self, comment: CommentSpan) -> Declaration | None:
        """Look up the declaration a comment is attached to, if any."""
        index = comment.declaration_index
        if index is None or not 0 <= index < len(self.declarations):
            return None
        return self.declarations[index]

    def functions(self) -> list[Declaration]:
        return [item for item in self.declarations if item.is_function]


@dataclass(slots=True)
class DeclarationDraft:
    """Mutable declaration used by front ends while scanning a file."""

    kind: DeclarationKind
    name: str
    line: int
    end_line: int = 0
    param_names: list[str] = field(default_factory=list)
    body_statement_count: int = 0
    nesting_depth: int = 0
    uses_boolean_flag_param: bool = False
    has_output_param: bool = False
    has_grouped_param: bool = False
    returns_value: bool = False
    returns_null: bool = False
    empty_catch_count: int = 0


@dataclass(slots=True)
class CommentDraft:
    """Raw comment collected by a front end before attachment."""

    text: str
    line: int
    following_code: str = ""
    next_code_line: int | None = None


def freeze_model(
    *,
    path: str,
    language: str,
    drafts: list[DeclarationDraft],
    comments: list[CommentDraft],
    line_count: int,
) -> SourceModel:
    """Attach comments to declarations and freeze everything into a model."""
    ordered = sorted(
        enumerate(drafts), key=lambda item: (item[1].line, item[1].end_line, item[0])
    )
    drafts = [draft for _, draft in ordered]

    attached: list[list[CommentSpan]] = [[] for _ in drafts]
    spans: list[CommentSpan] = []
    for comment in sorted(comments, key=lambda item: item.line):
        index = _attachment_index(drafts, comment)
        offset = comment.line - drafts[index].line if index is not None else 0
        span = CommentSpan(
            text=comment.text,
            line=comment.line,
            following_code=comment.following_code,
            declaration_index=index,
            line_offset=offset,
        )
        spans.append(span)
        if index is not None:
            attached[index].append(span)

    declarations = tuple(
        Declaration(
            kind=draft.kind,
            name=draft.name,
            line=draft.line,
            end_line=max(draft.end_line, draft.line),
            param_count=len(draft.param_names),
            param_names=tuple(draft.param_names),
            body_statement_count=draft.body_statement_count,
            nesting_depth=draft.nesting_depth,
            uses_boolean_flag_param=draft.uses_boolean_flag_param,
            has_output_param=draft.has_output_param,
            has_grouped_param=draft.has_grouped_param,
            returns_value=draft.returns_value,
            returns_null=draft.returns_null,
            empty_catch_count=draft.empty_catch_count,
            comments=tuple(attached[index]),
        )
        for index, draft in enumerate(drafts)
    )
    return SourceModel(
        path=path,
        language=language,
        declarations=declarations,
        comments=tuple(spans),
        line_count=line_count,
    )


def _attachment_index(drafts: list[DeclarationDraft], comment: CommentDraft) -> int | None:
    line = comment.line
    # Variables never enclose comments; the innermost function or class does.
    enclosing: int | None = None
    for index, draft in enumerate(drafts):
        if draft.kind is DeclarationKind.VARIABLE:
            continue
        if draft.line <= line <= max(draft.end_line, draft.line):
            if enclosing is None or draft.line >= drafts[enclosing].line:
                enclosing = index

    # Trailing comments have no next code line and describe their own line.
    target = comment.next_code_line if comment.next_code_line is not None else line
    for index, draft in enumerate(drafts):
        if draft.line != target:
            continue
        if enclosing is None or draft.end_line <= drafts[enclosing].end_line:
            return index
    return enclosing
