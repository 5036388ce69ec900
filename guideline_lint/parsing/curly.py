"""Front end for brace-delimited sources (a JavaScript/TypeScript subset).

The grammar is deliberately shallow. Tokens are scanned once, brackets are
paired, and declarations are recognized from a handful of shapes:

* ``function name(...) {...}`` with optional ``async``/``export``/``default``
* ``class Name {...}`` including methods, accessors, and arrow-function fields
* ``const|let|var name = ...`` which becomes a function when initialised with
  a function expression or an arrow function

Everything else is treated as opaque statements. Unbalanced brackets and
unterminated strings, template literals, regular expressions, or block
comments raise :class:`~guideline_lint.errors.ParseError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from guideline_lint.errors import ParseError
from guideline_lint.model import (
    CommentDraft,
    DeclarationDraft,
    DeclarationKind,
    SourceModel,
    freeze_model,
)
from guideline_lint.parsing.heuristics import MUTATING_METHODS, is_flag_name, is_output_name

TokenKind = Literal["ident", "number", "string", "template", "regex", "punct"]

PUNCTUATORS = (
    ">>>=",
    "...",
    "??=",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
    ">>",
)
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}
ASSIGNMENT_OPERATORS = {"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**=", "??="}
CONTROL_KEYWORDS = {"if", "for", "while", "switch"}
REGEX_PRECEDING_KEYWORDS = {
    "return",
    "typeof",
    "case",
    "do",
    "else",
    "in",
    "of",
    "new",
    "delete",
    "void",
    "throw",
    "yield",
    "await",
}
BLOCK_PRECEDING_KEYWORDS = {"else", "try", "catch", "finally", "do"}
MEMBER_MODIFIERS = {
    "static",
    "async",
    "get",
    "set",
    "public",
    "private",
    "protected",
    "readonly",
    "abstract",
    "override",
    "declare",
}
PARAM_MODIFIERS = {"public", "private", "protected", "readonly", "override"}
RESERVED_NAMES = {"function", "class", "const", "let", "var", "return", "new", "this"}

_LINE_BREAK_RE = re.compile(r"\r\n?")
_IDENT_RE = re.compile(r"#?[A-Za-z_$][A-Za-z0-9_$]*")
_NUMBER_RE = re.compile(
    r"(?:0[xXoObB][0-9a-fA-F_]+|\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+)n?"
)


@dataclass(slots=True)
class Token:
    """A single lexical token."""

    kind: TokenKind
    value: str
    line: int
    newline_before: bool


@dataclass(slots=True)
class RawComment:
    """A comment found by the tokenizer."""

    text: str
    line: int
    end_line: int
    column: int
    trailing: bool


@dataclass(slots=True)
class _FunctionSite:
    draft: DeclarationDraft
    param_names: list[str]
    body_open: int | None
    body_end: int


def build(content: str, *, path: str = "<input>") -> SourceModel:
    """Build a source model from brace-language source text."""
    content = normalize_line_breaks(content)
    tokens, comments = tokenize(content)
    pairs = pair_brackets(tokens)
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    scanner = _Scanner(tokens, pairs)
    scanner.scan()
    scanner.measure()
    return freeze_model(
        path=path,
        language="javascript",
        drafts=scanner.drafts,
        comments=[_comment_draft(comment, lines) for comment in comments],
        line_count=len(lines),
    )


def normalize_line_breaks(content: str) -> str:
    """Turn ``\\r\\n`` and lone ``\\r`` line breaks into ``\\n``."""
    return _LINE_BREAK_RE.sub("\n", content)


def tokenize(content: str) -> tuple[list[Token], list[RawComment]]:
    """Split source text into tokens and comments."""
    content = normalize_line_breaks(content)
    tokens: list[Token] = []
    comments: list[RawComment] = []
    # One entry per open "(": whether it opens an if/for/while/switch header.
    paren_stack: list[bool] = []
    header_closers: set[int] = set()
    pos = 0
    line = 1
    line_start = 0
    newline_before = True
    last_token_line = 0
    length = len(content)

    while pos < length:
        char = content[pos]

        if char == "\n":
            line += 1
            pos += 1
            line_start = pos
            newline_before = True
            continue
        if char in " \t\f\v\ufeff":
            pos += 1
            continue

        if content.startswith("//", pos):
            end = content.find("\n", pos)
            end = length if end == -1 else end
            comments.append(
                RawComment(
                    text=content[pos + 2 : end].strip(),
                    line=line,
                    end_line=line,
                    column=pos - line_start,
                    trailing=last_token_line == line,
                )
            )
            pos = end
            continue

        if content.startswith("/*", pos):
            end = content.find("*/", pos + 2)
            if end == -1:
                raise ParseError("Unterminated block comment", line=line)
            body = content[pos + 2 : end]
            comments.append(
                RawComment(
                    text=_clean_block_comment(body),
                    line=line,
                    end_line=line + body.count("\n"),
                    column=pos - line_start,
                    trailing=last_token_line == line,
                )
            )
            newlines = body.count("\n")
            if newlines:
                line += newlines
                line_start = pos + 2 + body.rfind("\n") + 1
                newline_before = True
            pos = end + 2
            continue

        start_line = line
        if char in "'\"":
            end = _scan_string(content, pos, char, line)
            kind: TokenKind = "string"
        elif char == "`":
            end = _scan_template(content, pos, line)
            kind = "template"
        elif char == "/" and _regex_allowed(tokens, header_closers):
            end = _scan_regex(content, pos, line)
            kind = "regex"
        else:
            ident = _IDENT_RE.match(content, pos)
            number = _NUMBER_RE.match(content, pos) if ident is None else None
            if ident is not None:
                end = ident.end()
                kind = "ident"
            elif number is not None:
                end = number.end()
                kind = "number"
            else:
                end = pos + 1
                for punctuator in PUNCTUATORS:
                    if content.startswith(punctuator, pos):
                        end = pos + len(punctuator)
                        break
                kind = "punct"

        value = content[pos:end]
        if kind == "punct" and value == "(":
            paren_stack.append(_opens_control_header(tokens))
        elif kind == "punct" and value == ")" and paren_stack and paren_stack.pop():
            header_closers.add(len(tokens))
        tokens.append(Token(kind=kind, value=value, line=start_line, newline_before=newline_before))
        newline_before = False
        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = pos + value.rfind("\n") + 1
        last_token_line = line
        pos = end

    return tokens, comments


def pair_brackets(tokens: list[Token]) -> dict[int, int]:
    """Map each bracket token index to the index of its partner."""
    pairs: dict[int, int] = {}
    stack: list[int] = []
    for index, token in enumerate(tokens):
        if token.kind != "punct":
            continue
        if token.value in OPENERS:
            stack.append(index)
        elif token.value in CLOSERS:
            if not stack or tokens[stack[-1]].value != CLOSERS[token.value]:
                raise ParseError(f"Unexpected '{token.value}'", line=token.line)
            opener = stack.pop()
            pairs[opener] = index
            pairs[index] = opener
    if stack:
        opener_token = tokens[stack[-1]]
        raise ParseError(f"Unclosed '{opener_token.value}'", line=opener_token.line)
    return pairs


class _Scanner:
    """Recognize declarations and measure function bodies."""

    def __init__(self, tokens: list[Token], pairs: dict[int, int]) -> None:
        self.tokens = tokens
        self.pairs = pairs
        self.drafts: list[DeclarationDraft] = []
        self.sites: list[_FunctionSite] = []
        self.anonymous_bodies: set[int] = set()
        self.class_bodies: set[int] = set()
        self.variable_sites: list[tuple[DeclarationDraft, int]] = []
        self._claimed: set[int] = set()

    def scan(self) -> None:
        for index, token in enumerate(self.tokens):
            if token.kind != "ident" or self._is_member_access(index):
                continue
            if token.value == "function":
                self._function_keyword(index)
            elif token.value == "class":
                self._class(index)
            elif token.value in {"const", "let", "var"}:
                self._variable(index)
        for index, token in enumerate(self.tokens):
            if token.value == "=>" and index not in self._claimed:
                if self._value(index + 1) == "{":
                    self.anonymous_bodies.add(index + 1)

    def measure(self) -> None:
        annotations = _annotate(self.tokens, self.pairs, self)
        for site in self.sites:
            _measure_site(site, self.tokens, self.pairs, annotations)
        for draft, name_index in self.variable_sites:
            owner = annotations.owner_declared[name_index]
            base = annotations.depth[owner] if owner is not None else 0
            draft.nesting_depth = annotations.depth[name_index] - base

    def _function_keyword(self, index: int) -> None:
        if index in self._claimed:
            return
        cursor = index + 1
        if self._value(cursor) == "*":
            cursor += 1
        token = self._token(cursor)
        if token is not None and token.kind == "ident":
            params_open = self._skip_type_params(cursor + 1)
            if self._value(params_open) == "(":
                self._claimed.add(index)
                self._function_site(cursor, params_open=params_open)
            return
        cursor = self._skip_type_params(cursor)
        if self._value(cursor) == "(":
            body = self._find_body(self.pairs[cursor] + 1)
            if body is not None and self._value(body) == "{":
                self.anonymous_bodies.add(body)

    def _class(self, index: int) -> None:
        name = self._token(index + 1)
        if name is None or name.kind != "ident" or name.value == "extends":
            return
        cursor = index + 2
        while cursor < len(self.tokens) and self._value(cursor) != "{":
            if self._value(cursor) in {"(", "["}:
                cursor = self.pairs[cursor]
            elif self._value(cursor) in {";", ")", "]", "}"}:
                return
            cursor += 1
        if cursor >= len(self.tokens):
            return
        body_close = self.pairs[cursor]
        self.class_bodies.add(cursor)
        self.drafts.append(
            DeclarationDraft(
                kind=DeclarationKind.CLASS,
                name=name.value,
                line=name.line,
                end_line=self.tokens[body_close].line,
            )
        )
        self._class_members(cursor + 1, body_close)

    def _class_members(self, start: int, stop: int) -> None:
        cursor = start
        while cursor < stop:
            value = self._value(cursor)
            if value == ";":
                cursor += 1
                continue
            if value == "@":
                cursor += 2
                while self._value(cursor) in {".", "?."}:
                    cursor += 2
                if self._value(cursor) == "(":
                    cursor = self.pairs[cursor] + 1
                continue
            while (
                self._value(cursor) in MEMBER_MODIFIERS
                and self._value(cursor + 1) not in {"(", "=", ";", ":", "?", "!", "}"}
            ):
                cursor += 1
            if self._value(cursor) == "*":
                cursor += 1

            name_index = cursor
            token = self._token(cursor)
            if token is None or cursor >= stop:
                return
            if token.value == "[":
                cursor = self.pairs[cursor]
            elif token.kind not in {"ident", "string", "number"}:
                cursor += 1
                continue
            cursor += 1
            if self._value(cursor) in {"?", "!"}:
                cursor += 1

            params_open = self._skip_type_params(cursor)
            if self._value(params_open) == "(":
                site = self._function_site(name_index, params_open=params_open)
                cursor = site.body_end + 1
                continue

            if self._value(cursor) == ":":
                cursor = self._skip_annotation(cursor + 1, stop={"=", ";", "}"})
            if self._value(cursor) == "=":
                if not self._arrow_initializer(name_index, cursor + 1):
                    self._add_variable(name_index, cursor + 1)
                cursor = self._statement_end(cursor + 1) + 1
                continue
            self._add_variable(name_index, None)
            cursor = self._statement_end(cursor) + 1

    def _variable(self, index: int) -> None:
        name = self._token(index + 1)
        if name is None or name.kind != "ident" or name.value in RESERVED_NAMES:
            return
        cursor = index + 2
        if self._value(cursor) == ":":
            cursor = self._skip_annotation(cursor + 1, stop={"=", ";", ",", ")"})
        if self._value(cursor) != "=":
            self._add_variable(index + 1, None)
            return
        init = cursor + 1
        if self._function_initializer(index + 1, init) or self._arrow_initializer(index + 1, init):
            return
        self._add_variable(index + 1, init)

    def _function_initializer(self, name_index: int, init: int) -> bool:
        cursor = init + 1 if self._value(init) == "async" else init
        if self._value(cursor) != "function":
            return False
        keyword = cursor
        cursor += 1
        if self._value(cursor) == "*":
            cursor += 1
        if self._token(cursor) is not None and self._token(cursor).kind == "ident":
            cursor += 1
        cursor = self._skip_type_params(cursor)
        if self._value(cursor) != "(":
            return False
        self._claimed.add(keyword)
        self._function_site(name_index, params_open=cursor)
        return True

    def _arrow_initializer(self, name_index: int, init: int) -> bool:
        cursor = init + 1 if self._value(init) == "async" else init
        token = self._token(cursor)
        if token is None:
            return False
        if token.kind == "ident" and self._value(cursor + 1) == "=>":
            self._claimed.add(cursor + 1)
            self._function_site(name_index, single_param=cursor)
            return True
        cursor = self._skip_type_params(cursor)
        if self._value(cursor) != "(":
            return False
        arrow = self._find_arrow(self.pairs[cursor] + 1)
        if arrow is None:
            return False
        self._claimed.add(arrow)
        self._function_site(name_index, params_open=cursor)
        return True

    def _function_site(
        self,
        name_index: int,
        *,
        params_open: int | None = None,
        single_param: int | None = None,
    ) -> _FunctionSite:
        """Record a function whose parameters are a list at ``params_open``
        or the bare arrow parameter at ``single_param``."""
        name = self.tokens[name_index]
        draft = DeclarationDraft(
            kind=DeclarationKind.FUNCTION, name=self._display_name(name_index), line=name.line
        )
        param_names: list[str] = []
        if params_open is not None:
            params_close = self.pairs[params_open]
            param_names = _parse_params(self.tokens, self.pairs, params_open, params_close, draft)
            after_params = params_close + 1
        elif single_param is None:
            raise ValueError("Either params_open or single_param is required")
        else:
            param_name = self.tokens[single_param].value
            draft.param_names.append(param_name)
            param_names = [param_name]
            draft.uses_boolean_flag_param = is_flag_name(param_name)
            draft.has_output_param = is_output_name(param_name)
            after_params = single_param + 1

        body = self._find_body(after_params)
        if body is None:
            end = self._statement_end(after_params)
            site = _FunctionSite(draft=draft, param_names=param_names, body_open=None, body_end=end)
        elif self._value(body) == "{":
            end = self.pairs[body]
            site = _FunctionSite(draft=draft, param_names=param_names, body_open=body, body_end=end)
        else:
            end = self._statement_end(body)
            site = _FunctionSite(draft=draft, param_names=param_names, body_open=None, body_end=end)
            draft.body_statement_count = 1
            draft.returns_null = _is_null_expression(self.tokens, body, end)
            draft.returns_value = not draft.returns_null
        draft.end_line = self.tokens[min(end, len(self.tokens) - 1)].line
        self.drafts.append(draft)
        self.sites.append(site)
        return site

    def _find_body(self, cursor: int) -> int | None:
        """Return the index of the body start after a parameter list."""
        while cursor < len(self.tokens):
            value = self._value(cursor)
            if value == "{":
                return cursor
            if value == "=>":
                self._claimed.add(cursor)
                return cursor + 1 if cursor + 1 < len(self.tokens) else None
            if value in {";", ")", "]", "}", ","}:
                return None
            if value in {"(", "["}:
                cursor = self.pairs[cursor]
            cursor += 1
        return None

    def _find_arrow(self, cursor: int) -> int | None:
        if self._value(cursor) == "=>":
            return cursor
        if self._value(cursor) != ":":
            return None
        while cursor < len(self.tokens):
            value = self._value(cursor)
            if value == "=>":
                return cursor
            if value in {";", "{", "=", ",", ")", "]", "}"}:
                return None
            if value in {"(", "["}:
                cursor = self.pairs[cursor]
            cursor += 1
        return None

    def _skip_type_params(self, cursor: int) -> int:
        """Return the index after a balanced ``<...>`` run at ``cursor``.

        ``cursor`` is returned unchanged when no type parameter list starts
        there or the run is not balanced before the statement ends.
        """
        if self._value(cursor) != "<":
            return cursor
        depth = 0
        scan = cursor
        while scan < len(self.tokens):
            value = self._value(scan)
            if value == "<":
                depth += 1
            elif value in {">", ">>", ">>>"}:
                depth -= len(value)
                if depth <= 0:
                    return scan + 1 if depth == 0 else cursor
            elif value in OPENERS:
                scan = self.pairs[scan]
            elif value in CLOSERS or value == ";":
                return cursor
            scan += 1
        return cursor

    def _skip_annotation(self, cursor: int, *, stop: set[str]) -> int:
        while cursor < len(self.tokens):
            value = self._value(cursor)
            if value in stop:
                return cursor
            if value in OPENERS:
                cursor = self.pairs[cursor]
            cursor += 1
        return cursor

    def _statement_end(self, cursor: int) -> int:
        """Return the last token index of the expression starting at ``cursor``."""
        last = cursor
        while cursor < len(self.tokens):
            token = self.tokens[cursor]
            if cursor > last and token.newline_before and _can_end_statement(self.tokens[last]):
                if token.kind == "ident" or token.value in CLOSERS:
                    return last
            if token.value in {";", ","} or token.value in CLOSERS:
                return cursor if token.value == ";" else max(last, cursor - 1)
            if token.value in OPENERS:
                cursor = self.pairs[cursor]
            last = cursor
            cursor += 1
        return min(last, len(self.tokens) - 1)

    def _add_variable(self, name_index: int, init: int | None) -> None:
        name = self.tokens[name_index]
        end_line = name.line
        if init is not None and init < len(self.tokens):
            end_line = self.tokens[self._statement_end(init)].line
        draft = DeclarationDraft(
            kind=DeclarationKind.VARIABLE,
            name=self._display_name(name_index),
            line=name.line,
            end_line=end_line,
        )
        self.drafts.append(draft)
        self.variable_sites.append((draft, name_index))

    def _display_name(self, index: int) -> str:
        token = self.tokens[index]
        if token.value == "[":
            inner = self.tokens[index + 1 : self.pairs[index]]
            return "[" + "".join(item.value for item in inner) + "]"
        return token.value.strip("'\"")

    def _is_member_access(self, index: int) -> bool:
        return index > 0 and self.tokens[index - 1].value in {".", "?."}

    def _token(self, index: int) -> Token | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def _value(self, index: int) -> str:
        token = self._token(index)
        return token.value if token is not None else ""


FrameKind = Literal["braceless", "control", "function", "class", "block", "object", "paren"]


@dataclass(slots=True)
class _Frame:
    """An open bracket, or a braceless control body, seen by ``_annotate``."""

    kind: FrameKind
    opener: int
    started: bool = False


@dataclass(slots=True)
class _Annotations:
    statement_start: list[bool]
    depth: list[int]
    owner_declared: list[int | None]
    owner_function: list[int | None]


def _annotate(tokens: list[Token], pairs: dict[int, int], scanner: _Scanner) -> _Annotations:
    """Compute per-token statement starts, control depth, and owning function bodies."""
    count = len(tokens)
    statement_start = [False] * count
    depth = [0] * count
    owner_declared: list[int | None] = [None] * count
    owner_function: list[int | None] = [None] * count

    declared_bodies = {site.body_open for site in scanner.sites if site.body_open is not None}
    header_closers: set[int] = set()
    control_braces: set[int] = set()
    for index, token in enumerate(tokens):
        if token.kind != "ident" or scanner._is_member_access(index):
            continue
        if token.value in CONTROL_KEYWORDS:
            opener = index + 1
            if opener < count and tokens[opener].value == "await":
                opener += 1
            if opener < count and tokens[opener].value == "(":
                closer = pairs[opener]
                header_closers.add(closer)
                if closer + 1 < count and tokens[closer + 1].value == "{":
                    control_braces.add(closer + 1)
        elif token.value in {"else", "do"} and index + 1 < count and tokens[index + 1].value == "{":
            control_braces.add(index + 1)

    frames: list[_Frame] = []
    control_depth = 0
    declared_stack: list[int] = []
    function_stack: list[int] = []

    def pop_braceless() -> None:
        nonlocal control_depth
        while frames and frames[-1].kind == "braceless":
            frames.pop()
            control_depth -= 1

    for index, token in enumerate(tokens):
        previous = tokens[index - 1] if index > 0 else None
        value = token.value

        open_braceless = bool(frames) and frames[-1].kind == "braceless"
        if open_braceless and frames[-1].started and token.newline_before:
            if previous is not None and _can_end_statement(previous):
                pop_braceless()
        if token.kind == "punct" and value in {";", "}"}:
            pop_braceless()

        depth[index] = control_depth
        owner_declared[index] = declared_stack[-1] if declared_stack else None
        owner_function[index] = function_stack[-1] if function_stack else None

        context = "top"
        for frame in reversed(frames):
            if frame.kind != "braceless":
                context = frame.kind
                break
        if frames and frames[-1].kind == "braceless":
            frames[-1].started = True
        if context in {"top", "block", "control", "function"} and _can_start_statement(token):
            statement_start[index] = (
                previous is None
                or previous.value in {";", "{", "}", "else", "do"}
                or (index - 1) in header_closers
                or (token.newline_before and _can_end_statement(previous))
            )

        if token.kind != "punct":
            if value in {"else", "do"} and index + 1 < count:
                following = tokens[index + 1].value
                if following not in {"{", "if"}:
                    frames.append(_Frame("braceless", index))
                    control_depth += 1
            continue

        if value == "{":
            if index in control_braces:
                frames.append(_Frame("control", index))
                control_depth += 1
            elif index in declared_bodies:
                frames.append(_Frame("function", index))
                declared_stack.append(index)
                function_stack.append(index)
            elif index in scanner.anonymous_bodies:
                frames.append(_Frame("function", index))
                function_stack.append(index)
            elif index in scanner.class_bodies:
                frames.append(_Frame("class", index))
            elif previous is None or previous.value in {")", "=>", ";", "{", "}"} or (
                previous.value in BLOCK_PRECEDING_KEYWORDS
            ):
                frames.append(_Frame("block", index))
            else:
                frames.append(_Frame("object", index))
        elif value in {"(", "["}:
            frames.append(_Frame("paren", index))
        elif value in CLOSERS:
            frame = frames.pop() if frames else None
            if frame is not None and frame.kind == "control":
                control_depth -= 1
            if frame is not None and frame.kind == "function":
                if declared_stack and declared_stack[-1] == frame.opener:
                    declared_stack.pop()
                function_stack.pop()
            if index in header_closers and index + 1 < count:
                if tokens[index + 1].value not in {"{", ";"}:
                    frames.append(_Frame("braceless", index))
                    control_depth += 1

    return _Annotations(
        statement_start=statement_start,
        depth=depth,
        owner_declared=owner_declared,
        owner_function=owner_function,
    )


def _measure_site(
    site: _FunctionSite,
    tokens: list[Token],
    pairs: dict[int, int],
    annotations: _Annotations,
) -> None:
    body = site.body_open
    if body is None:
        return
    draft = site.draft
    close = pairs[body]
    own = [index for index in range(body + 1, close) if annotations.owner_declared[index] == body]
    base = annotations.depth[body]
    draft.body_statement_count = sum(1 for index in own if annotations.statement_start[index])
    draft.nesting_depth = max((annotations.depth[index] - base for index in own), default=0)

    plain_params = {name for name in site.param_names if not name.startswith(("{", "["))}
    mutated = False
    for index in range(body + 1, close):
        token = tokens[index]
        if token.kind != "ident" or tokens[index - 1].value in {".", "?."}:
            continue
        if token.value == "return" and annotations.owner_function[index] == body:
            _record_return(draft, tokens, index)
        if annotations.owner_declared[index] != body:
            continue
        if token.value == "catch" and tokens[index - 1].value == "}":
            if _is_empty_catch(tokens, pairs, index):
                draft.empty_catch_count += 1
        if token.value in plain_params and _mutates(tokens, pairs, index):
            mutated = True

    if mutated and not draft.returns_value:
        draft.has_output_param = True


def _record_return(draft: DeclarationDraft, tokens: list[Token], index: int) -> None:
    if index + 1 >= len(tokens):
        return
    following = tokens[index + 1]
    if following.value in {";", "}"} or following.newline_before:
        return
    end = index + 1
    while end + 1 < len(tokens):
        candidate = tokens[end + 1]
        if candidate.value in {";", "}"} or candidate.newline_before:
            break
        end += 1
    if _is_null_expression(tokens, index + 1, end):
        draft.returns_null = True
    else:
        draft.returns_value = True


def _is_null_expression(tokens: list[Token], start: int, end: int) -> bool:
    values = [token.value for token in tokens[start : end + 1] if token.value != ";"]
    return values in (["null"], ["undefined"])


def _is_empty_catch(tokens: list[Token], pairs: dict[int, int], index: int) -> bool:
    cursor = index + 1
    if cursor < len(tokens) and tokens[cursor].value == "(":
        cursor = pairs[cursor] + 1
    if cursor >= len(tokens) or tokens[cursor].value != "{":
        return False
    return pairs[cursor] == cursor + 1


def _mutates(tokens: list[Token], pairs: dict[int, int], index: int) -> bool:
    cursor = index + 1
    if cursor >= len(tokens):
        return False
    if tokens[cursor].value == "." and cursor + 2 < len(tokens):
        member = tokens[cursor + 1].value
        after = tokens[cursor + 2].value
        if after in ASSIGNMENT_OPERATORS:
            return True
        return member in MUTATING_METHODS and after == "("
    if tokens[cursor].value == "[":
        after = pairs[cursor] + 1
        return after < len(tokens) and tokens[after].value in ASSIGNMENT_OPERATORS
    return False


def _parse_params(
    tokens: list[Token],
    pairs: dict[int, int],
    params_open: int,
    params_close: int,
    draft: DeclarationDraft,
) -> list[str]:
    groups: list[list[int]] = [[]]
    cursor = params_open + 1
    in_annotation = False
    angle = 0
    while cursor < params_close:
        value = tokens[cursor].value
        if value == "," and angle <= 0:
            groups.append([])
            in_annotation = False
            angle = 0
            cursor += 1
            continue
        if value == ":" and len(groups[-1]) > 0:
            in_annotation = True
        elif value == "=":
            in_annotation = False
        elif in_annotation and value in {"<", ">", ">>"}:
            angle += 1 if value == "<" else -len(value)
        groups[-1].append(cursor)
        if value in OPENERS:
            closing = pairs[cursor]
            groups[-1].extend(range(cursor + 1, closing + 1))
            cursor = closing
        cursor += 1

    names: list[str] = []
    for group in groups:
        indices = [index for index in group if tokens[index].value not in PARAM_MODIFIERS]
        if not indices:
            continue
        first = tokens[indices[0]]
        if first.value in {"{", "["}:
            inner = [
                tokens[index].value
                for index in indices[1:]
                if tokens[index].kind == "ident" and tokens[index - 1].value != ":"
            ]
            name = first.value + ", ".join(inner) + OPENERS[first.value]
            draft.has_grouped_param = True
            names.append(name)
            continue
        if first.value == "...":
            indices = indices[1:]
            if not indices:
                continue
            first = tokens[indices[0]]
        if first.value == "this":
            continue
        names.append(first.value)
        annotation, default = _split_param(tokens, indices[1:])
        if (
            annotation == ["boolean"]
            or (default and default[0] in {"true", "false"} and len(default) == 1)
            or is_flag_name(first.value)
        ):
            draft.uses_boolean_flag_param = True
        if is_output_name(first.value):
            draft.has_output_param = True

    draft.param_names.extend(names)
    return names


def _split_param(tokens: list[Token], indices: list[int]) -> tuple[list[str], list[str]]:
    annotation: list[str] = []
    default: list[str] = []
    target: list[str] | None = None
    for index in indices:
        value = tokens[index].value
        if value == "?" and target is None:
            continue
        if value == ":" and target is None:
            target = annotation
            continue
        if value == "=" and target is not default:
            target = default
            continue
        if target is not None:
            target.append(value)
    return annotation, default


def _can_start_statement(token: Token) -> bool:
    if token.kind == "punct":
        return False
    return token.value not in {"else", "catch", "finally"}


def _can_end_statement(token: Token) -> bool:
    if token.kind != "punct":
        return token.value not in REGEX_PRECEDING_KEYWORDS - {"return"}
    return token.value in {")", "]", "}", "++", "--"}


def _opens_control_header(tokens: list[Token]) -> bool:
    if not tokens or tokens[-1].kind != "ident":
        return False
    keyword = len(tokens) - 1
    if tokens[keyword].value == "await" and keyword > 0 and tokens[keyword - 1].value == "for":
        keyword -= 1
    if tokens[keyword].value not in CONTROL_KEYWORDS:
        return False
    return keyword == 0 or tokens[keyword - 1].value not in {".", "?."}


def _regex_allowed(tokens: list[Token], header_closers: set[int]) -> bool:
    if not tokens:
        return True
    previous = tokens[-1]
    if previous.kind == "punct":
        if previous.value == ")":
            return len(tokens) - 1 in header_closers
        return previous.value not in {")", "]", "}", "++", "--"}
    if previous.kind == "ident":
        return previous.value in REGEX_PRECEDING_KEYWORDS
    return False


def _scan_string(content: str, pos: int, quote: str, line: int) -> int:
    cursor = pos + 1
    while cursor < len(content):
        char = content[cursor]
        if char == "\\":
            cursor += 2
            continue
        if char == quote:
            return cursor + 1
        if char == "\n":
            break
        cursor += 1
    raise ParseError("Unterminated string literal", line=line)


def _scan_template(content: str, pos: int, line: int) -> int:
    cursor = pos + 1
    interpolation = 0
    while cursor < len(content):
        char = content[cursor]
        if char == "\\":
            cursor += 2
            continue
        if interpolation == 0 and char == "`":
            return cursor + 1
        if content.startswith("${", cursor):
            interpolation += 1
            cursor += 2
            continue
        if interpolation and char == "{":
            interpolation += 1
        elif interpolation and char == "}":
            interpolation -= 1
        cursor += 1
    raise ParseError("Unterminated template literal", line=line)


def _scan_regex(content: str, pos: int, line: int) -> int:
    cursor = pos + 1
    in_class = False
    while cursor < len(content):
        char = content[cursor]
        if char == "\\":
            cursor += 2
            continue
        if char == "\n":
            break
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            cursor += 1
            while cursor < len(content) and content[cursor].isalpha():
                cursor += 1
            return cursor
        cursor += 1
    raise ParseError("Unterminated regular expression literal", line=line)


def _clean_block_comment(body: str) -> str:
    parts: list[str] = []
    for raw in body.splitlines():
        stripped = raw.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:].strip()
        if stripped:
            parts.append(stripped)
    return " ".join(parts)


def _comment_draft(comment: RawComment, lines: list[str]) -> CommentDraft:
    if comment.trailing:
        code = lines[comment.line - 1][: comment.column].strip()
        return CommentDraft(text=comment.text, line=comment.line, following_code=code)

    for number in range(comment.end_line + 1, len(lines) + 1):
        candidate = lines[number - 1].strip()
        if not candidate or candidate.startswith(("//", "/*", "*")):
            continue
        return CommentDraft(
            text=comment.text,
            line=comment.line,
            following_code=candidate,
            next_code_line=number,
        )
    return CommentDraft(text=comment.text, line=comment.line)
