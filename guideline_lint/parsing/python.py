"""Front end for Python sources built on the standard ``ast`` module."""

from __future__ import annotations

import ast
import io
import tokenize
from dataclasses import dataclass, field

from guideline_lint.errors import ParseError
from guideline_lint.model import (
    CommentDraft,
    DeclarationDraft,
    DeclarationKind,
    SourceModel,
    freeze_model,
)
from guideline_lint.parsing.heuristics import MUTATING_METHODS, is_flag_name, is_output_name

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef
SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)


def build(content: str, *, path: str = "<input>") -> SourceModel:
    """Build a source model from Python source text."""
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    try:
        tree = ast.parse(content, filename=path)
    except SyntaxError as exc:
        raise ParseError(exc.msg or "invalid syntax", line=exc.lineno or 1) from exc

    scanner = _ModuleScanner()
    scanner.scan_block(tree.body, seen=set(), depth=0, in_class=False)
    # Only "\n" ends a line for ast and tokenize; str.splitlines also splits on "\f".
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return freeze_model(
        path=path,
        language="python",
        drafts=scanner.drafts,
        comments=_collect_comments(content, lines),
        line_count=len(lines),
    )


class _ModuleScanner:
    """Collect declarations from nested statement blocks."""

    def __init__(self) -> None:
        self.drafts: list[DeclarationDraft] = []

    def scan_block(
        self, body: list[ast.stmt], *, seen: set[str], depth: int, in_class: bool
    ) -> None:
        for node in body:
            self._scan_statement(node, seen=seen, depth=depth, in_class=in_class)

    def _scan_statement(
        self, node: ast.stmt, *, seen: set[str], depth: int, in_class: bool
    ) -> None:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            draft = _function_draft(node, is_method=in_class)
            self.drafts.append(draft)
            self.scan_block(node.body, seen=set(draft.param_names), depth=0, in_class=False)
            return
        if isinstance(node, ast.ClassDef):
            self.drafts.append(
                DeclarationDraft(
                    kind=DeclarationKind.CLASS,
                    name=node.name,
                    line=node.lineno,
                    end_line=node.end_lineno or node.lineno,
                )
            )
            self.scan_block(node.body, seen=set(), depth=0, in_class=True)
            return

        for name in _bound_names(node):
            if name in seen:
                continue
            seen.add(name)
            self.drafts.append(
                DeclarationDraft(
                    kind=DeclarationKind.VARIABLE,
                    name=name,
                    line=node.lineno,
                    end_line=node.end_lineno or node.lineno,
                    nesting_depth=depth,
                )
            )
        for block, block_depth in _child_blocks(node, depth):
            self.scan_block(block, seen=seen, depth=block_depth, in_class=in_class)


@dataclass(slots=True)
class _BodyStats:
    statements: int = 0
    max_depth: int = 0
    returns_value: bool = False
    returns_null: bool = False
    empty_catches: int = 0
    mutated: set[str] = field(default_factory=set)


def _function_draft(node: FunctionNode, *, is_method: bool) -> DeclarationDraft:
    draft = DeclarationDraft(
        kind=DeclarationKind.FUNCTION,
        name=node.name,
        line=node.lineno,
        end_line=node.end_lineno or node.lineno,
    )
    params = _parameters(node.args, is_method=is_method)
    for arg, default in params:
        draft.param_names.append(arg.arg)
        if _is_bool_annotation(arg.annotation) or _is_bool_constant(default):
            draft.uses_boolean_flag_param = True
        elif is_flag_name(arg.arg):
            draft.uses_boolean_flag_param = True
        if is_output_name(arg.arg):
            draft.has_output_param = True
    if node.args.kwarg is not None:
        draft.has_grouped_param = True

    stats = _BodyStats()
    _measure_block(node.body, 0, stats, set(draft.param_names))
    draft.body_statement_count = stats.statements
    draft.nesting_depth = stats.max_depth
    draft.returns_value = stats.returns_value
    draft.returns_null = stats.returns_null
    draft.empty_catch_count = stats.empty_catches
    if stats.mutated and not stats.returns_value:
        draft.has_output_param = True
    return draft


def _parameters(args: ast.arguments, *, is_method: bool) -> list[tuple[ast.arg, ast.expr | None]]:
    positional = [*args.posonlyargs, *args.args]
    defaults: list[ast.expr | None] = [None] * (len(positional) - len(args.defaults))
    defaults.extend(args.defaults)
    params: list[tuple[ast.arg, ast.expr | None]] = list(zip(positional, defaults))
    if is_method and params and params[0][0].arg in {"self", "cls"}:
        params = params[1:]
    if args.vararg is not None:
        params.append((args.vararg, None))
    params.extend(zip(args.kwonlyargs, args.kw_defaults))
    if args.kwarg is not None:
        params.append((args.kwarg, None))
    return params


def _measure_block(body: list[ast.stmt], depth: int, stats: _BodyStats, params: set[str]) -> None:
    for node in body:
        stats.statements += 1
        stats.max_depth = max(stats.max_depth, depth)
        if isinstance(node, SCOPE_NODES):
            continue
        if isinstance(node, ast.Return) and node.value is not None:
            if isinstance(node.value, ast.Constant) and node.value.value is None:
                stats.returns_null = True
            else:
                stats.returns_value = True
        if isinstance(node, (ast.Try, ast.TryStar)):
            stats.empty_catches += sum(
                1 for handler in node.handlers if _is_empty_body(handler.body)
            )
        if not _child_blocks(node, depth):
            stats.mutated.update(_mutated_params(node, params))
        for block, block_depth in _child_blocks(node, depth):
            _measure_block(block, block_depth, stats, params)


def _child_blocks(node: ast.stmt, depth: int) -> list[tuple[list[ast.stmt], int]]:
    """Return nested statement blocks with the control depth they run at."""
    if isinstance(node, ast.If):
        blocks = [(node.body, depth + 1)]
        if len(node.orelse) == 1 and isinstance(node.orelse[0], ast.If):
            blocks.append((node.orelse, depth))
        elif node.orelse:
            blocks.append((node.orelse, depth + 1))
        return blocks
    if isinstance(node, (ast.For, ast.AsyncFor, ast.While)):
        return [(node.body, depth + 1), (node.orelse, depth + 1)]
    if isinstance(node, ast.Match):
        return [(case.body, depth + 1) for case in node.cases]
    if isinstance(node, (ast.With, ast.AsyncWith)):
        return [(node.body, depth)]
    if isinstance(node, (ast.Try, ast.TryStar)):
        blocks = [(node.body, depth)]
        blocks.extend((handler.body, depth) for handler in node.handlers)
        blocks.append((node.orelse, depth))
        blocks.append((node.finalbody, depth))
        return blocks
    return []


def _bound_names(node: ast.stmt) -> list[str]:
    targets: list[ast.expr] = []
    if isinstance(node, ast.Assign):
        targets = list(node.targets)
    elif isinstance(node, (ast.AnnAssign, ast.AugAssign)):
        targets = [node.target]
    elif isinstance(node, (ast.For, ast.AsyncFor)):
        targets = [node.target]
    elif isinstance(node, (ast.With, ast.AsyncWith)):
        targets = [item.optional_vars for item in node.items if item.optional_vars is not None]

    names: list[str] = []
    for target in targets:
        for name in _target_names(target):
            if name not in names:
                names.append(name)
    return names


def _target_names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        return [name for item in target.elts for name in _target_names(item)]
    if isinstance(target, ast.Starred):
        return _target_names(target.value)
    return []


def _mutated_params(node: ast.stmt, params: set[str]) -> set[str]:
    mutated: set[str] = set()
    for child in ast.walk(node):
        if isinstance(child, ast.Call) and isinstance(child.func, ast.Attribute):
            owner = child.func.value
            if isinstance(owner, ast.Name) and owner.id in params:
                if child.func.attr in MUTATING_METHODS:
                    mutated.add(owner.id)
        targets: list[ast.expr] = []
        if isinstance(child, ast.Assign):
            targets = list(child.targets)
        elif isinstance(child, (ast.AugAssign, ast.AnnAssign)):
            targets = [child.target]
        for target in targets:
            if isinstance(target, (ast.Subscript, ast.Attribute)):
                owner = target.value
                if isinstance(owner, ast.Name) and owner.id in params:
                    mutated.add(owner.id)
    return mutated


def _is_empty_body(body: list[ast.stmt]) -> bool:
    for node in body:
        if isinstance(node, ast.Pass):
            continue
        if isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant):
            if node.value.value is Ellipsis:
                continue
        return False
    return True


def _is_bool_annotation(annotation: ast.expr | None) -> bool:
    if isinstance(annotation, ast.Name):
        return annotation.id == "bool"
    if isinstance(annotation, ast.Constant):
        return annotation.value == "bool"
    return False


def _is_bool_constant(value: ast.expr | None) -> bool:
    return isinstance(value, ast.Constant) and isinstance(value.value, bool)


def _collect_comments(content: str, lines: list[str]) -> list[CommentDraft]:
    comments: list[CommentDraft] = []
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(content).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise ParseError(f"Unable to tokenize source: {exc}") from exc

    for token in tokens:
        if token.type != tokenize.COMMENT:
            continue
        line, column = token.start
        text = token.string.lstrip("#").strip()
        before = lines[line - 1][:column].strip()
        if before:
            comments.append(CommentDraft(text=text, line=line, following_code=before))
            continue
        comments.append(_standalone_comment(text, line, lines))
    return comments


def _standalone_comment(text: str, line: int, lines: list[str]) -> CommentDraft:
    for number in range(line + 1, len(lines) + 1):
        candidate = lines[number - 1].strip()
        if not candidate or candidate.startswith("#"):
            continue
        if candidate.startswith("@"):
            # Decorated definitions report the ``def`` line, not the decorator.
            continue
        return CommentDraft(
            text=text, line=line, following_code=candidate, next_code_line=number
        )
    return CommentDraft(text=text, line=line)
