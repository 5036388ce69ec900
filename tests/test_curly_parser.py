"""Tests for the brace-language front end."""

from __future__ import annotations

import pytest

from guideline_lint.errors import ParseError
from guideline_lint.model import DeclarationKind, SourceModel
from guideline_lint.parsing import build_source_model, curly


def _build(*lines: str) -> SourceModel:
    return build_source_model("\n".join(lines), path="sample.js")


def _named(model: SourceModel, name: str):
    matches = [item for item in model.declarations if item.name == name]
    assert len(matches) == 1, f"expected one declaration named {name!r}"
    return matches[0]


def test_function_declaration_reports_parameters_and_flag() -> None:
    model = _build(
        "function saveUser(name, email, age, city, isPremium) {",
        "  db.save({ name, email, age, city, isPremium });",
        "}",
    )

    declaration = _named(model, "saveUser")
    assert declaration.kind is DeclarationKind.FUNCTION
    assert declaration.param_count == 5
    assert declaration.param_names == ("name", "email", "age", "city", "isPremium")
    assert declaration.uses_boolean_flag_param is True
    assert declaration.body_statement_count == 1
    assert (declaration.line, declaration.end_line) == (1, 3)
    assert model.language == "javascript"


def test_destructured_parameter_counts_as_one_grouped_parameter() -> None:
    model = _build(
        "const render = ({ title, body }) => {",
        "  return `${title}: ${body}`;",
        "};",
    )

    declaration = _named(model, "render")
    assert declaration.kind is DeclarationKind.FUNCTION
    assert declaration.param_count == 1
    assert declaration.has_grouped_param is True
    assert declaration.param_names == ("{title, body}",)
    assert declaration.returns_value is True


def test_expression_bodied_arrow_counts_one_statement() -> None:
    model = _build("const double = (value) => value * 2;")

    declaration = _named(model, "double")
    assert declaration.kind is DeclarationKind.FUNCTION
    assert declaration.param_count == 1
    assert declaration.body_statement_count == 1
    assert declaration.returns_value is True
    assert declaration.returns_null is False


def test_single_identifier_arrow_parameter() -> None:
    model = _build("const negate = isActive => !isActive;")

    declaration = _named(model, "negate")
    assert declaration.param_names == ("isActive",)
    assert declaration.uses_boolean_flag_param is True


def test_typescript_annotations_are_skipped_except_boolean() -> None:
    model = _build(
        "export function toggle(enabled: boolean, label?: string): void {",
        "  console.log(label, enabled);",
        "}",
        "function lookup(table: Map<string, number>, key: string): number {",
        "  return table.get(key);",
        "}",
    )

    toggle = _named(model, "toggle")
    assert toggle.param_count == 2
    assert toggle.uses_boolean_flag_param is True

    lookup = _named(model, "lookup")
    assert lookup.param_names == ("table", "key")
    assert lookup.uses_boolean_flag_param is False


def test_class_methods_and_accessors_are_functions() -> None:
    model = _build(
        "class UserStore {",
        "  static create(name) {",
        "    return new UserStore(name);",
        "  }",
        "",
        "  get size() {",
        "    return this.items.length;",
        "  }",
        "",
        "  setName(name) {",
        "    this.name = name;",
        "    return this;",
        "  }",
        "}",
    )

    names = [(item.kind, item.name) for item in model.declarations]
    assert names == [
        (DeclarationKind.CLASS, "UserStore"),
        (DeclarationKind.FUNCTION, "create"),
        (DeclarationKind.FUNCTION, "size"),
        (DeclarationKind.FUNCTION, "setName"),
    ]
    assert _named(model, "UserStore").end_line == 14
    assert _named(model, "setName").returns_value is True
    assert _named(model, "setName").body_statement_count == 2


def test_nesting_depth_counts_control_structures() -> None:
    model = _build(
        "function deep(items) {",
        "  for (const item of items) {",
        "    if (item) {",
        "      while (item.next) {",
        "        if (item.done) {",
        "          return item;",
        "        }",
        "      }",
        "    }",
        "  }",
        "  return null;",
        "}",
    )

    declaration = _named(model, "deep")
    assert declaration.nesting_depth == 4
    assert declaration.returns_value is True
    assert declaration.returns_null is True
    assert _named(model, "item").kind is DeclarationKind.VARIABLE


def test_braceless_bodies_still_nest() -> None:
    model = _build(
        "function check(value) {",
        "  if (value)",
        "    if (value.ok)",
        "      return true;",
        "  return false;",
        "}",
    )

    assert _named(model, "check").nesting_depth == 2


def test_nested_function_statements_do_not_count_for_outer_function() -> None:
    model = _build(
        "function outer() {",
        "  const first = 1;",
        "  function inner() {",
        "    const a = 1;",
        "    const b = 2;",
        "    return a + b;",
        "  }",
        "  return inner() + first;",
        "}",
    )

    assert _named(model, "outer").body_statement_count == 3
    assert _named(model, "inner").body_statement_count == 3
    assert _named(model, "inner").returns_value is True


def test_empty_catch_blocks_are_counted() -> None:
    model = _build(
        "function load(path) {",
        "  try {",
        "    return read(path);",
        "  } catch (error) {}",
        "  try {",
        "    return fallback(path);",
        "  } catch {",
        "    log();",
        "  }",
        "}",
    )

    assert _named(model, "load").empty_catch_count == 1


def test_mutated_parameter_without_return_is_output_argument() -> None:
    model = _build(
        "function fill(buffer, values) {",
        "  for (const value of values) {",
        "    buffer.push(value);",
        "  }",
        "}",
        "function add(list, item) {",
        "  list.push(item);",
        "  return list;",
        "}",
    )

    assert _named(model, "fill").has_output_param is True
    assert _named(model, "add").has_output_param is False


def test_comments_attach_to_next_or_enclosing_declaration() -> None:
    model = _build(
        "// Loads the configuration file.",
        "function loadConfig(path) {",
        "  // parse the file contents",
        "  return parse(path);",
        "}",
        "const limit = 10; // max items",
        "// dangling note",
    )

    load_config = _named(model, "loadConfig")
    assert [comment.text for comment in load_config.comments] == [
        "Loads the configuration file.",
        "parse the file contents",
    ]
    assert [comment.line_offset for comment in load_config.comments] == [-1, 1]
    assert load_config.comments[1].following_code == "return parse(path);"

    limit = _named(model, "limit")
    assert [comment.text for comment in limit.comments] == ["max items"]
    assert limit.comments[0].following_code == "const limit = 10;"

    dangling = model.comments[-1]
    assert dangling.text == "dangling note"
    assert model.declaration_for(dangling) is None


def test_block_comments_are_cleaned() -> None:
    model = _build(
        "/**",
        " * Adds two numbers.",
        " */",
        "function add(a, b) {",
        "  return a + b;",
        "}",
    )

    add = _named(model, "add")
    assert [comment.text for comment in add.comments] == ["Adds two numbers."]
    assert model.declaration_for(add.comments[0]) == add


def test_regex_and_template_literals_do_not_confuse_brackets() -> None:
    model = _build(
        "const pattern = /[{}]/g;",
        "const text = `value: ${compute({ a: 1 })}`;",
        "function ok() {}",
    )

    assert [item.name for item in model.declarations] == ["pattern", "text", "ok"]


@pytest.mark.parametrize(
    ("source", "message", "line"),
    [
        ("function broken() {\n  return 1;\n", "Unclosed '{'", 1),
        ("const value = 1;\n)", "Unexpected ')'", 2),
        ('const name = "abc;\n', "Unterminated string literal", 1),
        ("const a = 1;\n/* open\n", "Unterminated block comment", 2),
        ("const t = `open\n", "Unterminated template literal", 1),
    ],
)
def test_malformed_sources_raise_parse_error(source: str, message: str, line: int) -> None:
    with pytest.raises(ParseError) as excinfo:
        build_source_model(source, path="broken.js")

    assert excinfo.value.message == message
    assert excinfo.value.line == line


def test_generic_functions_methods_and_arrows_are_declarations() -> None:
    model = build_source_model(
        "\n".join(
            [
                "function merge<K, V extends Array<number>>(left: K, right: V, strict: boolean) {",
                "  return left;",
                "}",
                "class UserStore {",
                "  saveUser<T extends object>(name: T, email, age, city, isPremium) {",
                "    return name;",
                "  }",
                "}",
                "const pick = <T,>(items: T[], index: number): T => items[index];",
            ]
        ),
        path="generics.ts",
    )

    merge = _named(model, "merge")
    assert merge.kind is DeclarationKind.FUNCTION
    assert merge.param_names == ("left", "right", "strict")
    assert merge.uses_boolean_flag_param is True
    assert _named(model, "saveUser").param_count == 5
    pick = _named(model, "pick")
    assert pick.kind is DeclarationKind.FUNCTION
    assert pick.param_names == ("items", "index")


def test_dotted_decorator_does_not_hide_method() -> None:
    model = _build(
        "class Account {",
        "  @Validate.args()",
        "  save(a, b, c) {}",
        "  @observable balance = 0;",
        "}",
    )

    assert _named(model, "save").param_count == 3
    assert _named(model, "balance").kind is DeclarationKind.VARIABLE


def test_regex_allowed_after_control_header() -> None:
    model = _build(
        "function check(ok, text) {",
        "  if (ok) /[(]/.test(text);",
        "  const ratio = (ok) / 2;",
        "  return ratio;",
        "}",
    )

    assert _named(model, "check").nesting_depth == 1
    assert _named(model, "ratio").kind is DeclarationKind.VARIABLE


@pytest.mark.parametrize("newline", ["\r", "\r\n"])
def test_carriage_return_line_breaks(newline: str) -> None:
    source = newline.join(
        ["// Sets the name", "function setName(name) {", "  return name;", "}", ""]
    )

    model = build_source_model(source, path="legacy.js")

    set_name = _named(model, "setName")
    assert (set_name.line, set_name.end_line) == (2, 4)
    assert [comment.text for comment in set_name.comments] == ["Sets the name"]
    assert set_name.comments[0].following_code == "function setName(name) {"


def test_form_feed_does_not_shift_comment_lines() -> None:
    model = _build(
        "\f",
        "// Loads the user.",
        "function loadUser(id) {",
        "  return id;",
        "}",
    )

    load_user = _named(model, "loadUser")
    assert load_user.line == 3
    assert [(comment.text, comment.line_offset) for comment in load_user.comments] == [
        ("Loads the user.", -1)
    ]


def test_function_site_without_parameters_is_rejected() -> None:
    tokens, _ = curly.tokenize("function load() {}")
    scanner = curly._Scanner(tokens, curly.pair_brackets(tokens))

    with pytest.raises(ValueError, match="params_open or single_param"):
        scanner._function_site(1)
