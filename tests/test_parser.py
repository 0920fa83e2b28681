import pytest
from hypothesis import given
from hypothesis import strategies as st

from gnparse.gn_ast import (
    ArrayAccess,
    Assignment,
    BinaryExpr,
    Call,
    ExpressionList,
    GnExpr,
    Identifier,
    IntegerLiteral,
    ScopeAccess,
    StringLiteral,
    UnaryExpr,
)
from gnparse.gn_constants import DEFAULT_MAX_DEPTH
from gnparse.gn_errors import (
    DepthExceeded,
    GnParseError,
    Incomplete,
    StructuralMismatch,
    TrailingInput,
)
from gnparse.gn_lexer import tokenize
from gnparse.gn_parser import (
    Parser,
    max_supported_depth,
    parse_expression_source,
    parse_file,
    parse_source,
)


def parser_for(source: str) -> Parser:
    return Parser(tokenize(source))


def parse_whole(rule: str, source: str) -> GnExpr:
    """Runs a single grammar rule and checks it consumed the whole input."""
    parser = parser_for(source)
    node = getattr(parser, rule)()
    parser.expect_end()
    return node


def strings(*values: str) -> ExpressionList:
    return ExpressionList([StringLiteral(v) for v in values])


def assign(name: str, value: GnExpr, op: str = "=") -> Assignment:
    return Assignment(Identifier(name), op, value)


# Lexical rules


@given(st.from_regex(r"[A-Za-z_][A-Za-z0-9_]*", fullmatch=True))  # type: ignore[misc]
def test_identifier_property(name: str) -> None:
    assert parse_whole("parse_identifier", name) == Identifier(name)


def test_identifier_examples() -> None:
    assert parse_whole("parse_identifier", "Plan9") == Identifier("Plan9")
    assert parse_whole("parse_identifier", "_errno") == Identifier("_errno")


def test_identifier_leading_digit_fails() -> None:
    with pytest.raises(StructuralMismatch):
        parser_for("7words").parse_identifier()


def test_identifier_leaves_rest() -> None:
    parser = parser_for("one two")
    assert parser.parse_identifier() == Identifier("one")
    assert parser.current().value == "two"


def test_string_literal() -> None:
    assert parse_whole("parse_string", '"abc"') == StringLiteral("abc")
    assert parse_whole("parse_string", '"now is the time"') == StringLiteral(
        "now is the time"
    )


def test_unterminated_string_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parse_expression_source('"abc')


def test_half_typed_logical_operator_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parse_source("a = b &")
    with pytest.raises(Incomplete):
        parse_source("a = b |")
    assert parse_source("a = b &&\nc") == parse_source("a = b && c")


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,value", [("33", 33), ("-44", -44), ("0", 0), ("- 5", -5)]
)
def test_integer_literal(source: str, value: int) -> None:
    assert parse_whole("parse_integer", source) == IntegerLiteral(value)


def test_integer_bounds() -> None:
    assert parse_expression_source("-9223372036854775808") == IntegerLiteral(-(2**63))
    with pytest.raises(StructuralMismatch, match="64-bit integer"):
        parse_expression_source("9223372036854775808")


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1))  # type: ignore[misc]
def test_integer_property(value: int) -> None:
    assert parse_expression_source(str(value)) == IntegerLiteral(value)


# Primary expressions


def test_scope_access() -> None:
    assert parse_whole("parse_scope_access", "dog.name") == ScopeAccess("dog", "name")
    assert parse_expression_source("dog.name") == ScopeAccess("dog", "name")


def test_scope_access_mismatch() -> None:
    with pytest.raises(StructuralMismatch) as e:
        parser_for("this=that").parse_scope_access()
    assert e.value.expected == "'.'"
    assert e.value.found == "="


def test_scope_access_incomplete() -> None:
    with pytest.raises(Incomplete):
        parser_for("this.").parse_scope_access()


def test_array_access() -> None:
    expected = ArrayAccess("dog", IntegerLiteral(3))
    assert parse_whole("parse_array_access", "dog[3]") == expected
    assert parse_expression_source("dog[3]") == expected


def test_array_access_with_expression_index() -> None:
    assert parse_expression_source("dog[i + 1]") == ArrayAccess(
        "dog", BinaryExpr(Identifier("i"), "+", IntegerLiteral(1))
    )


def test_array_access_unknown_operator_fails() -> None:
    with pytest.raises(StructuralMismatch) as e:
        parser_for("dog[3*3]").parse_array_access()
    assert e.value.found == "*"


def test_call_without_block() -> None:
    assert parse_whole("parse_call", 'fidl ( "input" )') == Call(
        "fidl", strings("input"), None
    )


def test_call_with_block() -> None:
    assert parse_whole("parse_call", 'with_block("this"){a=1}') == Call(
        "with_block",
        strings("this"),
        ExpressionList([assign("a", IntegerLiteral(1))]),
    )


def test_call_arguments() -> None:
    call = parse_expression_source('f(a, "b", 3, [1, 2],)')
    assert call == Call(
        "f",
        ExpressionList(
            [
                Identifier("a"),
                StringLiteral("b"),
                IntegerLiteral(3),
                ExpressionList([IntegerLiteral(1), IntegerLiteral(2)]),
            ]
        ),
    )


def test_call_arguments_need_commas() -> None:
    with pytest.raises(StructuralMismatch):
        parse_expression_source("f(a b)")


def test_call_mismatch() -> None:
    with pytest.raises(StructuralMismatch):
        parser_for("this=that").parse_call()


def test_empty_call() -> None:
    assert parse_expression_source("f()") == Call("f", ExpressionList())


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    [
        'bork_list = ["Fez","Raz","Skitch",]',
        'bork_list = ["Fez","Raz","Skitch"]',
        'bork_list = [ "Fez" , "Raz" , "Skitch" , ]',
        'bork_list = ["Fez" "Raz" "Skitch"]',
    ],
)
def test_trailing_comma_is_inert(source: str) -> None:
    expected = assign("bork_list", strings("Fez", "Raz", "Skitch"))
    assert parse_whole("parse_assignment", source) == expected


def test_empty_list() -> None:
    assert parse_expression_source("[]") == ExpressionList()


def test_list_double_comma_fails() -> None:
    with pytest.raises(StructuralMismatch):
        parse_expression_source("[1,,2]")


def test_unterminated_list_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parse_expression_source('["a", "b",')


def test_parenthesized_expression_has_no_node() -> None:
    assert parse_expression_source("((a))") == Identifier("a")


def test_unclosed_parenthesis_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parse_expression_source("(a")


def test_primary_rejects_operator() -> None:
    with pytest.raises(StructuralMismatch) as e:
        parse_expression_source("== a")
    assert e.value.expected == "expression"


# Operators


def test_unary() -> None:
    assert parse_whole("parse_unary", "!dog_age") == UnaryExpr(
        "!", Identifier("dog_age")
    )


def test_nested_unary() -> None:
    assert parse_whole("parse_unary", "!!dog_age") == UnaryExpr(
        "!", UnaryExpr("!", Identifier("dog_age"))
    )


def test_unary_binds_tighter_than_binary() -> None:
    assert parse_expression_source("!a && b") == BinaryExpr(
        UnaryExpr("!", Identifier("a")), "&&", Identifier("b")
    )


@pytest.mark.parametrize(  # type: ignore[misc]
    "op", ["+", "-", "<", "<=", ">", ">=", "==", "!=", "&&", "||"]
)
def test_binary_operators(op: str) -> None:
    assert parse_expression_source(f"a {op} b") == BinaryExpr(
        Identifier("a"), op, Identifier("b")
    )


def test_binary_is_flat_and_left_associative() -> None:
    a, b, c = Identifier("a"), Identifier("b"), Identifier("c")
    assert parse_expression_source("a || b && c") == BinaryExpr(
        BinaryExpr(a, "||", b), "&&", c
    )
    assert parse_expression_source("a + b == c") == BinaryExpr(
        BinaryExpr(a, "+", b), "==", c
    )


def test_parentheses_override_fold() -> None:
    assert parse_expression_source("a - (b - c)") == BinaryExpr(
        Identifier("a"), "-", BinaryExpr(Identifier("b"), "-", Identifier("c"))
    )


def test_minus_negative_literal() -> None:
    assert parse_expression_source("a - -1") == BinaryExpr(
        Identifier("a"), "-", IntegerLiteral(-1)
    )


def test_dangling_operator_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parse_expression_source("a +")


def test_long_binary_chain_does_not_recurse() -> None:
    source = " + ".join(["x"] * 2000)
    expr = parse_expression_source(source)
    assert isinstance(expr, BinaryExpr)
    assert expr.right == Identifier("x")


# Statements


def test_assignment() -> None:
    assert parse_whole("parse_assignment", "bork = 3") == assign("bork", IntegerLiteral(3))


@pytest.mark.parametrize("op", ["=", "+=", "-="])  # type: ignore[misc]
def test_assignment_operators(op: str) -> None:
    assert parse_whole("parse_assignment", f'deps {op} ["//a"]') == assign(
        "deps", strings("//a"), op
    )


def test_assignment_to_scope_and_array() -> None:
    assert parse_whole("parse_assignment", "a.b = 1") == Assignment(
        ScopeAccess("a", "b"), "=", IntegerLiteral(1)
    )
    assert parse_whole("parse_assignment", "a[0] = 1") == Assignment(
        ArrayAccess("a", IntegerLiteral(0)), "=", IntegerLiteral(1)
    )


def test_assignment_missing_operator() -> None:
    with pytest.raises(StructuralMismatch, match="assignment operator"):
        parser_for("a + 1").parse_assignment()


def test_assignment_bad_lvalue() -> None:
    with pytest.raises(StructuralMismatch, match="assignment target"):
        parser_for('"a" = 1').parse_assignment()


def test_assignment_missing_value_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        parser_for("a =").parse_assignment()


def test_fidl_assignment(input_fidl_assignment: str) -> None:
    node = parse_whole("parse_assignment", input_fidl_assignment)
    assert isinstance(node, Assignment)
    assert node.lvalue == Identifier("sources")
    assert isinstance(node.rvalue, ExpressionList)
    assert len(node.rvalue) == 10


def test_statement_list() -> None:
    assert parse_whole("parse_statement_list", "b=2 c=3") == ExpressionList(
        [assign("b", IntegerLiteral(2)), assign("c", IntegerLiteral(3))]
    )


def test_statement_list_with_calls() -> None:
    program = parse_source('import("//build.gni")\nx = 1\ngroup("all") {}')
    assert program == ExpressionList(
        [
            Call("import", strings("//build.gni")),
            assign("x", IntegerLiteral(1)),
            Call("group", strings("all"), ExpressionList()),
        ]
    )


def test_block() -> None:
    assert parse_whole("parse_block", "{ b=2 c=3 }") == ExpressionList(
        [assign("b", IntegerLiteral(2)), assign("c", IntegerLiteral(3))]
    )


def test_fidl_block(input_fidl_block: str) -> None:
    body = parse_whole("parse_block", input_fidl_block)
    assert isinstance(body, ExpressionList)
    assert len(body) == 2


def test_unclosed_block_is_incomplete() -> None:
    with pytest.raises(Incomplete, match="'}'"):
        parse_source('fidl("input") { a = 1')


def test_block_with_junk_is_mismatch() -> None:
    with pytest.raises(StructuralMismatch):
        parse_source('fidl("input") { a = 1 ] }')


# Driver


def test_source(input_fidl: str) -> None:
    program = parse_source(input_fidl)
    assert len(program) == 1
    call = program[0]
    assert isinstance(call, Call)
    assert call.name == "fidl"
    assert call.args == strings("input")
    assert call.body is not None
    assert len(call.body) == 2
    sources, deps = call.body
    assert isinstance(sources, Assignment) and sources.lvalue == Identifier("sources")
    assert isinstance(deps, Assignment)
    assert deps.rvalue == strings(
        "//apps/mozart/services/geometry", "//apps/mozart/services/views:view_token"
    )


def test_fidl_call_with_body_example() -> None:
    assert parse_source('fidl("input") { a = 1 }') == ExpressionList(
        [
            Call(
                "fidl",
                strings("input"),
                ExpressionList([assign("a", IntegerLiteral(1))]),
            )
        ]
    )


def test_layout_does_not_matter(input_fidl: str) -> None:
    squashed = " ".join(input_fidl.split())
    assert parse_source(squashed) == parse_source(input_fidl)


def test_comments_are_ignored(input_fidl: str) -> None:
    commented = "# Copyright header\n" + input_fidl.replace(
        "sources = [", "sources = [  # the interfaces"
    )
    assert parse_source(commented) == parse_source(input_fidl)


def test_empty_source() -> None:
    assert parse_source("") == ExpressionList()
    assert parse_source("  # nothing\n") == ExpressionList()


def test_trailing_input() -> None:
    with pytest.raises(TrailingInput):
        parse_source("a = 1 }")
    with pytest.raises(TrailingInput):
        parse_expression_source("a b")


def test_positions_recorded() -> None:
    program = parse_source('\n  fidl("x") {\n    a = 1\n  }')
    call = program[0]
    assert isinstance(call, Call)
    assert (call.line, call.col) == (2, 3)
    assert call.body is not None
    assert (call.body[0].line, call.body[0].col) == (3, 5)


def test_error_position_in_message() -> None:
    with pytest.raises(StructuralMismatch) as e:
        parse_source("a = 1\nb = ]")
    assert (e.value.line, e.value.col) == (2, 5)
    assert "line 2, col 5" in str(e.value)


def test_errors_are_syntax_errors() -> None:
    with pytest.raises(SyntaxError):
        parse_source("a = ")


# Depth limit


def test_depth_limit_on_lists() -> None:
    source = "x = " + "[" * 20 + "]" * 20
    assert isinstance(parse_source(source, max_depth=20)[0], Assignment)
    with pytest.raises(DepthExceeded) as e:
        parse_source(source, max_depth=19)
    assert e.value.limit == 19


def test_depth_limit_on_blocks() -> None:
    source = "a() {" * 5 + "}" * 5
    parse_source(source, max_depth=5)
    with pytest.raises(DepthExceeded):
        parse_source(source, max_depth=4)


def test_depth_limit_on_unary_chain() -> None:
    with pytest.raises(DepthExceeded):
        parse_expression_source("!" * 5000 + "a")


def test_pathological_nesting_fails_cleanly() -> None:
    with pytest.raises(DepthExceeded):
        parse_source("x = " + "(" * 100_000)


def test_depth_counter_resets_after_error() -> None:
    parser = parser_for("[[[")
    with pytest.raises(Incomplete):
        parser.parse_expression()
    assert parser.depth == 0


def test_max_depth_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Parser([], max_depth=0)


def test_max_depth_capped_by_recursion_limit() -> None:
    assert max_supported_depth() >= DEFAULT_MAX_DEPTH
    Parser([], max_depth=max_supported_depth())
    with pytest.raises(ValueError, match="recursion limit"):
        Parser([], max_depth=max_supported_depth() + 1)


def test_huge_max_depth_cannot_reach_recursion_error() -> None:
    with pytest.raises(ValueError):
        parse_source("a = " + "[" * 600 + "]" * 600, max_depth=5000)


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    [
        "a = " + "[" * 150 + "]" * 150,
        "x = " + "(" * 150 + "1" + ")" * 150,
        "a = f() {" * 150 + "}" * 150,
    ],
)
def test_deepest_allowed_nesting_fails_cleanly(source: str) -> None:
    with pytest.raises(DepthExceeded):
        parse_source(source, max_depth=max_supported_depth())


def test_recursion_error_reported_as_depth_exceeded(monkeypatch: pytest.MonkeyPatch) -> None:
    def overflow(self: Parser) -> GnExpr:
        raise RecursionError

    monkeypatch.setattr(Parser, "parse_statement_list", overflow)
    monkeypatch.setattr(Parser, "parse_expression", overflow)
    with pytest.raises(DepthExceeded):
        parse_source("a = 1")
    with pytest.raises(DepthExceeded):
        parse_expression_source("1")


def test_parse_file(tmp_path, input_fidl: str) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "BUILD.gn"
    path.write_text(input_fidl, encoding="utf-8")
    assert parse_file(path) == parse_source(input_fidl)


@given(st.text(max_size=200))  # type: ignore[misc]
def test_parser_is_total(source: str) -> None:
    try:
        parse_source(source)
    except GnParseError:
        pass


@given(
    st.lists(
        st.sampled_from(["a", "=", "[", "]", "(", ")", "{", "}", ",", '"s"', "1", "!", "+", ".", "f("]),
        max_size=40,
    )
)  # type: ignore[misc]
def test_parser_is_total_on_token_soup(parts: list[str]) -> None:
    try:
        parse_source(" ".join(parts))
    except GnParseError:
        pass
