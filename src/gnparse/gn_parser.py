"""
GN Build File Parser

Parses GN token streams into immutable abstract syntax trees (ASTs).

This module implements a recursive-descent parser over the tokens produced by
`gnparse.gn_lexer`. It recognizes the declarative subset of GN used by target
definitions such as `fidl("input") { sources = [...] }` and does not evaluate
anything: the result is a faithful tree of `gnparse.gn_ast` nodes.

Supported Constructs
--------------------
- Expressions:
    * Literals: `"text"`, `42`, `-7`
    * Identifiers, scope access `a.b`, array access `a[expr]`
    * Calls `name(args)` with an optional `{ ... }` body
    * Bracketed lists `[a, b, c,]` (separators optional, trailing comma inert)
    * Parenthesized expressions, prefix `!`
    * Binary `+ - < <= > >= == != && ||`, all of equal precedence, left-associative

- Statements:
    * Assignments: `x = ...`, `x += ...`, `x -= ...` where `x` is an identifier,
      array access or scope access
    * Bare calls, with or without a body

Parser Behavior
---------------
- Whitespace and comments are skipped by the lexer before every token, so layout
  never affects the result.
- Every rule raises on failure; there is no partial AST. Running out of tokens
  raises `Incomplete`, any other mismatch raises `StructuralMismatch`.
- `parse()` requires the whole input to be consumed (`TrailingInput` otherwise).
- Nesting of lists, parentheses, calls, blocks, indices and `!` chains is capped
  by `max_depth` (`DepthExceeded`), and `max_depth` itself may not exceed
  what the recursion limit can hold (`max_supported_depth()`).

Entry Points
------------
- `parse_source()`: Parse a whole buffer into a top-level statement list.
- `parse_expression_source()`: Parse a buffer holding exactly one expression.
- `parse_file()`: Read a BUILD.gn/.gni file and parse it.
- `Parser`: Individual grammar rules (`parse_call`, `parse_block`, ...) for callers
  that need to parse a fragment.

Returns
-------
ExpressionList
    The ordered top-level statements of the program.

Raises
------
GnParseError
    One of `StructuralMismatch`, `Incomplete`, `TrailingInput` or `DepthExceeded`.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn

from gnparse.gn_ast import (
    ArrayAccess,
    Assignment,
    BinaryExpr,
    Call,
    ExpressionList,
    GnExpr,
    Identifier,
    IntegerLiteral,
    LValue,
    ScopeAccess,
    StringLiteral,
    UnaryExpr,
)
from gnparse.gn_constants import (
    DEFAULT_MAX_DEPTH,
    FRAMES_PER_LEVEL,
    INT64_MAX,
    INT64_MIN,
    STACK_RESERVE,
    assign_tokens,
    binary_tokens,
    unary_tokens,
)
from gnparse.gn_errors import (
    DepthExceeded,
    Incomplete,
    StructuralMismatch,
    TrailingInput,
)
from gnparse.gn_lexer import Token, tokenize

logger = logging.getLogger(__name__)


def max_supported_depth() -> int:
    """The deepest `max_depth` the interpreter's recursion limit can hold."""
    return max(1, (sys.getrecursionlimit() - STACK_RESERVE) // FRAMES_PER_LEVEL)


class Parser:
    """
    GN Parser Class

    Transforms a list of lexical tokens into `gnparse.gn_ast` nodes. Each
    `parse_*` method implements one grammar rule: it consumes the tokens of that
    construct starting at the current position and returns the node, leaving the
    position just after it.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream to be parsed.
    position : int
        Current index into the token stream.
    max_depth : int
        Maximum nesting depth before `DepthExceeded` is raised.
    depth : int
        Current nesting depth.

    Raises
    ------
    GnParseError
        When the token stream does not match the rule being parsed.
    """

    def __init__(self, tokens: list[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        if max_depth > max_supported_depth():
            raise ValueError(
                f"max_depth must be at most {max_supported_depth()} "
                f"at the current recursion limit, got {max_depth}"
            )
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.max_depth: int = max_depth
        self.depth: int = 0

    # Token access

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        last = self.tokens[-1] if self.tokens else Token("EOF", "", 1, 1)
        return Token("EOF", "", last.line, last.col)

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else Token("EOF", "")

    def advance(self) -> Token:
        """Consumes the current token and returns it."""
        tok = self.current()
        if tok.type != "EOF":
            self.position += 1
        return tok

    def at(self, *types: str) -> bool:
        return self.current().type in types

    def fail(self, expected: str) -> NoReturn:
        """Raises the error for finding something other than `expected` at the current token."""
        tok = self.current()
        if tok.type == "EOF":
            raise Incomplete(f"Expected {expected}, got end of input", tok.line, tok.col)
        raise StructuralMismatch(expected, tok.describe(), tok.line, tok.col)

    def match(self, *types: str, expected: str) -> Token:
        if self.current().type in types:
            return self.advance()
        self.fail(expected)

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Counts one level of nesting for the duration of the block."""
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                tok = self.current()
                raise DepthExceeded(self.max_depth, tok.line, tok.col)
            yield
        finally:
            self.depth -= 1

    @contextmanager
    def stack_guard(self) -> Iterator[None]:
        """Reports a RecursionError from a deep caller stack as `DepthExceeded`."""
        try:
            yield
        except RecursionError:
            tok = self.current()
            raise DepthExceeded(self.max_depth, tok.line, tok.col) from None

    def expect_end(self) -> None:
        tok = self.current()
        if tok.type != "EOF":
            raise TrailingInput(
                f"Unexpected {tok.describe()!r} after end of input", tok.line, tok.col
            )

    # Driver

    def parse(self) -> ExpressionList:
        """Parse a whole GN file into its top-level statement list."""
        with self.stack_guard():
            program = self.parse_statement_list()
        self.expect_end()
        return program

    # Lexical rules

    def parse_identifier(self) -> Identifier:
        tok = self.match("IDENT", expected="identifier")
        return Identifier(tok.value, line=tok.line, col=tok.col)

    def parse_string(self) -> StringLiteral:
        tok = self.match("STRING", expected="string literal")
        return StringLiteral(tok.value, line=tok.line, col=tok.col)

    def parse_integer(self) -> IntegerLiteral:
        """Parse an integer literal with an optional leading `-`."""
        start = self.current()
        negative = self.at("SUB")
        if negative:
            self.advance()
        tok = self.match("NUMBER", expected="integer literal")
        text = f"-{tok.value}" if negative else tok.value
        # int() refuses very long digit strings, and anything past 19 digits overflows anyway.
        digits = tok.value.lstrip("0")
        if len(digits) > 19:
            raise StructuralMismatch("64-bit integer", text, start.line, start.col)
        value = -int(digits or "0") if negative else int(digits or "0")
        if not INT64_MIN <= value <= INT64_MAX:
            raise StructuralMismatch("64-bit integer", text, start.line, start.col)
        return IntegerLiteral(value, line=start.line, col=start.col)

    # Primary expressions

    def parse_primary(self) -> GnExpr:
        """
        Parse a primary expression.

        Alternatives are tried in a fixed order: bracketed list, string literal,
        identifier-led forms, parenthesized expression, integer literal. An
        identifier is a call, array access or scope access when it is directly
        followed by `(`, `[` or `.` respectively, and a bare identifier otherwise.
        """
        tok = self.current()
        if tok.type == "LBRACK":
            return self.parse_bracketed_list()
        if tok.type == "STRING":
            return self.parse_string()
        if tok.type == "IDENT":
            follower = self.peek().type
            if follower == "LPAREN":
                return self.parse_call()
            if follower == "LBRACK":
                return self.parse_array_access()
            if follower == "DOT":
                return self.parse_scope_access()
            return self.parse_identifier()
        if tok.type == "LPAREN":
            return self.parse_parenthesized()
        if tok.type in ("NUMBER", "SUB"):
            return self.parse_integer()
        self.fail("expression")

    def parse_bracketed_list(self) -> ExpressionList:
        """Parse `[ expr ,? expr ,? ... ]`; a trailing comma has no effect."""
        open_tok = self.match("LBRACK", expected="'['")
        elements: list[GnExpr] = []
        with self.nested():
            while not self.at("RBRACK"):
                if self.at("EOF"):
                    self.fail("']' to close list")
                elements.append(self.parse_expression())
                if self.at("COMMA"):
                    self.advance()
            self.match("RBRACK", expected="']' to close list")
        return ExpressionList(elements, line=open_tok.line, col=open_tok.col)

    def parse_call(self) -> Call:
        """Parse `name(arg, ...)` followed by an optional `{ statements }` body."""
        name_tok = self.match("IDENT", expected="function name")
        open_tok = self.match("LPAREN", expected="'('")
        args: list[GnExpr] = []
        with self.nested():
            while not self.at("RPAREN"):
                args.append(self.parse_expression())
                if not self.at("COMMA"):
                    break
                self.advance()
            self.match("RPAREN", expected="')' to close call arguments")

        body = self.parse_block() if self.at("LBRACE") else None
        return Call(
            name_tok.value,
            ExpressionList(args, line=open_tok.line, col=open_tok.col),
            body,
            line=name_tok.line,
            col=name_tok.col,
        )

    def parse_array_access(self) -> ArrayAccess:
        name_tok = self.match("IDENT", expected="identifier")
        self.match("LBRACK", expected="'['")
        with self.nested():
            index = self.parse_expression()
            self.match("RBRACK", expected="']' to close array index")
        return ArrayAccess(name_tok.value, index, line=name_tok.line, col=name_tok.col)

    def parse_scope_access(self) -> ScopeAccess:
        scope_tok = self.match("IDENT", expected="identifier")
        self.match("DOT", expected="'.'")
        name_tok = self.match("IDENT", expected="identifier after '.'")
        return ScopeAccess(
            scope_tok.value, name_tok.value, line=scope_tok.line, col=scope_tok.col
        )

    def parse_parenthesized(self) -> GnExpr:
        self.match("LPAREN", expected="'('")
        with self.nested():
            expr = self.parse_expression()
            self.match("RPAREN", expected="')'")
        return expr

    # Operators

    def parse_unary(self) -> GnExpr:
        """Parse `!` applied to a unary expression, or a primary expression."""
        if self.current().type in unary_tokens:
            op_tok = self.advance()
            with self.nested():
                operand = self.parse_unary()
            return UnaryExpr(op_tok.value, operand, line=op_tok.line, col=op_tok.col)
        return self.parse_primary()

    def parse_expression(self) -> GnExpr:
        """
        Parse a unary expression followed by any number of `op operand` pairs.

        Operators share one precedence level and fold to the left, so `a + b == c`
        is `(a + b) == c`.
        """
        left = self.parse_unary()
        while self.current().type in binary_tokens:
            op_tok = self.advance()
            right = self.parse_unary()
            left = BinaryExpr(left, op_tok.value, right, line=left.line, col=left.col)
        return left

    # Statements

    def parse_lvalue(self) -> LValue:
        if not self.at("IDENT"):
            self.fail("assignment target")
        follower = self.peek().type
        if follower == "LBRACK":
            return self.parse_array_access()
        if follower == "DOT":
            return self.parse_scope_access()
        return self.parse_identifier()

    def parse_assignment(self) -> Assignment:
        lvalue = self.parse_lvalue()
        if self.current().type not in assign_tokens:
            self.fail("assignment operator ('=', '+=' or '-=')")
        op_tok = self.advance()
        rvalue = self.parse_expression()
        return Assignment(lvalue, op_tok.value, rvalue, line=lvalue.line, col=lvalue.col)

    def parse_statement(self) -> Call | Assignment:
        if self.at("IDENT") and self.peek().type == "LPAREN":
            return self.parse_call()
        return self.parse_assignment()

    def parse_statement_list(self) -> ExpressionList:
        """Parse statements for as long as the current token can start one."""
        start = self.current()
        statements: list[GnExpr] = []
        while self.at("IDENT"):
            statements.append(self.parse_statement())
        return ExpressionList(statements, line=start.line, col=start.col)

    def parse_block(self) -> ExpressionList:
        """Parse `{ statement* }` into the statement list it contains."""
        open_tok = self.match("LBRACE", expected="'{'")
        with self.nested():
            body = self.parse_statement_list()
            self.match("RBRACE", expected="'}' to close block")
        return ExpressionList(body.elements, line=open_tok.line, col=open_tok.col)


def parse_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> ExpressionList:
    """Parse a complete GN buffer into its top-level statement list.

    Raises:
        GnParseError: If the buffer is not a complete, valid statement list.
    """
    logger.debug("Parsing %d characters of GN source", len(source))
    program = Parser(tokenize(source), max_depth=max_depth).parse()
    logger.debug("Parsed %d top-level statements", len(program))
    return program


def parse_expression_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> GnExpr:
    """Parse a buffer that must contain exactly one expression."""
    parser = Parser(tokenize(source), max_depth=max_depth)
    with parser.stack_guard():
        expr = parser.parse_expression()
    parser.expect_end()
    return expr


def parse_file(path: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> ExpressionList:
    logger.debug("Reading %s", path)
    source = Path(path).read_text(encoding="utf-8")
    return parse_source(source, max_depth=max_depth)


__all__ = [
    "Parser",
    "max_supported_depth",
    "parse_expression_source",
    "parse_file",
    "parse_source",
]
