"""
Lexical analyzer for the GN build-configuration language.

This module provides the components that turn raw GN text into a token stream:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and `#` line comments before every token
    - Longest-match recognition of operators and punctuation (`<=` before `<`)
    - Recognizes:
        * Identifiers (`[A-Za-z_][A-Za-z0-9_]*`)
        * Unsigned decimal integers (the sign is folded in by the parser)
        * Double-quoted strings, taken verbatim up to the next `"`

Raises:
    Incomplete: If a string literal, or the first half of `&&` or `||`, is cut off by the end of input.

Example:
    >>> lexer = Lexer(CharacterStream('fidl("input")'))
    >>> lexer.next_token()
    Token(IDENT, fidl)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
    - token_hashmap
"""

import string
from collections.abc import Iterator
from typing import Any

from gnparse.gn_constants import token_hashmap
from gnparse.gn_errors import Incomplete

IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CHARS = IDENT_START | frozenset(string.digits)
DIGITS = frozenset(string.digits)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in GN source.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'STRING', 'LBRACK', 'EOF').
        value (str): The raw text of the token (string contents without quotes).
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))

    def describe(self) -> str:
        """Returns the lexeme as it should appear in an error message."""
        if self.type == "EOF":
            return "end of input"
        if self.type == "STRING":
            return f'"{self.value}"'
        return self.value


class Lexer:
    """Lexical analyzer for GN source.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or punctuation lexeme at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest lexeme is two characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            Incomplete: If a string literal runs to the end of input without a closing quote,
                or the input ends on a lone `&` or `|`.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier
        if ch in IDENT_START:
            ident = ""
            while not self.stream.end_of_file() and self.peek() in IDENT_CHARS:
                ident += self.advance()
            return Token("IDENT", ident, line, col)

        # 2. Integer
        if ch in DIGITS:
            num = ""
            while not self.stream.end_of_file() and self.peek() in DIGITS:
                num += self.advance()
            return Token("NUMBER", num, line, col)

        # 3. String, verbatim up to the next quote
        if ch == '"':
            self.advance()
            val = ""
            while not self.stream.end_of_file() and self.peek() != '"':
                val += self.advance()
            if self.stream.end_of_file():
                raise Incomplete("Unterminated string literal", line, col)
            self.advance()
            return Token("STRING", val, line, col)

        # 4. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 5. First half of `&&` or `||` with nothing after it
        if ch in "&|" and self.stream.peek(1) == "":
            raise Incomplete("Unterminated operator", line, col)

        # 6. Unknown character, left for the parser to report
        return Token("ERROR", self.advance(), line, col)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == "EOF":
                return


def tokenize(source: str) -> list[Token]:
    """Lexes a whole buffer into a token list that always ends with an EOF token."""
    return list(Lexer(CharacterStream(source)))


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
