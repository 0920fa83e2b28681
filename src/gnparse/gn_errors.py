"""
Typed parse failures raised by the GN lexer and parser.

Every failure is a subclass of `GnParseError`, which itself derives from the
built-in `SyntaxError` so callers that already catch `SyntaxError` keep working.

Classes:
    GnParseError: Base class carrying a message and a 1-based source position.
    StructuralMismatch: The current token matches no alternative of the expected rule.
    Incomplete: The input ended while a token or bracketed construct was still open.
    TrailingInput: A successful parse did not consume the whole input.
    DepthExceeded: Nesting went past the parser's configured maximum.

Example:
    >>> try:
    ...     parse_source('sources = ["a.fidl"')
    ... except Incomplete as e:
    ...     print(e)
    Expected ']' to close list, got end of input at line 1, col 20
"""


class GnParseError(SyntaxError):
    """Base class for all GN parse failures.

    Attributes:
        message (str): Human-readable description of the failure.
        line (int): 1-based line where the failure was detected.
        col (int): 1-based column where the failure was detected.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} at line {self.line}, col {self.col}"
        return self.message


class StructuralMismatch(GnParseError):
    """The input at the current position does not match the expected production.

    Attributes:
        expected (str): Description of what the rule wanted.
        found (str): The lexeme actually present.
    """

    def __init__(self, expected: str, found: str, line: int = 0, col: int = 0) -> None:
        super().__init__(f"Expected {expected}, got {found!r}", line, col)
        self.expected = expected
        self.found = found


class Incomplete(GnParseError):
    """The input ended before a token or construct was closed.

    A caller feeding input incrementally can append more text and parse again.
    """


class TrailingInput(GnParseError):
    """The parse succeeded but left unconsumed input behind."""


class DepthExceeded(GnParseError):
    """Nesting exceeded the parser's maximum depth.

    Attributes:
        limit (int): The configured maximum nesting depth.
    """

    def __init__(self, limit: int, line: int = 0, col: int = 0) -> None:
        super().__init__(
            f"Input too deeply nested (maximum depth is {limit})", line, col
        )
        self.limit = limit


__all__ = [
    "DepthExceeded",
    "GnParseError",
    "Incomplete",
    "StructuralMismatch",
    "TrailingInput",
]
