"""
Token table and parser limits for the GN build-configuration language.

Exports:
    token_hashmap: Maps every operator/punctuation lexeme to its canonical token type.
    ASSIGN_OPS: Assignment operators accepted after an lvalue.
    BINARY_OPS: Infix operators accepted between two expressions.
    UNARY_OPS: Prefix operators.
    DEFAULT_MAX_DEPTH: Default nesting limit enforced by the parser.
    FRAMES_PER_LEVEL, STACK_RESERVE: Used to cap max_depth by the interpreter recursion limit.
    INT64_MIN, INT64_MAX: Bounds for integer literals.
"""

token_hashmap: dict[str, str] = {
    # Grouping
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ".": "DOT",
    # Assignment
    "=": "ASSIGN",
    "+=": "PLUS_ASSIGN",
    "-=": "SUB_ASSIGN",
    # Arithmetic
    "+": "PLUS",
    "-": "SUB",
    # Comparison
    "<": "LT",
    "<=": "LE",
    ">": "GT",
    ">=": "GE",
    "==": "EQ",
    "!=": "NE",
    # Boolean
    "&&": "AND",
    "||": "OR",
    "!": "NOT",
}

ASSIGN_OPS: tuple[str, ...] = ("=", "+=", "-=")

BINARY_OPS: tuple[str, ...] = ("+", "-", "<", "<=", ">", ">=", "==", "!=", "&&", "||")

UNARY_OPS: tuple[str, ...] = ("!",)

assign_tokens: set[str] = {token_hashmap[op] for op in ASSIGN_OPS}
binary_tokens: set[str] = {token_hashmap[op] for op in BINARY_OPS}
unary_tokens: set[str] = {token_hashmap[op] for op in UNARY_OPS}

DEFAULT_MAX_DEPTH = 100

# Interpreter frames one nesting level can cost (a block holding `x = f() {`),
# and frames left to callers when capping max_depth by the recursion limit.
FRAMES_PER_LEVEL = 8
STACK_RESERVE = 200

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

__all__ = [
    "ASSIGN_OPS",
    "BINARY_OPS",
    "DEFAULT_MAX_DEPTH",
    "FRAMES_PER_LEVEL",
    "INT64_MAX",
    "INT64_MIN",
    "STACK_RESERVE",
    "UNARY_OPS",
    "assign_tokens",
    "binary_tokens",
    "token_hashmap",
    "unary_tokens",
]
