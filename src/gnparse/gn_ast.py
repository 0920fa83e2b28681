"""
Defines the abstract syntax tree (AST) node variants for GN build files.

The AST is a closed set of immutable node types. Consumers match on the concrete
class (or on its `kind` string, which the emitters use for dispatch) rather than
on a shared base type.

Classes:
    Identifier, StringLiteral, IntegerLiteral:
        Leaf expressions.
    Call:
        `name(args) { body }`; `body` is None when no block follows the call.
    ArrayAccess, ScopeAccess:
        `name[index]` and `scope.name`.
    UnaryExpr, BinaryExpr:
        Prefix `!` and flat infix operators.
    ExpressionList:
        Ordered sequence reused for array literals, call arguments and statement lists.
    Assignment:
        `lvalue op rvalue`, where lvalue is an Identifier, ArrayAccess or ScopeAccess.

    ASTDict:
        TypedDict shape of `to_dict()` output, suitable for JSON or debugging.

Every node records the 1-based `line`/`col` where it starts. Positions are
excluded from equality so that two parses of differently formatted but
structurally identical text compare equal.

Example:
    node = Assignment(Identifier("a"), "=", IntegerLiteral(1))
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypedDict, Union

from gnparse.gn_constants import ASSIGN_OPS, BINARY_OPS, INT64_MAX, INT64_MIN, UNARY_OPS


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of a node used for serialization.

    Only `kind`, `line` and `col` are always present; the remaining keys depend
    on the variant and mirror its dataclass fields.
    """

    kind: str
    line: int
    col: int
    name: str
    value: Any
    scope: str
    identifier: str
    op: str
    args: "ASTDict"
    body: "ASTDict | None"
    index: "ASTDict"
    operand: "ASTDict"
    left: "ASTDict"
    right: "ASTDict"
    lvalue: "ASTDict"
    rvalue: "ASTDict"
    elements: list["ASTDict"]


def _position() -> Any:
    return field(default=0, compare=False, kw_only=True)


@dataclass(frozen=True)
class Identifier:
    kind: ClassVar[str] = "identifier"

    name: str
    line: int = _position()
    col: int = _position()

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "name": self.name, "line": self.line, "col": self.col}


@dataclass(frozen=True)
class StringLiteral:
    """Quoted text; `value` is the verbatim content between the quotes."""

    kind: ClassVar[str] = "string"

    value: str
    line: int = _position()
    col: int = _position()

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "value": self.value, "line": self.line, "col": self.col}


@dataclass(frozen=True)
class IntegerLiteral:
    kind: ClassVar[str] = "integer"

    value: int
    line: int = _position()
    col: int = _position()

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(f"Integer literal out of 64-bit range: {self.value}")

    def to_dict(self) -> ASTDict:
        return {"kind": self.kind, "value": self.value, "line": self.line, "col": self.col}


@dataclass(frozen=True)
class ExpressionList:
    """Ordered expressions in source order.

    Used for bracketed array literals, call argument lists, call bodies and the
    top-level program, so a call body has the same shape as a whole file.
    """

    kind: ClassVar[str] = "list"

    elements: tuple[GnExpr, ...] = ()
    line: int = _position()
    col: int = _position()

    def __post_init__(self) -> None:
        # Accept any iterable at construction, store a tuple.
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def __iter__(self) -> Iterator[GnExpr]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __getitem__(self, index: int) -> GnExpr:
        return self.elements[index]

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "elements": [e.to_dict() for e in self.elements],
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class Call:
    kind: ClassVar[str] = "call"

    name: str
    args: ExpressionList = field(default_factory=ExpressionList)
    body: ExpressionList | None = None
    line: int = _position()
    col: int = _position()

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "name": self.name,
            "args": self.args.to_dict(),
            "body": self.body.to_dict() if self.body is not None else None,
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class ArrayAccess:
    kind: ClassVar[str] = "array_access"

    identifier: str
    index: GnExpr
    line: int = _position()
    col: int = _position()

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "identifier": self.identifier,
            "index": self.index.to_dict(),
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class ScopeAccess:
    kind: ClassVar[str] = "scope_access"

    scope: str
    name: str
    line: int = _position()
    col: int = _position()

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "scope": self.scope,
            "name": self.name,
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class UnaryExpr:
    kind: ClassVar[str] = "unary"

    op: str
    operand: GnExpr
    line: int = _position()
    col: int = _position()

    def __post_init__(self) -> None:
        if self.op not in UNARY_OPS:
            raise ValueError(f"Unknown unary operator: {self.op!r}")

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "op": self.op,
            "operand": self.operand.to_dict(),
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class BinaryExpr:
    kind: ClassVar[str] = "binary"

    left: GnExpr
    op: str
    right: GnExpr
    line: int = _position()
    col: int = _position()

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPS:
            raise ValueError(f"Unknown binary operator: {self.op!r}")

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "left": self.left.to_dict(),
            "op": self.op,
            "right": self.right.to_dict(),
            "line": self.line,
            "col": self.col,
        }


@dataclass(frozen=True)
class Assignment:
    """`lvalue op rvalue` statement.

    Raises:
        TypeError: If `lvalue` is not an Identifier, ArrayAccess or ScopeAccess.
        ValueError: If `op` is not one of `=`, `+=`, `-=`.
    """

    kind: ClassVar[str] = "assignment"

    lvalue: LValue
    op: str
    rvalue: GnExpr
    line: int = _position()
    col: int = _position()

    def __post_init__(self) -> None:
        if not isinstance(self.lvalue, (Identifier, ArrayAccess, ScopeAccess)):
            raise TypeError(
                f"Invalid assignment target: {type(self.lvalue).__name__}"
            )
        if self.op not in ASSIGN_OPS:
            raise ValueError(f"Unknown assignment operator: {self.op!r}")

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "lvalue": self.lvalue.to_dict(),
            "op": self.op,
            "rvalue": self.rvalue.to_dict(),
            "line": self.line,
            "col": self.col,
        }


LValue = Union[Identifier, ArrayAccess, ScopeAccess]

GnExpr = Union[
    Identifier,
    StringLiteral,
    IntegerLiteral,
    Call,
    ArrayAccess,
    ScopeAccess,
    UnaryExpr,
    BinaryExpr,
    ExpressionList,
    Assignment,
]

NODE_TYPES: tuple[type, ...] = (
    Identifier,
    StringLiteral,
    IntegerLiteral,
    Call,
    ArrayAccess,
    ScopeAccess,
    UnaryExpr,
    BinaryExpr,
    ExpressionList,
    Assignment,
)


def is_node(value: Any) -> bool:
    return isinstance(value, NODE_TYPES)


def children(node: GnExpr) -> tuple[GnExpr, ...]:
    """Returns the direct child nodes of `node` in source order."""
    if isinstance(node, ExpressionList):
        return node.elements
    if isinstance(node, Call):
        return (node.args,) if node.body is None else (node.args, node.body)
    if isinstance(node, ArrayAccess):
        return (node.index,)
    if isinstance(node, UnaryExpr):
        return (node.operand,)
    if isinstance(node, BinaryExpr):
        return (node.left, node.right)
    if isinstance(node, Assignment):
        return (node.lvalue, node.rvalue)
    if isinstance(node, (Identifier, StringLiteral, IntegerLiteral, ScopeAccess)):
        return ()
    raise TypeError(f"Not a GN AST node: {node!r}")


def walk(node: GnExpr) -> Iterator[GnExpr]:
    """Yields `node` and all of its descendants depth-first, in source order."""
    stack: list[GnExpr] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


__all__ = [
    "ASTDict",
    "ArrayAccess",
    "Assignment",
    "BinaryExpr",
    "Call",
    "ExpressionList",
    "GnExpr",
    "Identifier",
    "IntegerLiteral",
    "LValue",
    "NODE_TYPES",
    "ScopeAccess",
    "StringLiteral",
    "UnaryExpr",
    "children",
    "is_node",
    "walk",
]
