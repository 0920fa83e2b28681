"""
Translates GN AST nodes back into canonical GN source text.

This module defines the `GnEmitter` class, the pretty-printer used by the
`Formatter` for the `gn` target. Its output is stable and re-parses to an AST
equal to the one it was produced from.

Layout:
    - Two-space indentation inside call bodies and non-empty lists.
    - One list element per line, each followed by a comma.
    - Binary expressions are written flat; a binary right operand, or a binary
      operand of `!`, is parenthesized so the left-to-right fold survives a re-parse.

Raises:
    - `NotImplementedError`: If a node kind has no corresponding emit method.
"""

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


class GnEmitter:
    """Emits GN source from AST nodes.

    Attributes:
        lines (list[str]): Accumulated top-level statements.
        indent (int): Current indentation level.
    """

    INDENT = "  "

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent = 0

    def indent_str(self) -> str:
        return self.INDENT * self.indent

    def get_output(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    # Statements

    def emit_assignment(self, node: Assignment) -> None:
        self.lines.append(self.indent_str() + self.emit_expr(node))

    def emit_call(self, node: Call) -> None:
        self.lines.append(self.indent_str() + self.emit_expr(node))

    # Expressions

    def emit_expr(self, node: GnExpr) -> str:
        method = getattr(self, f"emit_expr_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No GN emitter for node kind '{node.kind}'")
        return str(method(node))

    def emit_expr_identifier(self, node: Identifier) -> str:
        return node.name

    def emit_expr_string(self, node: StringLiteral) -> str:
        return f'"{node.value}"'

    def emit_expr_integer(self, node: IntegerLiteral) -> str:
        return str(node.value)

    def emit_expr_scope_access(self, node: ScopeAccess) -> str:
        return f"{node.scope}.{node.name}"

    def emit_expr_array_access(self, node: ArrayAccess) -> str:
        return f"{node.identifier}[{self.emit_expr(node.index)}]"

    def emit_expr_unary(self, node: UnaryExpr) -> str:
        operand = self.emit_expr(node.operand)
        if isinstance(node.operand, BinaryExpr):
            operand = f"({operand})"
        return f"{node.op}{operand}"

    def emit_expr_binary(self, node: BinaryExpr) -> str:
        left = self.emit_expr(node.left)
        right = self.emit_expr(node.right)
        if isinstance(node.right, BinaryExpr):
            right = f"({right})"
        return f"{left} {node.op} {right}"

    def emit_expr_list(self, node: ExpressionList) -> str:
        if not node.elements:
            return "[]"
        self.indent += 1
        try:
            items = [f"{self.indent_str()}{self.emit_expr(e)}," for e in node]
        finally:
            self.indent -= 1
        return "[\n" + "\n".join(items) + "\n" + self.indent_str() + "]"

    def emit_expr_call(self, node: Call) -> str:
        args = ", ".join(self.emit_expr(a) for a in node.args)
        text = f"{node.name}({args})"
        if node.body is not None:
            text += " " + self.emit_block(node.body)
        return text

    def emit_expr_assignment(self, node: Assignment) -> str:
        return f"{self.emit_expr(node.lvalue)} {node.op} {self.emit_expr(node.rvalue)}"

    def emit_block(self, body: ExpressionList) -> str:
        self.indent += 1
        try:
            statements = [self.indent_str() + self.emit_expr(s) for s in body]
        finally:
            self.indent -= 1
        inner = "".join(s + "\n" for s in statements)
        return "{\n" + inner + self.indent_str() + "}"
