"""
Provides the `Formatter` class and emitter interface for rendering GN ASTs.

Classes and Features:
    - Emitter (Protocol): Interface for all output emitters. Requires `__init__` and `get_output`.
    - GnEmitter: Pretty-prints the AST as canonical GN source.
    - JsonEmitter: Dumps the AST as JSON.
    - Formatter: Selects an emitter by target name and dispatches each top-level
      statement to the emitter's `emit_<kind>` method.

Example:
    >>> formatter = Formatter("gn")
    >>> text = formatter.format(parse_source("a=1"))

Raises:
    ValueError: If the target is not supported.
    TypeError: If the AST contains objects that are not GN AST nodes.
    NotImplementedError: If the emitter lacks an `emit_*` method for a node kind.
"""

from collections.abc import Iterable
from typing import Protocol

from gnparse.emitters.gn_emitter import GnEmitter
from gnparse.emitters.json_emitter import JsonEmitter
from gnparse.gn_ast import GnExpr, is_node


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all GN AST emitters.

    Methods:
        __init__(): Initializes the emitter.
        get_output(): Returns the complete emitted text.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

FORMATS: tuple[str, ...] = ("gn", "json")


class Formatter:
    """Dispatches GN AST statements to the emitter for an output format.

    Attributes:
        emitter (Emitter): The selected emitter instance.
    """

    def __init__(self, target: str) -> None:
        """
        Args:
            target: The output format ("gn" or "json", case-insensitive).

        Raises:
            ValueError: If the target is not supported.
        """
        emitters: dict[str, EmitterType] = {
            "gn": GnEmitter,
            "json": JsonEmitter,
        }
        target = target.lower()
        if target not in emitters:
            raise ValueError(f"Unknown output format: {target!r}")
        self.emitter: Emitter = emitters[target]()

    def format(self, ast: Iterable[GnExpr]) -> str:
        """Renders a statement list (an `ExpressionList` or any iterable of statements).

        Raises:
            TypeError: If any element is not a GN AST node.
        """
        statements = list(ast)
        if not all(is_node(node) for node in statements):
            raise TypeError("All items in AST must be GN AST nodes.")
        for node in statements:
            self._visit(node)
        return self.emitter.get_output()

    def _visit(self, node: GnExpr) -> None:
        method_name = f"emit_{node.kind}"
        if hasattr(self.emitter, method_name):
            getattr(self.emitter, method_name)(node)
        else:
            raise NotImplementedError(
                f"No emitter method for node kind '{node.kind}' "
                f"(line {node.line}, col {node.col})"
            )


__all__ = ["Emitter", "FORMATS", "Formatter"]
