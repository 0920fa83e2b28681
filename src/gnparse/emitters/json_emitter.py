"""
Renders GN AST statements as indented JSON, for the CLI `json` format and debugging.
"""

import json

from gnparse.gn_ast import Assignment, ASTDict, Call


class JsonEmitter:
    """Collects `to_dict()` output of each statement and dumps it as a JSON array."""

    def __init__(self, indent: int = 2) -> None:
        self.statements: list[ASTDict] = []
        self.indent = indent

    def emit_assignment(self, node: Assignment) -> None:
        self.statements.append(node.to_dict())

    def emit_call(self, node: Call) -> None:
        self.statements.append(node.to_dict())

    def get_output(self) -> str:
        return json.dumps(self.statements, indent=self.indent) + "\n"
