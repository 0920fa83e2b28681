"""
Extracts FIDL target information from parsed GN files.

A FIDL BUILD.gn file declares targets such as

    fidl("input") {
      sources = [ "ime_service.fidl", ]
      public_deps = [ "//apps/mozart/services/geometry", ]
    }

`extract_fidl_targets` walks the AST for these calls and collects their
`sources` and `public_deps` lists; `crate_name_from_path` turns a GN path or
label into the crate name generated bindings are published under.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from gnparse.gn_ast import (
    Assignment,
    Call,
    ExpressionList,
    GnExpr,
    Identifier,
    StringLiteral,
    walk,
)

logger = logging.getLogger(__name__)

LIST_FIELDS = ("sources", "public_deps")


@dataclass(frozen=True)
class FidlTarget:
    name: str
    sources: tuple[str, ...] = ()
    public_deps: tuple[str, ...] = ()

    def dependency_crates(self) -> list[str]:
        return [crate_name_from_path(dep) for dep in self.public_deps]


def find_calls(ast: GnExpr, name: str) -> Iterator[Call]:
    """Yields every call to `name` in `ast`, including calls nested in bodies."""
    for node in walk(ast):
        if isinstance(node, Call) and node.name == name:
            yield node


def string_list(expr: GnExpr) -> list[str]:
    """Returns the values of a bracketed list of string literals.

    Raises:
        ValueError: If `expr` is not a list or holds anything but string literals.
    """
    if not isinstance(expr, ExpressionList):
        raise ValueError(f"Expected a list of strings, got {expr.kind}")
    values = []
    for element in expr:
        if not isinstance(element, StringLiteral):
            raise ValueError(
                f"Expected a string literal at line {element.line}, got {element.kind}"
            )
        values.append(element.value)
    return values


def _apply(current: list[str], op: str, values: list[str]) -> list[str]:
    if op == "=":
        return list(values)
    if op == "+=":
        return current + values
    return [v for v in current if v not in values]


def target_from_call(call: Call) -> FidlTarget:
    """Builds a FidlTarget from a `fidl("name") { ... }` call.

    Raises:
        ValueError: If the call does not take a single string name, or a list
            field is assigned something other than a list of strings.
    """
    if len(call.args) != 1 or not isinstance(call.args[0], StringLiteral):
        raise ValueError(
            f"{call.name}() at line {call.line} must take a single string name"
        )
    fields: dict[str, list[str]] = {f: [] for f in LIST_FIELDS}
    for statement in call.body or ():
        if not isinstance(statement, Assignment):
            continue
        lvalue = statement.lvalue
        if isinstance(lvalue, Identifier) and lvalue.name in fields:
            values = string_list(statement.rvalue)
            fields[lvalue.name] = _apply(fields[lvalue.name], statement.op, values)
    return FidlTarget(
        call.args[0].value,
        sources=tuple(fields["sources"]),
        public_deps=tuple(fields["public_deps"]),
    )


def extract_fidl_targets(ast: GnExpr, template: str = "fidl") -> list[FidlTarget]:
    targets = [target_from_call(call) for call in find_calls(ast, template)]
    logger.debug("Found %d %s targets", len(targets), template)
    return targets


def crate_name_from_path(path: str) -> str:
    """
    Derives a crate name from a source-root-relative GN path or label.

    A leading `//` is stripped, a `:target` suffix becomes a final path part,
    and a final part that repeats its parent directory is dropped:

        garnet/public/lib/app/fidl/fidl   -> garnet_public_lib_app_fidl
        //apps/mozart/services/views:view_token -> apps_mozart_services_views_view_token
        //foo/bar:bar                     -> foo_bar

    Raises:
        ValueError: For absolute filesystem paths and empty paths.
    """
    if path.startswith("//"):
        path = path[2:]
    elif path.startswith("/"):
        raise ValueError(f"Illegal FIDL path {path}")
    directory, _, target = path.partition(":")
    parts = [p for p in directory.split("/") if p]
    if target:
        parts.append(target)
    if not parts:
        raise ValueError("Empty FIDL path")
    if len(parts) > 2 and parts[-2] == parts[-1]:
        parts.pop()
    return "_".join(parts)


__all__ = [
    "FidlTarget",
    "crate_name_from_path",
    "extract_fidl_targets",
    "find_calls",
    "string_list",
    "target_from_call",
]
