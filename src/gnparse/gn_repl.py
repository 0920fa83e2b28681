"""
Interactive shell that parses GN statements as they are typed.

Input is buffered across lines for as long as the parser reports `Incomplete`
(an open string, list, call or block), so a target definition can be typed
over several lines. Each complete buffer is printed back through the selected
`Formatter` target.

A line ending in `)` parses as a finished call, but GN often puts the opening
`{` of its body on the next line. Such a buffer is held until the next line:
a line starting with `{` continues it, anything else prints it first.
"""

from gnparse.gn_ast import ExpressionList
from gnparse.gn_constants import DEFAULT_MAX_DEPTH
from gnparse.gn_errors import GnParseError, Incomplete
from gnparse.gn_format import Formatter
from gnparse.gn_parser import parse_source

PROMPT = "gn> "
CONTINUATION_PROMPT = "... "


def show(ast: ExpressionList, target: str, verbose: bool) -> None:
    if verbose:
        print(f"[ast] >>> {ast!r}")
    print(Formatter(target).format(ast), end="")


def start_repl(
    target: str = "gn", verbose: bool = False, max_depth: int = DEFAULT_MAX_DEPTH
) -> None:
    print("GN parser REPL. Type 'quit' or 'exit' to leave.")
    buffer: list[str] = []
    held: ExpressionList | None = None
    while True:
        try:
            line = input(CONTINUATION_PROMPT if buffer else PROMPT)
            command = line.strip()
            if held is not None:
                if not command.startswith("{"):
                    buffer.clear()
                    show(held, target, verbose)
                held = None

            if not buffer:
                if command in ("quit", "exit"):
                    print("Exiting GN REPL.")
                    break
                if not command:
                    continue

            buffer.append(line)
            source = "\n".join(buffer)
            try:
                ast = parse_source(source, max_depth=max_depth)
            except Incomplete:
                continue
            except GnParseError as e:
                buffer.clear()
                print("[error] >>>")
                print(e)
                continue

            if command.endswith(")"):
                held = ast
                continue
            buffer.clear()
            show(ast, target, verbose)

        except (KeyboardInterrupt, EOFError):
            if held is not None:
                show(held, target, verbose)
            print("\nExiting GN REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
