"""
gnparse CLI Entrypoint.

Command-line interface for parsing GN build files.

Features:
    - Read source from `.gn`/`.gni` files or inline strings.
    - Lex and parse into an AST, then print it as canonical GN or JSON.
    - List the FIDL targets declared in a file, with the crate names of their deps.
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    gnparse BUILD.gn
    gnparse -s 'fidl("x") { sources = ["x.fidl"] }' -f json
    gnparse BUILD.gn --targets
    gnparse --repl --verbose

Functions:
    run_gnparse(source, is_string=False, fmt="gn", out=None, targets=False, max_depth=...) -> None:
        Runs the parse pipeline and writes the result.
    main(argv=None) -> int:
        Parses CLI arguments, dispatches, and returns the process exit code.
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from gnparse.gn_constants import DEFAULT_MAX_DEPTH
from gnparse.gn_errors import GnParseError
from gnparse.gn_format import FORMATS, Formatter
from gnparse.gn_parser import max_supported_depth, parse_source
from gnparse.gn_targets import FidlTarget, crate_name_from_path, extract_fidl_targets

logger = logging.getLogger("gnparse.cli")

SOURCE_SUFFIXES = (".gn", ".gni")


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging with a Rich handler on stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def format_targets(targets: list[FidlTarget]) -> str:
    lines: list[str] = []
    for target in targets:
        lines.append(target.name)
        lines.append("  sources:")
        lines.extend(f"    {src}" for src in target.sources)
        lines.append("  public_deps:")
        lines.extend(
            f"    {dep} ({crate_name_from_path(dep)})" for dep in target.public_deps
        )
    return "".join(line + "\n" for line in lines)


def run_gnparse(
    source: str,
    is_string: bool = False,
    fmt: str = "gn",
    out: str | None = None,
    targets: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> None:
    """
    Run the gnparse pipeline: read, parse, format, and print or write the result.

    Args:
        source (str): GN source text, or a path to a `.gn`/`.gni` file.
        is_string (bool): If True, treats `source` as raw GN text instead of a path.
        fmt (str): Output format for the AST ('gn' or 'json').
        out (str | None): Optional path to write the output to instead of stdout.
        targets (bool): Print the declared FIDL targets instead of the AST.
        max_depth (int): Nesting limit passed to the parser.

    Raises:
        ValueError: If `is_string` is False and the path is not a GN file.
        GnParseError: If the source does not parse.
    """
    if not is_string:
        if not source.endswith(SOURCE_SUFFIXES):
            raise ValueError("Only .gn and .gni files are supported.")
        logger.debug("Reading %s", source)
        source = Path(source).read_text(encoding="utf-8")

    ast = parse_source(source, max_depth=max_depth)

    if targets:
        text = format_targets(extract_fidl_targets(ast))
    else:
        text = Formatter(fmt).format(ast)

    if out:
        Path(out).write_text(text, encoding="utf-8")
        logger.debug("Wrote %d characters to %s", len(text), out)
    else:
        print(text, end="")


def depth_arg(value: str) -> int:
    """argparse type for `--max-depth`: an integer the parser can honor."""
    try:
        depth = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    limit = max_supported_depth()
    if not 1 <= depth <= limit:
        raise argparse.ArgumentTypeError(f"must be between 1 and {limit}, got {depth}")
    return depth


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gnparse")
    parser.add_argument("source", nargs="?", help="GN file, or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="gn",
        help="Output format (default: gn)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--targets",
        action="store_true",
        help="List FIDL targets and their dependencies instead of printing the AST",
    )
    parser.add_argument(
        "--max-depth",
        type=depth_arg,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum nesting depth (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch the interactive REPL"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the gnparse CLI.

    Launches the REPL if no arguments are passed or `--repl` is specified,
    otherwise parses the given source.

    Returns:
        int: 0 on success, 1 if the source could not be read or parsed.
    """
    args = build_arg_parser().parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.verbose)

    if args.repl or args.source is None:
        from gnparse.gn_repl import start_repl

        start_repl(target=args.fmt, verbose=args.verbose, max_depth=args.max_depth)
        return 0

    try:
        run_gnparse(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            targets=args.targets,
            max_depth=args.max_depth,
        )
    except (GnParseError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
