"""
SOIT CLI Entrypoint.

This module provides the command-line interface for the SOIT parser. Lexing is
done elsewhere: the input is the JSON token stream an external lexer produced,
the output is the syntax tree as JSON.

Features:
    - Read tokens from a `.json` file or from stdin.
    - Parse them into a `Program` tree.
    - Print the tree as JSON, or a one-line-per-statement summary.
    - Report syntax errors on stderr with a non-zero exit status.

Example usage:
    soit programme.tokens.json
    soit programme.tokens.json -o programme.ast.json --indent 2
    cat programme.tokens.json | soit --summary

Functions:
    run_soit(source: str | None, out: str | None = None, indent: int | None = None,
             summary: bool = False) -> None:
        Executes the pipeline (load tokens -> parse -> output).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments, runs the pipeline, and returns the exit status.
"""

import argparse
import json
import sys

from soit.soit_ast import Program
from soit.soit_parser import Parser, recursion_headroom
from soit.soit_tokens import load_tokens


def read_source(source: str | None) -> str:
    """Return the token JSON from `source`, or from stdin when it is None or '-'."""
    if source is None or source == "-":
        return sys.stdin.read()
    if not source.endswith(".json"):
        raise ValueError("Only .json token files are supported.")
    with open(source, encoding="utf-8") as f:
        return f.read()


def format_summary(program: Program) -> str:
    return "\n".join(
        f"{stmt.line}:{stmt.column} {stmt.kind}" for stmt in program.body
    )


def run_soit(
    source: str | None,
    out: str | None = None,
    indent: int | None = None,
    summary: bool = False,
) -> None:
    """
    Run the SOIT toolchain: load tokens, parse, and print or write the result.

    Args:
        source (str | None): Path to a `.json` token file, or None / '-' for stdin.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        indent (int | None): JSON indentation; None gives compact output.
        summary (bool): If True, emit `<line>:<column> <kind>` per top-level statement.

    Raises:
        ValueError: If the input is not a valid token stream.
        SyntaxError: If the tokens do not form a valid program, including
            nesting too deep to parse.
    """
    # 1. Load tokens
    tokens = load_tokens(read_source(source))

    # 2. Parsing
    program = Parser(tokens).parse()

    # 3. Output result
    if summary:
        text = format_summary(program)
    else:
        with recursion_headroom():
            text = json.dumps(program.to_dict(), indent=indent, ensure_ascii=False)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the SOIT CLI.

    Supported flags:
        - `source`: Token file (`.json`); stdin when omitted or '-'.
        - `-o`, `--out`: Write the output to a file.
        - `--indent`: Indent the JSON output by N spaces.
        - `--summary`: Print one line per top-level statement instead of JSON.
    """
    parser = argparse.ArgumentParser(
        prog="soit", description="Parse a SOIT token stream into a syntax tree"
    )
    parser.add_argument(
        "source", nargs="?", help="JSON token file (default: read stdin)"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--indent", type=int, default=None, metavar="N", help="Indent JSON output"
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print '<line>:<column> <kind>' per top-level statement",
    )

    args = parser.parse_args(argv)

    try:
        run_soit(
            source=args.source,
            out=args.out,
            indent=args.indent,
            summary=args.summary,
        )
    except (SyntaxError, ValueError, OSError) as e:
        print(f"[erreur] {e}", file=sys.stderr)
        return 1
    except RecursionError:
        print("[erreur] imbrication trop profonde", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
