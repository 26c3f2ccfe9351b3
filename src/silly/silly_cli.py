"""
SILLY CLI Entrypoint.

This module provides the command-line interface for the SILLY front end.

Features:
    - Read source from `.silly` files or inline strings.
    - Lex and parse every top-level form, with error recovery between forms.
    - Print the parsed forms as reprs or as JSON.
    - Override operator precedences from a JSON file (`--precedence`, or the
      `SILLY_PRECEDENCE` environment variable).
    - Launch the interactive `ready>` loop.

Example usage:
    silly program.silly
    silly -s "def add(a b) a + b" --json
    silly program.silly --precedence ops.json
    silly --repl --verbose
    silly --operators --precedence ops.json

Functions:
    run_silly(source: str, is_string: bool = False, precedence_path: str | None = None,
              as_json: bool = False) -> int:
        Parses the program and prints the results, returning an exit status.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import sys

from silly.silly_driver import Driver, render_json, start_repl
from silly.silly_parser import Parser
from silly.silly_precedence import PrecedenceError, PrecedenceTable


def load_precedence(precedence_path: str | None = None) -> PrecedenceTable:
    """
    Builds the operator table: defaults, then `SILLY_PRECEDENCE`, then `precedence_path`.

    Raises:
        PrecedenceError: If any configuration file is unreadable or invalid.
    """
    table = PrecedenceTable.from_env()
    if precedence_path:
        table.load_from_json(precedence_path)
    return table


def run_silly(
    source: str,
    is_string: bool = False,
    precedence_path: str | None = None,
    as_json: bool = False,
) -> int:
    """
    Run the SILLY front end over a program and print every parsed form.

    Args:
        source (str): The SILLY source code or path to a `.silly` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        precedence_path (str | None): Optional JSON file of operator precedences.
        as_json (bool): If True, prints each form as a JSON object per line.

    Returns:
        int: 0 if every form parsed, 1 if any form failed, 2 for a bad
        precedence configuration.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.silly'.
    """
    if not is_string and not source.endswith(".silly"):
        raise ValueError("Only .silly files are supported.")

    try:
        precedence = load_precedence(precedence_path)
    except PrecedenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        for conflict in e.conflicts:
            print(f" - {conflict}", file=sys.stderr)
        return 2

    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    driver = Driver(
        Parser.from_source(source, precedence),
        echo=sys.stdout,
        render=render_json if as_json else repr,
    )
    driver.run()

    return 1 if driver.errors else 0


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the SILLY CLI.

    Launches the interactive loop if no source is given or `--repl` is
    specified; otherwise parses the given program.
    """
    parser = argparse.ArgumentParser(prog="silly")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--precedence",
        metavar="JSON",
        help="JSON file mapping operator characters to precedences",
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print parsed forms as JSON"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch the interactive read loop"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print each parsed form (REPL only)"
    )
    parser.add_argument(
        "--operators",
        action="store_true",
        help="Print the active operator precedence table and exit",
    )

    args = parser.parse_args(argv)
    interactive = args.repl or (args.source is None and not args.operators)

    if args.verbose and not interactive:
        parser.error("--verbose only applies to the interactive loop (--repl)")

    if args.operators or interactive:
        try:
            precedence = load_precedence(args.precedence)
        except PrecedenceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        if args.operators:
            print(precedence.report())
            return 0
        start_repl(precedence=precedence, verbose=args.verbose, as_json=args.as_json)
        return 0

    return run_silly(
        source=args.source,
        is_string=args.string,
        precedence_path=args.precedence,
        as_json=args.as_json,
    )


if __name__ == "__main__":
    sys.exit(main())
