"""
Top-level driver for the SILLY front end.

The driver owns the outer grammar loop:

    top ::= definition | external | expression | ';'

It dispatches on the parser's current token, acknowledges each parsed form on
the diagnostics stream, and recovers from a failed form by discarding exactly
one token before dispatching again.

Functions:
    parse_source(source, precedence=None, diagnostics=None) -> list[TopLevelNode]:
        Parse a whole program and return every form that parsed successfully.

    start_repl(precedence=None, verbose=False, as_json=False) -> None:
        Interactive `ready>` loop over standard input.
"""

import io
import json
import sys
from typing import Callable, TextIO

from silly.silly_ast import TopLevelNode
from silly.silly_constants import TOK_DEF, TOK_EOF, TOK_EXTERN
from silly.silly_parser import Parser
from silly.silly_precedence import PrecedenceTable


class Driver:
    """Runs the top-level dispatch loop over one parser session.

    Attributes:
        parser (Parser): The parser whose current token drives dispatch.
        diagnostics (TextIO | None): Stream for prompts and acknowledgements;
            None means `sys.stderr` at write time.
        prompt (str): Written before each dispatch (empty for batch input).
        echo (TextIO | None): If set, each parsed form is printed here.
        render (Callable[[TopLevelNode], str]): Formats a form for `echo`.
        errors (int): Number of top-level forms that failed to parse.
    """

    def __init__(
        self,
        parser: Parser,
        diagnostics: TextIO | None = None,
        prompt: str = "",
        echo: TextIO | None = None,
        render: Callable[[TopLevelNode], str] = repr,
    ) -> None:
        self.parser = parser
        self.diagnostics = diagnostics
        self.prompt = prompt
        self.echo = echo
        self.render = render
        self.errors = 0

    def _write(self, text: str, end: str = "\n") -> None:
        print(text, end=end, file=self.diagnostics or sys.stderr, flush=True)

    def _recover(self) -> None:
        self.errors += 1
        self.parser.advance()  # skip token for error recovery

    def handle_definition(self) -> TopLevelNode | None:
        node = self.parser.parse_definition()
        if node is None:
            self._recover()
        else:
            self._write("Parsed a function definition.")
        return node

    def handle_extern(self) -> TopLevelNode | None:
        node = self.parser.parse_extern()
        if node is None:
            self._recover()
        else:
            self._write("Parsed an extern")
        return node

    def handle_top_level_expression(self) -> TopLevelNode | None:
        node = self.parser.parse_top_level_expr()
        if node is None:
            self._recover()
        else:
            self._write("Parsed a top-level expr")
        return node

    def step(self) -> tuple[bool, TopLevelNode | None]:
        """
        Dispatches one top-level form.

        Returns:
            tuple[bool, TopLevelNode | None]: Whether input remains, and the
            parsed form (None for a skipped `;` or a failed form).
        """
        if self.prompt:
            self._write(self.prompt, end="")
        tok = self.parser.current
        if tok.type == TOK_EOF:
            return False, None
        if tok.is_char(";"):  # ignore top-level semicolons
            self.parser.advance()
            return True, None
        if tok.type == TOK_DEF:
            return True, self.handle_definition()
        if tok.type == TOK_EXTERN:
            return True, self.handle_extern()
        return True, self.handle_top_level_expression()

    def run(self) -> list[TopLevelNode]:
        """Dispatches until end of input. The parser must already be primed.

        Returns:
            list[TopLevelNode]: Successfully parsed forms, in input order.
        """
        parsed: list[TopLevelNode] = []
        more = True
        while more:
            more, node = self.step()
            if node is not None:
                parsed.append(node)
                if self.echo is not None:
                    print(self.render(node), file=self.echo)
        return parsed


def parse_source(
    source: str | TextIO,
    precedence: PrecedenceTable | None = None,
    diagnostics: TextIO | None = None,
) -> list[TopLevelNode]:
    """
    Parse a complete SILLY program.

    Args:
        source (str | TextIO): Program text or a readable text stream.
        precedence (PrecedenceTable | None): Operator table; defaults to the built-in one.
        diagnostics (TextIO | None): Where acknowledgements and `Error:` lines
            go. Defaults to a discarded buffer, so batch parsing is silent.

    Returns:
        list[TopLevelNode]: Every form that parsed successfully.
    """
    sink = diagnostics if diagnostics is not None else io.StringIO()
    parser = Parser.from_source(source, precedence, sink)
    return Driver(parser, sink).run()


def render_json(node: TopLevelNode) -> str:
    """Formats a parsed form as one line of JSON."""
    return json.dumps(node.to_dict())


def start_repl(
    precedence: PrecedenceTable | None = None, verbose: bool = False, as_json: bool = False
) -> None:
    """
    Interactive read loop: prompts with `ready> ` on stderr and parses
    standard input as it is typed, until end of input or Ctrl-C.

    Args:
        precedence (PrecedenceTable | None): Operator table; defaults to the built-in one.
        verbose (bool): Also print each parsed form to stdout.
        as_json (bool): Print each parsed form to stdout as JSON (implies `verbose`).
    """
    prompt = "ready> "
    print(prompt, end="", file=sys.stderr, flush=True)
    try:
        parser = Parser.from_source(sys.stdin, precedence)
        Driver(
            parser,
            prompt=prompt,
            echo=sys.stdout if verbose or as_json else None,
            render=render_json if as_json else repr,
        ).run()
    except KeyboardInterrupt:
        pass
    print("", file=sys.stderr)


__all__ = ["Driver", "parse_source", "render_json", "start_repl"]
