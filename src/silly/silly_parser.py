"""
SILLY Language Parser

Turns the token stream of a `Lexer` into SILLY syntax trees, one top-level form
at a time.

The parser is pull-based: it holds exactly one token of lookahead (`current`)
and asks the lexer for the next token only when a grammar decision needs it.
Expressions are parsed by recursive descent, with binary operators resolved by
precedence climbing against a `PrecedenceTable`.

Grammar
-------
    top        ::= definition | external | expression | ';'
    definition ::= 'def' prototype expression
    external   ::= 'extern' prototype
    prototype  ::= identifier '(' identifier* ')'
    expression ::= primary binoprhs
    binoprhs   ::= (binop primary)*
    primary    ::= identifierexpr | numberexpr | parenexpr
    identifierexpr ::= identifier | identifier '(' (expression (',' expression)*)? ')'
    numberexpr ::= number
    parenexpr  ::= '(' expression ')'

Error Policy
------------
Productions raise `ParseError` at the first violation. The top-level entry
points (`parse_definition`, `parse_extern`, `parse_top_level_expr`) catch it,
write `Error: <description>` to the diagnostics stream, and return None, so no
partially built tree escapes. Skipping past the bad input is left to the
caller (see `silly_driver.Driver`).
"""

from __future__ import annotations

import sys
from typing import TextIO

from silly.silly_ast import (
    BinaryOp,
    Call,
    ExprNode,
    Function,
    NumberLiteral,
    Prototype,
    VariableRef,
)
from silly.silly_constants import (
    ANON_FN_NAME,
    TOK_EOF,
    TOK_IDENTIFIER,
    TOK_NUMBER,
)
from silly.silly_lexer import CharacterStream, Lexer, Token
from silly.silly_precedence import PrecedenceTable


class ParseError(SyntaxError):
    """A syntax error in one top-level form.

    Attributes:
        line (int): Line of the offending token.
        col (int): Column of the offending token.
    """

    def __init__(self, message: str, token: Token | None = None):
        super().__init__(message)
        self.line = token.line if token else 0
        self.col = token.col if token else 0


class Parser:
    """
    SILLY Parser Class

    Attributes
    ----------
    lexer : Lexer
        Token source; its state is part of the parsing session.
    precedence : PrecedenceTable
        Binary operator precedences consulted while climbing.
    diagnostics : TextIO
        Where `Error: ...` lines are written.
    current : Token
        The token the parser is looking at.
    last_error : ParseError | None
        The most recent error reported by a top-level entry point.
    """

    def __init__(
        self,
        lexer: Lexer,
        precedence: PrecedenceTable | None = None,
        diagnostics: TextIO | None = None,
    ) -> None:
        self.lexer = lexer
        self.precedence = precedence if precedence is not None else PrecedenceTable.default()
        self.diagnostics = diagnostics
        self.current: Token = Token(TOK_EOF, "")
        self.last_error: ParseError | None = None

    @classmethod
    def from_source(
        cls,
        source: str | TextIO,
        precedence: PrecedenceTable | None = None,
        diagnostics: TextIO | None = None,
    ) -> Parser:
        """Builds a parser over `source` with the first token already primed."""
        parser = cls(Lexer(CharacterStream(source)), precedence, diagnostics)
        parser.advance()
        return parser

    def reset(self, stream: CharacterStream) -> None:
        """Starts a new, independent session over `stream`. The first token is not primed."""
        self.lexer.reset(stream)
        self.current = Token(TOK_EOF, "")
        self.last_error = None

    def advance(self) -> Token:
        """Reads another token from the lexer into `current` and returns it."""
        self.current = self.lexer.next_token()
        return self.current

    def error(self, message: str) -> None:
        """Writes one diagnostic line for `message`."""
        print(f"Error: {message}", file=self.diagnostics or sys.stderr)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_number_expr(self) -> NumberLiteral:
        """numberexpr ::= number"""
        result = NumberLiteral(self.lexer.number)
        self.advance()  # consume the number
        return result

    def parse_paren_expr(self) -> ExprNode:
        """parenexpr ::= '(' expression ')'"""
        self.advance()  # eat (
        expr = self.parse_expression()
        if not self.current.is_char(")"):
            raise ParseError("expected ')'", self.current)
        self.advance()  # eat )
        return expr

    def parse_identifier_expr(self) -> ExprNode:
        """
        identifierexpr
            ::= identifier
            ::= identifier '(' expression* ')'
        """
        name = self.lexer.identifier
        self.advance()  # eat identifier

        if not self.current.is_char("("):
            return VariableRef(name)

        self.advance()  # eat (
        args: list[ExprNode] = []
        if not self.current.is_char(")"):
            while True:
                args.append(self.parse_expression())
                if self.current.is_char(")"):
                    break
                if not self.current.is_char(","):
                    raise ParseError("Expected ')' or ',' in argument list", self.current)
                self.advance()

        self.advance()  # eat )
        return Call(name, args)

    def parse_primary(self) -> ExprNode:
        """
        primary
            ::= identifierexpr
            ::= numberexpr
            ::= parenexpr
        """
        if self.current.type == TOK_IDENTIFIER:
            return self.parse_identifier_expr()
        if self.current.type == TOK_NUMBER:
            return self.parse_number_expr()
        if self.current.is_char("("):
            return self.parse_paren_expr()
        raise ParseError("unknown token when expecting an expression", self.current)

    def parse_binop_rhs(self, min_precedence: int, lhs: ExprNode) -> ExprNode:
        """
        binoprhs ::= (binop primary)*

        Folds operators binding at least as tightly as `min_precedence` onto
        `lhs`. An operator followed by a tighter one first hands its right
        operand to a recursive call, so higher-precedence suffixes group to
        the right while equal precedences associate to the left.
        """
        while True:
            tok_prec = self.precedence.precedence_of(self.current)
            if tok_prec < min_precedence:
                return lhs

            op = self.current.value
            self.advance()  # eat binop

            rhs = self.parse_primary()

            next_prec = self.precedence.precedence_of(self.current)
            if tok_prec < next_prec:
                rhs = self.parse_binop_rhs(tok_prec + 1, rhs)

            lhs = BinaryOp(str(op), lhs, rhs)

    def parse_expression(self) -> ExprNode:
        """expression ::= primary binoprhs"""
        lhs = self.parse_primary()
        return self.parse_binop_rhs(0, lhs)

    # ------------------------------------------------------------------
    # Top-level forms
    # ------------------------------------------------------------------

    def parse_prototype(self) -> Prototype:
        """prototype ::= id '(' id* ')'"""
        if self.current.type != TOK_IDENTIFIER:
            raise ParseError("Expected function name in prototype", self.current)
        name = self.lexer.identifier
        self.advance()

        if not self.current.is_char("("):
            raise ParseError("Expected '(' in prototype", self.current)

        params: list[str] = []
        while self.advance().type == TOK_IDENTIFIER:
            params.append(self.lexer.identifier)

        if not self.current.is_char(")"):
            raise ParseError("Expected ')' in prototype", self.current)

        self.advance()  # eat )
        return Prototype(name, params)

    def _report(self, err: ParseError) -> None:
        self.last_error = err
        self.error(str(err))

    def parse_definition(self) -> Function | None:
        """definition ::= 'def' prototype expression"""
        self.advance()  # eat def
        try:
            proto = self.parse_prototype()
            body = self.parse_expression()
        except ParseError as e:
            self._report(e)
            return None
        return Function(proto, body)

    def parse_extern(self) -> Prototype | None:
        """external ::= 'extern' prototype"""
        self.advance()  # eat extern
        try:
            return self.parse_prototype()
        except ParseError as e:
            self._report(e)
            return None

    def parse_top_level_expr(self) -> Function | None:
        """toplevelexpr ::= expression, wrapped in an anonymous nullary function."""
        try:
            body = self.parse_expression()
        except ParseError as e:
            self._report(e)
            return None
        return Function(Prototype(ANON_FN_NAME, []), body)


__all__ = ["ParseError", "Parser"]
