"""
Lexical analyzer for the SILLY language.

This module converts a character source into tokens, one token per call:

Classes:
    CharacterStream: Left-to-right character source with line/column tracking.
    Token: A single token with an integer type, a value, and a source location.
    Lexer: Pulls characters from a CharacterStream and produces Tokens on demand.

Token types:
    - Negative sentinels from `silly_constants` for end of input, the `def` and
      `extern` keywords, identifiers, and numbers.
    - Any other character is its own token; the type is the character's ordinal.

Features:
    - Skips ASCII whitespace and single-line comments (`#` through end of line)
    - Identifiers: `[a-zA-Z][a-zA-Z0-9]*`, no length limit
    - Numbers: `[0-9.]+`, converted with C `strtod` prefix semantics

Example:
    >>> lexer = Lexer(CharacterStream("def foo(x) x + 1"))
    >>> lexer.next_token()
    Token(DEF, 'def')
"""

import re
import string
from typing import Any, TextIO

from silly.silly_constants import (
    RESERVED_WORDS,
    TOK_EOF,
    TOK_IDENTIFIER,
    TOK_NUMBER,
    TOKEN_NAMES,
)

IDENT_START = frozenset(string.ascii_letters)
IDENT_CHARS = frozenset(string.ascii_letters + string.digits)
NUMBER_CHARS = frozenset(string.digits + ".")
# C-locale isspace: ASCII whitespace only
WHITESPACE = frozenset(" \t\n\v\f\r")

_NUMBER_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_number(text: str) -> float:
    """Converts a `[0-9.]+` run the way C `strtod` does.

    Only the longest leading valid decimal literal is converted and the rest is
    ignored, so malformed runs never raise:

        "3.14"  -> 3.14
        "1.2.3" -> 1.2
        "1..2"  -> 1.0
        "."     -> 0.0

    Args:
        text (str): The raw digit/dot run collected by the lexer.

    Returns:
        float: The converted value, or 0.0 when no prefix is convertible.
    """
    match = _NUMBER_PREFIX.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))


class CharacterStream:
    """
    Reads characters one at a time from a string or a text stream.

    A string source is indexed directly; any other source must provide
    `read(1)` (e.g. `sys.stdin`), which makes interactive input possible since
    nothing past the requested character is consumed.

    Attributes:
        source (str | TextIO): The input being read.
        position (int): Number of characters consumed so far.
        line (int): Line number of the next character (1-indexed).
        column (int): Column number of the next character (1-indexed).
    """

    def __init__(self, source: str | TextIO, line: int = 1, column: int = 1):
        self.source = source
        self.position = 0
        self.line = line
        self.column = column
        self._exhausted = False

    def next(self) -> str:
        """
        Consumes and returns the next character.

        Returns:
            str: The next character, or an empty string once the input is exhausted.
        """
        if self._exhausted:
            return ""
        if isinstance(self.source, str):
            char = (
                self.source[self.position]
                if self.position < len(self.source)
                else ""
            )
        else:
            char = self.source.read(1)
        if char == "":
            self._exhausted = True
            return ""
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def end_of_file(self) -> bool:
        """Returns True once a read has hit the end of the input."""
        return self._exhausted


class Token:
    """Represents a single lexical token in the SILLY language.

    Attributes:
        type (int): A negative sentinel from `silly_constants`, or the ordinal
            of the character for single-character tokens.
        value (str | float): The identifier text, the numeric value, the
            keyword text, or the character itself.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: int, value: str | float, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    @property
    def name(self) -> str:
        """Symbolic name of the token type (the character itself for symbols)."""
        return TOKEN_NAMES.get(self.type, repr(self.value))

    def is_char(self, char: str) -> bool:
        """Checks whether this is the single-character token `char`."""
        return self.type == ord(char)

    def __repr__(self) -> str:
        return f"Token({self.name}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the SILLY language.

    The lexer always holds one character read past the end of the previous
    token (`last_char`). Together with the decoded `identifier` and `number`
    buffers this is the whole lexer state of a parsing session; `reset` starts
    a fresh session over a new stream.

    Attributes:
        stream (CharacterStream): The source being tokenized.
        last_char (str): The pending lookahead character ("" at end of input).
        identifier (str): Text of the most recent identifier or keyword.
        number (float): Value of the most recent number.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.reset(stream)

    def reset(self, stream: CharacterStream) -> None:
        """Discards all session state and starts reading from `stream`.

        Args:
            stream (CharacterStream): The new input source.
        """
        self.stream = stream
        self.last_char = " "
        self.identifier = ""
        self.number = 0.0
        self._char_line = stream.line
        self._char_col = stream.column - 1

    def advance(self) -> str:
        """Reads the next character into `last_char` and returns it."""
        self._char_line, self._char_col = self.stream.line, self.stream.column
        self.last_char = self.stream.next()
        return self.last_char

    def skip_comment(self) -> None:
        """Advances to the end of the current line or the end of input."""
        while self.last_char not in ("", "\n", "\r"):
            self.advance()

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token. At end of input every call returns an EOF token.
        """
        while True:
            while self.last_char in WHITESPACE:
                self.advance()

            line, col = self._char_line, self._char_col

            # 1. Identifier or keyword
            if self.last_char in IDENT_START:
                ident = self.last_char
                while self.advance() in IDENT_CHARS:
                    ident += self.last_char
                self.identifier = ident
                return Token(RESERVED_WORDS.get(ident, TOK_IDENTIFIER), ident, line, col)

            # 2. Number
            if self.last_char in NUMBER_CHARS:
                num = self.last_char
                while self.advance() in NUMBER_CHARS:
                    num += self.last_char
                self.number = parse_number(num)
                return Token(TOK_NUMBER, self.number, line, col)

            # 3. Comment, then try again on the next line
            if self.last_char == "#":
                self.skip_comment()
                if self.last_char != "":
                    continue

            # 4. End of input; the EOF is not eaten
            if self.last_char == "":
                return Token(TOK_EOF, "", self._char_line, self._char_col)

            # 5. Any other character is its own token
            char = self.last_char
            self.advance()
            return Token(ord(char), char, line, col)


__all__ = ["CharacterStream", "Lexer", "Token", "parse_number"]
