"""
Shared constants for the SILLY front end.

Token sentinels are small negative integers so they can never collide with a
single-character token, whose type is the character's own ordinal.
"""

TOK_EOF = -1

# commands
TOK_DEF = -2
TOK_EXTERN = -3

# primary
TOK_IDENTIFIER = -4
TOK_NUMBER = -5

TOKEN_NAMES: dict[int, str] = {
    TOK_EOF: "EOF",
    TOK_DEF: "DEF",
    TOK_EXTERN: "EXTERN",
    TOK_IDENTIFIER: "IDENT",
    TOK_NUMBER: "NUMBER",
}

RESERVED_WORDS: dict[str, int] = {
    "def": TOK_DEF,
    "extern": TOK_EXTERN,
}

# Lowest to highest. `-` binding tighter than `+` is intentional.
DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 30,
    "*": 40,
}

# Characters with a fixed grammatical role that can never be binary operators.
RESERVED_PUNCTUATION = frozenset("(),;#.")

ANON_FN_NAME = "__anon_expr"

PRECEDENCE_ENV_VAR = "SILLY_PRECEDENCE"

__all__ = [
    "ANON_FN_NAME",
    "DEFAULT_PRECEDENCE",
    "PRECEDENCE_ENV_VAR",
    "RESERVED_PUNCTUATION",
    "RESERVED_WORDS",
    "TOKEN_NAMES",
    "TOK_DEF",
    "TOK_EOF",
    "TOK_EXTERN",
    "TOK_IDENTIFIER",
    "TOK_NUMBER",
]
