"""
Provides the `PrecedenceTable` class, the configurable binary operator table of
the SILLY parser.

Classes:
    - PrecedenceTable: Maps operator characters to integer precedences.
    - PrecedenceError: Raised when a configuration is invalid.

Features:
    - Ships the default table `< + - *` at 10, 20, 30, 40
    - Merges user overrides with validation and conflict reporting
    - Loads overrides from JSON files, or from the file named by the
      `SILLY_PRECEDENCE` environment variable
    - Generates a sorted report of the active operators

Usage:
    >>> table = PrecedenceTable.default()
    >>> table.configure({"/": 40})
    >>> table.get("/")
    40

A precedence of zero or less keeps the operator in the table but disables it:
the parser then treats that character as "not a binary operator", exactly as
it treats characters that are missing from the table.
"""

import json
import os
from typing import Any

from silly.silly_constants import (
    DEFAULT_PRECEDENCE,
    PRECEDENCE_ENV_VAR,
    RESERVED_PUNCTUATION,
)
from silly.silly_lexer import Token


class PrecedenceError(Exception):
    """Raised for an invalid operator precedence configuration.

    Attributes:
        conflicts (list[str]): One description per rejected entry.
    """

    def __init__(self, message: str, conflicts: list[str] | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []


class PrecedenceTable:
    """Direct mapping from operator character to precedence (higher binds tighter).

    Attributes:
        table (dict[str, int]): The operator to precedence mapping.
    """

    def __init__(self, table: dict[str, int] | None = None) -> None:
        self.table: dict[str, int] = {}
        if table:
            self.configure(table)

    @classmethod
    def default(cls) -> "PrecedenceTable":
        """Returns a table holding the built-in operators."""
        return cls(DEFAULT_PRECEDENCE)

    @classmethod
    def from_env(cls) -> "PrecedenceTable":
        """
        Builds the default table, then applies the JSON file named by the
        `SILLY_PRECEDENCE` environment variable when it is set.

        Raises:
            PrecedenceError: If the file cannot be loaded or is invalid.
        """
        instance = cls.default()
        path = os.getenv(PRECEDENCE_ENV_VAR)
        if path:
            instance.load_from_json(path)
        return instance

    def get(self, op: str) -> int:
        """Returns the precedence of `op`, or -1 when it is not a binary operator."""
        prec = self.table.get(op, -1)
        return prec if prec > 0 else -1

    def precedence_of(self, token: Token) -> int:
        """
        Returns the precedence of the pending binary operator token.

        Args:
            token: The parser's current token.

        Returns:
            The operator's precedence, or -1 if the token is not a declared
            binary operator (non-ASCII, a sentinel, unknown, or disabled).
        """
        if not 0 <= token.type < 128:
            return -1
        return self.get(chr(token.type))

    def _validate(self, op: Any, prec: Any) -> str | None:
        if not isinstance(op, str) or len(op) != 1:
            return f"{op!r}: operator must be a single character"
        if not op.isascii() or op.isspace() or op.isalnum():
            return f"{op!r}: operator must be an ASCII symbol"
        if op in RESERVED_PUNCTUATION:
            return f"{op!r}: reserved punctuation cannot be an operator"
        if isinstance(prec, bool) or not isinstance(prec, int):
            return f"{op!r}: precedence must be an integer, got {prec!r}"
        return None

    def configure(self, cfg: dict[Any, Any]) -> None:
        """
        Merges operator precedences into the table.

        Nothing is applied unless every entry is valid.

        Args:
            cfg: Mapping of operator character to integer precedence.

        Raises:
            PrecedenceError: If `cfg` is not a dict or any entry is invalid.
        """
        if not isinstance(cfg, dict):
            raise PrecedenceError("Configuration must be a dict of operator to precedence")

        conflicts = [
            problem
            for op, prec in cfg.items()
            if (problem := self._validate(op, prec)) is not None
        ]
        if conflicts:
            raise PrecedenceError("Invalid operator precedence(s)", conflicts)

        self.table.update(cfg)

    def load_from_json(self, path: str) -> None:
        """
        Loads operator precedences from a JSON file and applies them via `configure`.

        Example JSON structure:
            {
                "/": 40,
                ">": 10
            }

        Args:
            path: Path to the JSON file.

        Raises:
            PrecedenceError: If the file cannot be read, parsed, or applied.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)
            self.configure(raw_cfg)
        except PrecedenceError:
            raise
        except Exception as e:
            raise PrecedenceError(f"Failed to load precedence file: {e}") from e

    def report(self) -> str:
        """Returns one line per enabled operator, lowest precedence first."""
        active = [(prec, op) for op, prec in self.table.items() if prec > 0]
        return "\n".join(f"{op:>4} → {prec}" for prec, op in sorted(active))

    def summary(self) -> dict[str, int]:
        """Returns a copy of the current mapping."""
        return dict(self.table)


__all__ = ["PrecedenceError", "PrecedenceTable"]
