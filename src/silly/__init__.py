"""SILLY: tokenizer and precedence-climbing parser for a small expression language."""

__version__ = "0.1.0"
