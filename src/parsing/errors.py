"""Structured errors raised while reading PO catalogs and plural rules."""

from __future__ import annotations
from typing import Any


class ParsingError(Exception):
    """Base class for parsing related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class FormatError(ParsingError):
    """Raised when a PO line violates the catalog grammar.

    ``line`` is the 1-based source line, ``text`` the offending line (when known).
    """

    def __init__(self, message: str, *, line: int | None = None, text: str | None = None):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, context={"line": line, "text": text})
        self.line = line
        self.text = text


class UnescapeError(ParsingError):
    """Raised for an escape sequence outside the PO escape table."""

    def __init__(self, sequence: str, *, line: int | None = None):
        message = f"Unknown escape sequence {sequence!r}"
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, context={"sequence": sequence, "line": line})
        self.sequence = sequence
        self.line = line


class PluralExpressionError(ParsingError):
    """Raised when a Plural-Forms header or expression cannot be compiled."""

    def __init__(self, message: str, *, expression: str):
        super().__init__(f"{message}: {expression!r}", context={"expression": expression})
        self.expression = expression
