"""Error taxonomy for symbol resolution.

Every error here is local to a single symbol (or, for
:class:`UnitLoadFailedError`, a single package): the resolver catches it,
logs a diagnostic and moves on to the next item.
"""

from __future__ import annotations


class GoSnippetError(Exception):
    """Base class for all resolution errors."""


class SymbolParseError(GoSnippetError):
    """A symbol string does not follow the symbol grammar."""

    def __init__(self, symbol: str, message: str) -> None:
        super().__init__(message)
        self.symbol = symbol


class MalformedMethodSymbolError(SymbolParseError):
    """``(TYPEREF).MEMBER`` where TYPEREF cannot be split into path and type."""


class UnrecognizedSymbolFormatError(SymbolParseError):
    """Neither the method form nor the free form matched."""


class UnitLoadFailedError(GoSnippetError):
    """The package could not be located, read, or parsed."""

    def __init__(self, unit_path: str, reason: str) -> None:
        super().__init__(f"failed to load package {unit_path!r}: {reason}")
        self.unit_path = unit_path
        self.reason = reason


class SymbolNotFoundError(GoSnippetError):
    """No function, method, or type declaration matched the symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"no matching function or type declaration found for symbol {symbol!r}")
        self.symbol = symbol


class InvalidSourceRangeError(GoSnippetError):
    """A declaration span lies outside its file's current contents."""

    def __init__(self, start: int, end: int, length: int) -> None:
        super().__init__(f"invalid positions: start={start} end={end} len={length}")
        self.start = start
        self.end = end
        self.length = length


class BuildConstraintError(GoSnippetError):
    """A ``//go:build`` or ``// +build`` line cannot be evaluated."""

    def __init__(self, line: str, message: str) -> None:
        super().__init__(f"bad build constraint {line!r}: {message}")
        self.line = line
