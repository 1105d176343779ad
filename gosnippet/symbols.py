"""Symbol grammar: turn raw symbol strings into :class:`SymbolRef` values.

Accepted forms, tried in this order (first match wins)::

    (path/to/pkg.Type).Method     method, value receiver
    (*path/to/pkg.Type).Method    method, pointer receiver
    path/to/pkg.Name              free function or type

The method form is tried first so that ``(pkg.T).M`` is never read as a free
symbol named ``M`` in a package called ``(pkg.T)``.
"""

from __future__ import annotations

import re

from .errors import MalformedMethodSymbolError, UnrecognizedSymbolFormatError
from .models import SymbolRef

METHOD_RE = re.compile(r"^\((?P<star>\*?)(?P<typeref>[^)]+)\)\.(?P<member>[^.]+)$")
FREE_RE = re.compile(r"^(?P<path>.+)\.(?P<member>[^.]+)$")


def parse_symbol(symbol: str) -> SymbolRef:
    """Parse *symbol* into a :class:`SymbolRef`.

    Raises:
        MalformedMethodSymbolError: method form whose type reference has no
            dot, or whose package path or type name would be empty.
        UnrecognizedSymbolFormatError: the string matches no form.
    """
    m = METHOD_RE.match(symbol)
    if m:
        typeref = m.group("typeref")
        path, dot, type_name = typeref.rpartition(".")
        if not dot:
            raise MalformedMethodSymbolError(
                symbol, f"cannot split package path and type from {typeref!r}",
            )
        if not path or not type_name:
            raise MalformedMethodSymbolError(
                symbol, f"empty package path or type name in {typeref!r}",
            )
        return SymbolRef(
            unit_path=path,
            member_name=m.group("member"),
            receiver_type=type_name,
            is_pointer_receiver=m.group("star") == "*",
        )

    m = FREE_RE.match(symbol)
    if m:
        return SymbolRef(unit_path=m.group("path"), member_name=m.group("member"))

    raise UnrecognizedSymbolFormatError(symbol, f"symbol format not recognized: {symbol}")


def format_symbol(ref: SymbolRef) -> str:
    """Render *ref* back into its canonical symbol text."""
    return str(ref)
