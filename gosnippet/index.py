"""Per-unit declaration index and source extraction."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from .errors import InvalidSourceRangeError
from .models import (
    DECL_FUNC,
    DECL_METHOD,
    DECL_TYPE,
    CompilationUnit,
    Declaration,
    GenericType,
    ParenType,
    PointerType,
    QualifiedType,
    SymbolRef,
    TypeExpr,
    TypeName,
)

logger = logging.getLogger(__name__)

FunctionKey = Tuple[str, str, bool]


def receiver_key(expr: Optional[TypeExpr]) -> Optional[Tuple[str, bool]]:
    """Normalise a receiver type to ``(type name, is pointer)``.

    ``*pkg.Foo`` and ``*Foo`` both give ``("Foo", True)``; ``Foo`` and
    ``pkg.Foo`` give ``("Foo", False)``. Parentheses are unwrapped anywhere,
    so ``*(Foo)`` is ``("Foo", True)``, and ``*Stack[T]`` reduces to
    ``("Stack", True)``. Anything else gives ``None``.
    """
    if isinstance(expr, ParenType):
        return receiver_key(expr.inner)
    if isinstance(expr, PointerType):
        name = _named(expr.elem)
        return (name, True) if name else None
    name = _named(expr)
    return (name, False) if name else None


def _named(expr: Optional[TypeExpr]) -> Optional[str]:
    if isinstance(expr, TypeName):
        return expr.name
    if isinstance(expr, QualifiedType):
        return expr.name
    if isinstance(expr, ParenType):
        return _named(expr.inner)
    if isinstance(expr, GenericType):
        return _named(expr.base)
    return None


class DeclarationIndex:
    """Lookup tables over one unit's top-level declarations.

    ``function_table`` is keyed by ``(name, receiver type, is pointer)`` with
    an empty receiver for plain functions; ``type_table`` maps each declared
    type name to its whole ``type`` declaration group. A later declaration
    with an existing key replaces the earlier one.
    """

    def __init__(self, unit: CompilationUnit) -> None:
        self.unit = unit
        self.function_table: Dict[FunctionKey, Declaration] = {}
        self.type_table: Dict[str, Declaration] = {}
        self.source_cache: Dict[Path, bytes] = {}

    @classmethod
    def build(cls, unit: CompilationUnit) -> "DeclarationIndex":
        idx = cls(unit)
        skipped = 0
        for decl in unit.declarations:
            if decl.kind == DECL_FUNC:
                idx.function_table[(decl.names[0], "", False)] = decl
            elif decl.kind == DECL_METHOD:
                key = receiver_key(decl.receiver)
                if key is None:
                    skipped += 1
                    logger.debug(
                        "Not indexing method %s: unsupported receiver %r", decl.names[0], decl.receiver,
                    )
                    continue
                idx.function_table[(decl.names[0], key[0], key[1])] = decl
            elif decl.kind == DECL_TYPE:
                for name in decl.names:
                    idx.type_table[name] = decl
        logger.debug(
            "Indexed %s: %d functions/methods, %d types, %d skipped",
            unit.unit_path, len(idx.function_table), len(idx.type_table), skipped,
        )
        return idx

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def lookup_function(self, name: str, receiver: str = "", is_pointer: bool = False) -> Optional[Declaration]:
        return self.function_table.get((name, receiver, is_pointer))

    def lookup_type(self, name: str) -> Optional[Declaration]:
        return self.type_table.get(name)

    def symbols(self) -> Iterator[Tuple[SymbolRef, Declaration]]:
        """Yield every indexed entry as a symbol reference, in source order."""
        entries = []
        for (name, receiver, is_pointer), decl in self.function_table.items():
            ref = SymbolRef(self.unit.unit_path, name, receiver, is_pointer)
            entries.append((decl.pos, ref, decl))
        for name, decl in self.type_table.items():
            entries.append((decl.pos, SymbolRef(self.unit.unit_path, name), decl))
        for _, ref, decl in sorted(entries, key=lambda e: (e[0], str(e[1]))):
            yield ref, decl

    # ------------------------------------------------------------------
    # Source extraction
    # ------------------------------------------------------------------

    def read_source(self, path: Path) -> bytes:
        data = self.source_cache.get(path)
        if data is None:
            data = self.source_cache[path] = path.read_bytes()
        return data

    def extract(self, decl: Declaration) -> str:
        """Return the verbatim source text of *decl*.

        Raises:
            InvalidSourceRangeError: the span no longer fits the file on disk.
        """
        path, start = self.unit.position(decl.pos)
        _, end = self.unit.position(decl.end)
        data = self.read_source(path)
        if start >= len(data) or end > len(data):
            raise InvalidSourceRangeError(start, end, len(data))
        return data[start:end].decode("utf-8", errors="replace")
