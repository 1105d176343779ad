"""Resolution driver: symbols in, grouped source snippets out."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Protocol, Tuple

from .errors import GoSnippetError, SymbolParseError, UnitLoadFailedError
from .index import DeclarationIndex
from .inputs import dedupe
from .matcher import resolve
from .models import CompilationUnit, ResultSet, SymbolRef
from .symbols import parse_symbol

logger = logging.getLogger(__name__)


class UnitLoader(Protocol):
    def load(self, unit_path: str) -> List[CompilationUnit]:
        ...


class SymbolResolver:
    """Resolves batches of symbols package by package.

    Every failure is local: a symbol that does not parse, match, or extract is
    skipped, and a package that fails to load drops only its own symbols.
    Each package is loaded once per batch; its indexes and file cache are
    released as soon as its symbols are done.
    """

    def __init__(self, loader: UnitLoader) -> None:
        self.loader = loader

    def resolve(self, symbols: Iterable[str]) -> ResultSet:
        result = ResultSet()
        for unit_path, refs in self._group(dedupe(symbols), result).items():
            self._resolve_unit(unit_path, refs, result)
        return result

    def _group(self, symbols: List[str], result: ResultSet) -> Dict[str, List[Tuple[str, SymbolRef]]]:
        groups: Dict[str, List[Tuple[str, SymbolRef]]] = {}
        for sym in symbols:
            try:
                ref = parse_symbol(sym)
            except SymbolParseError as exc:
                logger.warning("skip symbol %r: %s", sym, exc)
                result.report(sym, exc)
                continue
            groups.setdefault(ref.unit_path, []).append((sym, ref))
        return groups

    def _resolve_unit(self, unit_path: str, refs: List[Tuple[str, SymbolRef]], result: ResultSet) -> None:
        try:
            units = self.loader.load(unit_path)
        except UnitLoadFailedError as exc:
            for sym, _ in refs:
                logger.warning("failed to load package %r for symbol %r: %s", unit_path, sym, exc.reason)
                result.report(sym, exc)
            return

        indexes = [DeclarationIndex.build(unit) for unit in units]

        for sym, ref in refs:
            last_error: GoSnippetError = UnitLoadFailedError(unit_path, "no packages found")
            for idx in indexes:
                try:
                    decl = resolve(ref, idx)
                    snippet = idx.extract(decl)
                except GoSnippetError as exc:
                    last_error = exc
                    continue
                result.add(unit_path, idx.unit.name, snippet)
                break
            else:
                logger.warning("skip symbol %r: %s", sym, last_error)
                result.report(sym, last_error)
