"""Core data models shared by the parser, index, matcher, and resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .fileset import FileSet


# ---------------------------------------------------------------------------
# Symbol references
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SymbolRef:
    unit_path: str
    member_name: str
    receiver_type: str = ""
    is_pointer_receiver: bool = False

    @property
    def is_method(self) -> bool:
        return bool(self.receiver_type)

    def __str__(self) -> str:
        if not self.receiver_type:
            return f"{self.unit_path}.{self.member_name}"
        star = "*" if self.is_pointer_receiver else ""
        return f"({star}{self.unit_path}.{self.receiver_type}).{self.member_name}"


# ---------------------------------------------------------------------------
# Receiver type expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TypeName:
    name: str


@dataclass(frozen=True)
class QualifiedType:
    package: str
    name: str


@dataclass(frozen=True)
class PointerType:
    elem: "TypeExpr"


@dataclass(frozen=True)
class ParenType:
    inner: "TypeExpr"


@dataclass(frozen=True)
class GenericType:
    base: "TypeExpr"
    arguments: str


@dataclass(frozen=True)
class OtherType:
    """A receiver shape the index does not understand."""

    text: str


TypeExpr = Union[TypeName, QualifiedType, PointerType, ParenType, GenericType, OtherType]


# ---------------------------------------------------------------------------
# Declarations and compilation units
# ---------------------------------------------------------------------------

DECL_FUNC = "func"
DECL_METHOD = "method"
DECL_TYPE = "type"


@dataclass(frozen=True)
class Declaration:
    kind: str
    names: Tuple[str, ...]
    file_path: Path
    pos: int
    end: int
    receiver: Optional[TypeExpr] = None
    line: int = 0


@dataclass
class CompilationUnit:
    """A loaded Go package: its files, declarations and position mapping."""

    name: str
    unit_path: str
    directory: Path
    files: List[Path]
    declarations: List[Declaration]
    fileset: FileSet

    def position(self, pos: int) -> Tuple[Path, int]:
        return self.fileset.position(pos)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class Diagnostic:
    symbol: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.symbol}: {self.error}"


@dataclass
class UnitResult:
    unit_path: str
    unit_name: str
    snippets: List[str] = field(default_factory=list)


@dataclass
class ResultSet:
    units: Dict[str, UnitResult] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(self, unit_path: str, unit_name: str, snippet: str) -> None:
        entry = self.units.get(unit_path)
        if entry is None:
            entry = self.units[unit_path] = UnitResult(unit_path, unit_name)
        entry.snippets.append(snippet)

    def report(self, symbol: str, error: Exception) -> None:
        self.diagnostics.append(Diagnostic(symbol, error))

    def __iter__(self) -> Iterator[UnitResult]:
        for unit_path in sorted(self.units):
            yield self.units[unit_path]

    def __len__(self) -> int:
        return len(self.units)

    def __contains__(self, unit_path: object) -> bool:
        return unit_path in self.units

    def __getitem__(self, unit_path: str) -> UnitResult:
        return self.units[unit_path]

    @property
    def snippet_count(self) -> int:
        return sum(len(u.snippets) for u in self.units.values())
