"""Unit-wide source positions.

Every file added to a :class:`FileSet` occupies positions ``base`` through
``base + size`` inclusive (the end-of-file position is valid). Bases are
assigned in insertion order starting at 1, with a one-position gap between
files, so a single integer identifies both the file and the byte offset
inside it.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple


@dataclass(frozen=True)
class SourceFile:
    path: Path
    base: int
    size: int

    def pos(self, offset: int) -> int:
        if offset < 0 or offset > self.size:
            raise ValueError(f"offset {offset} out of range for {self.path} (size {self.size})")
        return self.base + offset


class FileSet:
    def __init__(self) -> None:
        self._files: List[SourceFile] = []
        self._bases: List[int] = []
        self._next_base = 1

    def add_file(self, path: Path, size: int) -> SourceFile:
        f = SourceFile(path=path, base=self._next_base, size=size)
        self._files.append(f)
        self._bases.append(f.base)
        self._next_base = f.base + size + 1
        return f

    @property
    def files(self) -> List[SourceFile]:
        return list(self._files)

    def file_for(self, pos: int) -> SourceFile:
        i = bisect.bisect_right(self._bases, pos) - 1
        if i < 0 or pos > self._files[i].base + self._files[i].size:
            raise ValueError(f"position {pos} is not covered by any file")
        return self._files[i]

    def position(self, pos: int) -> Tuple[Path, int]:
        """Map *pos* to ``(file path, byte offset)``."""
        f = self.file_for(pos)
        return f.path, pos - f.base
