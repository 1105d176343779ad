"""Read symbol lists from line-oriented input.

Each non-blank line is either a bare symbol or a call-graph edge
``caller -> callee``; an edge contributes both ends as separate symbols.
"""

from __future__ import annotations

from typing import Iterable, List

EDGE_ARROW = "->"


def read_symbols(lines: Iterable[str]) -> List[str]:
    symbols: List[str] = []
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if EDGE_ARROW not in line:
            symbols.append(line)
            continue
        parts = line.split(EDGE_ARROW)
        # Lines with more than one arrow are not edges; drop them.
        if len(parts) != 2:
            continue
        for part in parts:
            part = part.strip()
            if part:
                symbols.append(part)
    return symbols


def dedupe(symbols: Iterable[str]) -> List[str]:
    """Drop repeated symbols, keeping the first occurrence of each."""
    return list(dict.fromkeys(symbols))
