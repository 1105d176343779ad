"""Output renderers for resolved snippets: plain text, markdown and JSON."""

from __future__ import annotations

import json
from typing import Callable, Dict, List

from .models import ResultSet, UnitResult

RULE = "-" * 50


def _body(unit: UnitResult) -> List[str]:
    lines = [f"package {unit.unit_name}", ""]
    for i, snippet in enumerate(unit.snippets):
        lines.append(snippet)
        if i != len(unit.snippets) - 1:
            lines.append("")
    return lines


def render_plain(result: ResultSet) -> str:
    lines: List[str] = []
    for unit in result:
        lines.append(f"Package: {unit.unit_path} (package {unit.unit_name})")
        lines.append(RULE)
        lines.extend(_body(unit))
        lines.append(RULE)
        lines.append("")
    return "".join(line + "\n" for line in lines)


def render_markdown(result: ResultSet) -> str:
    lines: List[str] = []
    for unit in result:
        lines.append(f"### {unit.unit_path}")
        lines.append("")
        lines.append("```go")
        lines.extend(_body(unit))
        lines.append("```")
        lines.append("")
    return "".join(line + "\n" for line in lines)


def render_json(result: ResultSet) -> str:
    payload = [
        {"path": unit.unit_path, "name": unit.unit_name, "definitions": list(unit.snippets)}
        for unit in result
    ]
    return json.dumps(payload, indent=2) + "\n"


RENDERERS: Dict[str, Callable[[ResultSet], str]] = {
    "plain": render_plain,
    "markdown": render_markdown,
    "json": render_json,
}


def render(result: ResultSet, fmt: str = "plain") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Format must be one of: {', '.join(RENDERERS)}") from None
    return renderer(result)
