"""Go source parser built on Tree-sitter.

Extracts the top-level declarations of a single ``.go`` file:

- ``function_declaration``  -> :data:`DECL_FUNC`
- ``method_declaration``    -> :data:`DECL_METHOD` (receiver kept as a
  :data:`TypeExpr`, not yet normalised)
- ``type_declaration``      -> :data:`DECL_TYPE` (one record per group,
  carrying every type / alias name declared inside it)

Tree-sitter is error-tolerant, so a file with syntax errors still yields a
tree; :attr:`ParsedFile.has_error` reports it and the loader decides what to
do with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import tree_sitter_go
from tree_sitter import Language, Parser as TSParser

from .buildctx import is_constraint_line
from .fileset import SourceFile
from .models import (
    DECL_FUNC,
    DECL_METHOD,
    DECL_TYPE,
    Declaration,
    GenericType,
    OtherType,
    ParenType,
    PointerType,
    QualifiedType,
    TypeExpr,
    TypeName,
)

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())


@dataclass
class ParsedFile:
    package: str
    declarations: List[Declaration] = field(default_factory=list)
    has_error: bool = False
    constraints: List[str] = field(default_factory=list)


class GoParser:
    """Parses Go files into :class:`Declaration` records."""

    def __init__(self) -> None:
        self._parser = TSParser(GO_LANGUAGE)

    def parse(self, source: bytes) -> Any:
        """Return the raw tree-sitter tree for *source*."""
        return self._parser.parse(source)

    def parse_file(self, source: bytes, src_file: SourceFile) -> ParsedFile:
        """Parse *source* and place its declarations at *src_file*'s positions."""
        tree = self._parser.parse(source)
        root = tree.root_node

        parsed = ParsedFile(package="", has_error=root.has_error)
        seen_package = False

        for child in root.children:
            if child.type == "comment":
                text = _text(child)
                if not seen_package and is_constraint_line(text):
                    parsed.constraints.append(text.rstrip())
                continue
            if child.type == "package_clause":
                seen_package = True
                parsed.package = _package_name(child)
                continue

            decl = self._declaration(child, src_file)
            if decl is not None:
                parsed.declarations.append(decl)

        logger.debug(
            "Parsed %s: package=%s declarations=%d errors=%s",
            src_file.path, parsed.package, len(parsed.declarations), parsed.has_error,
        )
        return parsed

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _declaration(self, node: Any, src_file: SourceFile) -> Optional[Declaration]:
        if node.type == "function_declaration":
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return None
            return self._make(node, src_file, DECL_FUNC, (_text(name_node),))

        if node.type == "method_declaration":
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return None
            receiver = self._receiver(node.child_by_field_name("receiver"))
            return self._make(node, src_file, DECL_METHOD, (_text(name_node),), receiver)

        if node.type == "type_declaration":
            names = []
            for spec in node.named_children:
                if spec.type not in ("type_spec", "type_alias"):
                    continue
                name_node = spec.child_by_field_name("name")
                if name_node is not None:
                    names.append(_text(name_node))
            if not names:
                return None
            return self._make(node, src_file, DECL_TYPE, tuple(names))

        return None

    @staticmethod
    def _make(
        node: Any,
        src_file: SourceFile,
        kind: str,
        names: tuple,
        receiver: Optional[TypeExpr] = None,
    ) -> Declaration:
        return Declaration(
            kind=kind,
            names=names,
            file_path=src_file.path,
            pos=src_file.pos(node.start_byte),
            end=src_file.pos(node.end_byte),
            receiver=receiver,
            line=node.start_point[0] + 1,
        )

    # ------------------------------------------------------------------
    # Receivers
    # ------------------------------------------------------------------

    def _receiver(self, params: Any) -> TypeExpr:
        if params is None:
            return OtherType("")
        for child in params.named_children:
            if child.type != "parameter_declaration":
                continue
            type_node = child.child_by_field_name("type")
            if type_node is not None:
                return type_expr(type_node)
        return OtherType(_text(params))


def type_expr(node: Any) -> TypeExpr:
    """Convert a tree-sitter type node into a :data:`TypeExpr`."""
    kind = node.type
    if kind == "type_identifier":
        return TypeName(_text(node))
    if kind == "qualified_type":
        pkg = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if pkg is None or name is None:
            return OtherType(_text(node))
        return QualifiedType(_text(pkg), _text(name))
    if kind == "pointer_type":
        inner = _first_type_child(node)
        return PointerType(type_expr(inner)) if inner is not None else OtherType(_text(node))
    if kind == "parenthesized_type":
        inner = _first_type_child(node)
        return ParenType(type_expr(inner)) if inner is not None else OtherType(_text(node))
    if kind == "generic_type":
        base = node.child_by_field_name("type")
        args = node.child_by_field_name("type_arguments")
        if base is None:
            return OtherType(_text(node))
        return GenericType(type_expr(base), _text(args) if args is not None else "")
    return OtherType(_text(node))


def _first_type_child(node: Any) -> Optional[Any]:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _package_name(clause: Any) -> str:
    for child in clause.named_children:
        if child.type == "package_identifier":
            return _text(child)
    return ""


def _text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace")
