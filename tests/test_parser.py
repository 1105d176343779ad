"""Tests for the tree-sitter Go parser."""

from pathlib import Path

from gosnippet.fileset import FileSet
from gosnippet.models import (
    DECL_FUNC,
    DECL_METHOD,
    DECL_TYPE,
    GenericType,
    PointerType,
    TypeName,
)
from gosnippet.parser import GoParser


def _parse(source: str, path: str = "sample.go"):
    data = source.encode("utf-8")
    fs = FileSet()
    src_file = fs.add_file(Path(path), len(data))
    return GoParser().parse_file(data, src_file), src_file, data


def test_parse_package_name(sample_go_code: str):
    parsed, _, _ = _parse(sample_go_code)
    assert parsed.package == "sample"
    assert not parsed.has_error
    assert parsed.constraints == []


def test_parse_declaration_kinds(sample_go_code: str):
    parsed, _, _ = _parse(sample_go_code)
    kinds = [(d.kind, d.names) for d in parsed.declarations]

    assert kinds == [
        (DECL_FUNC, ("Hello",)),
        (DECL_TYPE, ("Greeter",)),
        (DECL_METHOD, ("Greet",)),
        (DECL_METHOD, ("String",)),
        (DECL_TYPE, ("ID", "Name")),
    ]


def test_parse_receivers(sample_go_code: str):
    parsed, _, _ = _parse(sample_go_code)
    methods = {d.names[0]: d for d in parsed.declarations if d.kind == DECL_METHOD}

    assert methods["Greet"].receiver == PointerType(TypeName("Greeter"))
    assert methods["String"].receiver == TypeName("Greeter")


def test_parse_generic_receiver():
    code = "package s\n\ntype Stack[T any] struct{}\n\nfunc (s *Stack[T]) Push(v T) {}\n"
    parsed, _, _ = _parse(code)
    method = [d for d in parsed.declarations if d.kind == DECL_METHOD][0]

    assert isinstance(method.receiver, PointerType)
    assert isinstance(method.receiver.elem, GenericType)
    assert method.receiver.elem.base == TypeName("Stack")


def test_declaration_span_excludes_doc_comment(sample_go_code: str):
    parsed, src_file, data = _parse(sample_go_code)
    hello = parsed.declarations[0]

    text = data[hello.pos - src_file.base:hello.end - src_file.base].decode("utf-8")
    assert text.startswith("func Hello(")
    assert text.endswith("}")
    assert hello.line == 6


def test_type_group_span_covers_whole_block(sample_go_code: str):
    parsed, src_file, data = _parse(sample_go_code)
    group = parsed.declarations[-1]

    text = data[group.pos - src_file.base:group.end - src_file.base].decode("utf-8")
    assert text.startswith("type (")
    assert text.endswith(")")
    assert "Name = string" in text


def test_parse_reports_syntax_errors():
    parsed, _, _ = _parse("package broken\n\nfunc Broken( {\n")
    assert parsed.has_error


def test_parse_collects_build_constraints():
    parsed, _, _ = _parse("// Copyright\n//go:build linux && amd64\n// +build linux\n\npackage main\n\nfunc main() {}\n")
    assert parsed.constraints == ["//go:build linux && amd64", "// +build linux"]
    assert parsed.package == "main"


def test_build_tag_after_package_clause_is_ignored():
    parsed, _, _ = _parse("package main\n\n//go:build ignore\n\nfunc main() {}\n")
    assert parsed.constraints == []


def test_positions_use_file_base():
    data = b"package a\n\nfunc A() {}\n"
    fs = FileSet()
    fs.add_file(Path("first.go"), 100)
    second = fs.add_file(Path("a.go"), len(data))
    parsed = GoParser().parse_file(data, second)
    decl = parsed.declarations[0]

    assert decl.pos == second.base + data.index(b"func")
    assert fs.position(decl.pos) == (Path("a.go"), data.index(b"func"))
