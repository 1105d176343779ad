"""Tests for reading symbol lists."""

from gosnippet.inputs import dedupe, read_symbols


def test_bare_symbols():
    assert read_symbols(["a.F\n", "  b.G  ", ""]) == ["a.F", "b.G"]


def test_blank_lines_skipped():
    assert read_symbols(["", "   ", "\n", "a.F"]) == ["a.F"]


def test_edge_line_contributes_both_ends():
    assert read_symbols(["a.F -> a.G"]) == ["a.F", "a.G"]


def test_edge_with_pointer_method():
    assert read_symbols(["(*a.T).M->a.G"]) == ["(*a.T).M", "a.G"]


def test_edge_with_empty_side():
    assert read_symbols(["a.F -> "]) == ["a.F"]


def test_line_with_two_arrows_is_dropped():
    assert read_symbols(["a.F -> a.G -> a.H", "b.F"]) == ["b.F"]


def test_dedupe_keeps_first_occurrence():
    symbols = read_symbols(["a.F", "a.F -> a.G", "a.G", "a.F"])
    assert dedupe(symbols) == ["a.F", "a.G"]
