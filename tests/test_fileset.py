"""Tests for unit-wide position mapping."""

from pathlib import Path

import pytest

from gosnippet.fileset import FileSet


def test_bases_leave_gap_between_files():
    fs = FileSet()
    a = fs.add_file(Path("a.go"), 10)
    b = fs.add_file(Path("b.go"), 5)

    assert a.base == 1
    assert b.base == 12
    assert [f.path for f in fs.files] == [Path("a.go"), Path("b.go")]


def test_position_maps_back_to_file_and_offset():
    fs = FileSet()
    a = fs.add_file(Path("a.go"), 10)
    b = fs.add_file(Path("b.go"), 5)

    assert fs.position(a.pos(0)) == (Path("a.go"), 0)
    assert fs.position(a.pos(10)) == (Path("a.go"), 10)
    assert fs.position(b.pos(3)) == (Path("b.go"), 3)


def test_position_outside_any_file():
    fs = FileSet()
    fs.add_file(Path("a.go"), 10)
    with pytest.raises(ValueError):
        fs.position(0)
    with pytest.raises(ValueError):
        fs.position(100)


def test_offset_beyond_file_size_rejected():
    fs = FileSet()
    a = fs.add_file(Path("a.go"), 10)
    with pytest.raises(ValueError):
        a.pos(11)
