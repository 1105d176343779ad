"""Pytest configuration and fixtures for gosnippet tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from gosnippet.index import DeclarationIndex
from gosnippet.loader import GoPackageLoader


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch):
    """Point the config file at an empty temp location for every test.

    Keeps a developer's ``~/.gosnippet/config.toml`` from changing the
    default output format or loader backend under test.
    """
    home = tmp_path_factory.mktemp("gosnippet_home")
    monkeypatch.setattr("gosnippet.config.BASE_DIR", home)
    monkeypatch.setattr("gosnippet.config.CONFIG_FILE", home / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_module_path() -> Path:
    """Get path to the sample Go module."""
    return Path(__file__).parent / "fixtures" / "sample_module"


@pytest.fixture
def copied_module(temp_dir: Path, sample_module_path: Path) -> Path:
    """A writable copy of the sample module."""
    dest = temp_dir / "sample_module"
    shutil.copytree(sample_module_path, dest)
    return dest


@pytest.fixture
def loader(sample_module_path: Path) -> GoPackageLoader:
    return GoPackageLoader(sample_module_path)


@pytest.fixture
def calc_index(loader: GoPackageLoader) -> DeclarationIndex:
    """Declaration index of ``example.com/sample/calc``."""
    (unit,) = loader.load("example.com/sample/calc")
    return DeclarationIndex.build(unit)


@pytest.fixture
def make_module(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a throwaway Go module (``example.com/tmp``) from a path->source dict."""

    def _make(files: Dict[str, str], module: str = "example.com/tmp") -> Path:
        root = temp_dir / "module"
        root.mkdir(exist_ok=True)
        (root / "go.mod").write_text(f"module {module}\n\ngo 1.21\n")
        for rel, source in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def sample_go_code() -> str:
    """Sample Go code for parser tests."""
    return '''package sample

import "fmt"

// Hello says hello.
func Hello(name string) string {
	return fmt.Sprintf("Hello, %s!", name)
}

type Greeter struct {
	Prefix string
}

func (g *Greeter) Greet(name string) string {
	return g.Prefix + Hello(name)
}

func (g Greeter) String() string {
	return g.Prefix
}

type (
	ID   int
	Name = string
)
'''
