"""Go build constraints for the pure-Python ``gomod`` loader.

Decides which files of a package directory take part in a build for one
GOOS/GOARCH pair, the way ``go/build`` does:

- ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` file name suffixes;
- ``//go:build`` boolean expressions (``!``, ``&&``, ``||``, parentheses);
- legacy ``// +build`` lines, used only when no ``//go:build`` line exists.

Satisfied tags are GOOS, GOARCH, ``gc``, ``unix`` on Unix-like systems,
``cgo`` when enabled, every ``go1.N`` release tag and any extra tags given.
"""

from __future__ import annotations

import os
import platform
import re
import sys
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .errors import BuildConstraintError

KNOWN_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
    "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1",
    "windows", "zos",
})

UNIX_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
    "linux", "netbsd", "openbsd", "solaris",
})

KNOWN_ARCH = frozenset({
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
    "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
    "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64",
    "wasm",
})

# sys.platform prefix -> GOOS
_PLATFORM_OS = (
    ("linux", "linux"),
    ("darwin", "darwin"),
    ("win32", "windows"),
    ("cygwin", "windows"),
    ("freebsd", "freebsd"),
    ("openbsd", "openbsd"),
    ("netbsd", "netbsd"),
    ("dragonfly", "dragonfly"),
    ("sunos", "solaris"),
    ("aix", "aix"),
)

# platform.machine() (lowercased) -> GOARCH
_MACHINE_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips64": "mips64",
}

_GO_BUILD_RE = re.compile(r"^//go:build(?:\s|$)")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build(?:\s|$)")
_RELEASE_TAG_RE = re.compile(r"^go1\.\d+$")
_TOKEN_RE = re.compile(r"\s*(\|\||&&|!|\(|\)|[A-Za-z0-9_.]+)")


def is_constraint_line(line: str) -> bool:
    """True for a ``//go:build`` or ``// +build`` comment line."""
    return bool(_GO_BUILD_RE.match(line) or _PLUS_BUILD_RE.match(line))


def host_goos() -> str:
    for prefix, goos in _PLATFORM_OS:
        if sys.platform.startswith(prefix):
            return goos
    return sys.platform


def host_goarch() -> str:
    machine = platform.machine().lower()
    return _MACHINE_ARCH.get(machine, machine)


@dataclass(frozen=True)
class BuildContext:
    """The target a package is loaded for."""

    goos: str
    goarch: str
    cgo_enabled: bool = True
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def host(cls, goos: str = "", goarch: str = "", tags: Iterable[str] = ()) -> "BuildContext":
        """Context for this machine.

        Explicit *goos* / *goarch* win, then the ``GOOS`` / ``GOARCH``
        environment variables, then the running interpreter's platform.
        ``CGO_ENABLED=0`` turns the ``cgo`` tag off.
        """
        return cls(
            goos=goos or os.environ.get("GOOS") or host_goos(),
            goarch=goarch or os.environ.get("GOARCH") or host_goarch(),
            cgo_enabled=os.environ.get("CGO_ENABLED", "1") != "0",
            tags=frozenset(tags),
        )

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def match_tag(self, tag: str) -> bool:
        if tag in (self.goos, self.goarch, "gc"):
            return True
        if tag == "unix" and self.goos in UNIX_OS:
            return True
        if tag == "linux" and self.goos == "android":
            return True
        if tag == "solaris" and self.goos == "illumos":
            return True
        if tag == "darwin" and self.goos == "ios":
            return True
        if tag == "cgo":
            return self.cgo_enabled
        if _RELEASE_TAG_RE.match(tag):
            return True
        return tag in self.tags

    # ------------------------------------------------------------------
    # File names
    # ------------------------------------------------------------------

    def match_file_name(self, name: str) -> bool:
        """Apply the ``_GOOS`` / ``_GOARCH`` suffix rules to a file name.

        Only the part after the first underscore counts, so ``linux.go`` is
        not constrained while ``sys_linux.go`` is.
        """
        stem = name.split(".", 1)[0]
        i = stem.find("_")
        if i < 0:
            return True
        parts = stem[i:].split("_")
        if parts[-1] == "test":
            parts = parts[:-1]
        n = len(parts)
        if n >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.match_tag(parts[-2]) and self.match_tag(parts[-1])
        if n >= 1 and (parts[-1] in KNOWN_OS or parts[-1] in KNOWN_ARCH):
            return self.match_tag(parts[-1])
        return True

    # ------------------------------------------------------------------
    # Comment constraints
    # ------------------------------------------------------------------

    def match_constraints(self, lines: List[str]) -> bool:
        """Evaluate the header constraint lines of one file.

        Raises:
            BuildConstraintError: more than one ``//go:build`` line, or a
                line that does not parse.
        """
        go_build = [line for line in lines if _GO_BUILD_RE.match(line)]
        if len(go_build) > 1:
            raise BuildConstraintError(go_build[1], "multiple //go:build comments")
        if go_build:
            line = go_build[0]
            return _ExprParser(line, line[len("//go:build"):], self.match_tag).parse()
        return all(self._match_plus_build(line) for line in lines if _PLUS_BUILD_RE.match(line))

    def _match_plus_build(self, line: str) -> bool:
        fields = line.lstrip("/").strip()[len("+build"):].split()
        if not fields:
            return True
        for option in fields:
            if all(self._match_plus_term(line, term) for term in option.split(",")):
                return True
        return False

    def _match_plus_term(self, line: str, term: str) -> bool:
        negate = term.startswith("!")
        tag = term[1:] if negate else term
        if not tag or not re.fullmatch(r"[A-Za-z0-9_.]+", tag):
            raise BuildConstraintError(line, f"invalid tag {term!r}")
        return self.match_tag(tag) != negate


class _ExprParser:
    """Recursive-descent evaluator for one ``//go:build`` expression.

    or  := and ('||' and)*
    and := not ('&&' not)*
    not := '!' not | '(' or ')' | tag
    """

    def __init__(self, line: str, text: str, match_tag) -> None:
        self.line = line
        self.match_tag = match_tag
        self.tokens = self._tokenize(text)
        self.i = 0

    def _tokenize(self, text: str) -> List[str]:
        tokens: List[str] = []
        pos = 0
        text = text.rstrip()
        while pos < len(text):
            m = _TOKEN_RE.match(text, pos)
            if m is None:
                raise BuildConstraintError(self.line, f"unexpected character {text[pos:].strip()[:1]!r}")
            tokens.append(m.group(1))
            pos = m.end()
        return tokens

    def _peek(self) -> Optional[str]:
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def _next(self) -> str:
        tok = self._peek()
        if tok is None:
            raise BuildConstraintError(self.line, "unexpected end of expression")
        self.i += 1
        return tok

    def parse(self) -> bool:
        if not self.tokens:
            raise BuildConstraintError(self.line, "empty expression")
        result = self._or()
        if self._peek() is not None:
            raise BuildConstraintError(self.line, f"unexpected token {self._peek()!r}")
        return result

    # Every operand is evaluated so that syntax errors surface regardless of
    # short-circuiting.
    def _or(self) -> bool:
        result = self._and()
        while self._peek() == "||":
            self.i += 1
            rhs = self._and()
            result = result or rhs
        return result

    def _and(self) -> bool:
        result = self._not()
        while self._peek() == "&&":
            self.i += 1
            rhs = self._not()
            result = result and rhs
        return result

    def _not(self) -> bool:
        tok = self._next()
        if tok == "!":
            return not self._not()
        if tok == "(":
            result = self._or()
            if self._next() != ")":
                raise BuildConstraintError(self.line, "missing )")
            return result
        if tok in ("&&", "||", ")"):
            raise BuildConstraintError(self.line, f"unexpected token {tok!r}")
        return self.match_tag(tok)
