"""Go package loader.

Turns an import path into :class:`CompilationUnit` objects: locate the
package directory, pick its Go files, parse them with tree-sitter and lay them
out in a :class:`FileSet`.

Two locator backends:

- ``gomod``  -- pure Python. Maps import paths through the ``module``
  directive of ``<root>/go.mod``, then ``<root>/vendor``, then a path
  relative to ``<root>``. Files are picked for a :class:`BuildContext`
  (host GOOS/GOARCH by default) from their names and ``//go:build`` lines.
- ``golist`` -- asks the Go toolchain (``go list -json -find``), which also
  applies build constraints when choosing files.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from . import config
from .buildctx import BuildContext
from .errors import BuildConstraintError, UnitLoadFailedError
from .fileset import FileSet
from .models import CompilationUnit, Declaration
from .parser import GoParser

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+(?:\"([^\"]+)\"|(\S+))", re.MULTILINE)


@dataclass
class PackageFiles:
    """Where a package lives and which of its files to parse."""

    directory: Path
    files: List[Path]
    from_toolchain: bool = False


def read_module_path(root: Path) -> Optional[str]:
    """Return the module path declared in ``<root>/go.mod``, if any."""
    go_mod = root / "go.mod"
    if not go_mod.is_file():
        return None
    m = _MODULE_RE.search(go_mod.read_text(encoding="utf-8", errors="ignore"))
    if not m:
        return None
    return m.group(1) or m.group(2)


def package_go_files(directory: Path, ctx: Optional[BuildContext] = None) -> List[Path]:
    """Non-test ``.go`` files directly inside *directory*, sorted by name.

    Files starting with ``_`` or ``.`` are skipped, as the go tool does. With
    *ctx*, files whose ``_GOOS`` / ``_GOARCH`` suffix excludes them are
    skipped too.
    """
    return sorted(
        p for p in directory.iterdir()
        if p.is_file()
        and p.suffix == ".go"
        and not p.name.endswith("_test.go")
        and not p.name.startswith(("_", "."))
        and (ctx is None or ctx.match_file_name(p.name))
    )


class GoPackageLoader:
    """Loads Go packages below a module root."""

    def __init__(
        self,
        root: Path,
        backend: str = config.DEFAULT_BACKEND,
        go_binary: str = config.DEFAULT_GO_BINARY,
        timeout: float = config.DEFAULT_GO_LIST_TIMEOUT,
        build_context: Optional[BuildContext] = None,
    ) -> None:
        if backend not in config.LOADER_BACKENDS:
            raise ValueError(
                f"Unknown loader backend '{backend}'. Choose from: {', '.join(config.LOADER_BACKENDS)}"
            )
        self.root = root.resolve()
        self.backend = backend
        self.go_binary = go_binary
        self.timeout = timeout
        self.build_context = build_context or BuildContext.host()
        self._parser = GoParser()
        self._module_path = read_module_path(self.root) if backend == "gomod" else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, unit_path: str) -> List[CompilationUnit]:
        """Load the package *unit_path*.

        Raises:
            UnitLoadFailedError: the package cannot be located, has no Go
                files, mixes package names, or fails to parse.
        """
        if self.backend == "golist":
            located = self._locate_golist(unit_path)
        else:
            located = self._locate_gomod(unit_path)
        return [self._build_unit(unit_path, located)]

    # ------------------------------------------------------------------
    # Locators
    # ------------------------------------------------------------------

    def _locate_gomod(self, unit_path: str) -> PackageFiles:
        candidates: List[Path] = []
        mod = self._module_path
        if mod is not None:
            if unit_path == mod:
                candidates.append(self.root)
            elif unit_path.startswith(mod + "/"):
                candidates.append(self.root / unit_path[len(mod) + 1:])
        candidates.append(self.root / "vendor" / unit_path)
        candidates.append(self.root / unit_path)

        for directory in candidates:
            try:
                directory.resolve().relative_to(self.root)
            except ValueError:
                continue
            if directory.is_dir():
                logger.debug("Located %s at %s", unit_path, directory)
                return PackageFiles(
                    directory=directory, files=package_go_files(directory, self.build_context),
                )

        raise UnitLoadFailedError(unit_path, f"cannot find package directory under {self.root}")

    def _locate_golist(self, unit_path: str) -> PackageFiles:
        cmd = [self.go_binary, "list", "-json", "-find", unit_path]
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise UnitLoadFailedError(unit_path, f"go binary not found: {self.go_binary}") from None
        except subprocess.TimeoutExpired:
            raise UnitLoadFailedError(unit_path, f"go list timed out after {self.timeout}s") from None

        if proc.returncode != 0:
            reason = proc.stderr.strip() or f"go list exited with status {proc.returncode}"
            raise UnitLoadFailedError(unit_path, reason)

        try:
            info = json.loads(proc.stdout)
        except json.JSONDecodeError as exc:
            raise UnitLoadFailedError(unit_path, f"unreadable go list output: {exc}") from None

        error = info.get("Error")
        if error:
            raise UnitLoadFailedError(unit_path, error.get("Err", str(error)))

        directory = Path(info.get("Dir", ""))
        names = list(info.get("GoFiles") or []) + list(info.get("CgoFiles") or [])
        return PackageFiles(
            directory=directory,
            files=[directory / n for n in names],
            from_toolchain=True,
        )

    # ------------------------------------------------------------------
    # Unit construction
    # ------------------------------------------------------------------

    def _build_unit(self, unit_path: str, located: PackageFiles) -> CompilationUnit:
        fileset = FileSet()
        files: List[Path] = []
        declarations: List[Declaration] = []
        package_names: List[str] = []

        for path in located.files:
            try:
                source = path.read_bytes()
            except OSError as exc:
                raise UnitLoadFailedError(unit_path, f"cannot read {path}: {exc}") from None

            src_file = fileset.add_file(path, len(source))
            parsed = self._parser.parse_file(source, src_file)

            if not located.from_toolchain and not self._in_build(unit_path, path, parsed.constraints):
                logger.debug("Skipping %s (excluded by build constraints)", path)
                continue
            if parsed.has_error:
                raise UnitLoadFailedError(unit_path, f"syntax error in {path}")
            if parsed.package and parsed.package not in package_names:
                package_names.append(parsed.package)

            files.append(path)
            declarations.extend(parsed.declarations)

        if not files:
            raise UnitLoadFailedError(unit_path, f"no Go files in {located.directory}")
        if len(package_names) != 1:
            found = ", ".join(package_names) or "none"
            raise UnitLoadFailedError(unit_path, f"found packages {found} in {located.directory}")

        logger.debug(
            "Loaded %s: package %s, %d files, %d declarations",
            unit_path, package_names[0], len(files), len(declarations),
        )
        return CompilationUnit(
            name=package_names[0],
            unit_path=unit_path,
            directory=located.directory,
            files=files,
            declarations=declarations,
            fileset=fileset,
        )

    def _in_build(self, unit_path: str, path: Path, constraints: List[str]) -> bool:
        try:
            return self.build_context.match_constraints(constraints)
        except BuildConstraintError as exc:
            raise UnitLoadFailedError(unit_path, f"{path}: {exc}") from None
