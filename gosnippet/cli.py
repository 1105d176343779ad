"""Typer-based CLI for gosnippet."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config, config_manager
from .buildctx import BuildContext
from .errors import SymbolParseError, UnitLoadFailedError
from .index import DeclarationIndex
from .inputs import read_symbols
from .loader import GoPackageLoader
from .render import render
from .resolver import SymbolResolver
from .symbols import format_symbol, parse_symbol

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="🔎 gosnippet — print the Go source of functions, methods and types named on stdin.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"gosnippet v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("gosnippet").setLevel(level)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log loader and index details."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors; hide skipped-symbol warnings."),
):
    """gosnippet: resolve symbol names from call graphs to their Go declarations."""
    _configure_logging(verbose, quiet)


def _choose(value: Optional[str], default: str, allowed: tuple, what: str) -> str:
    chosen = str(value or default).lower().strip()
    if chosen not in allowed:
        raise typer.BadParameter(f"{what} must be one of: {', '.join(allowed)}")
    return chosen


def _make_loader(root: Path, backend: Optional[str]) -> GoPackageLoader:
    cfg = config_manager.load_config()
    loader_cfg = cfg["loader"]
    chosen = _choose(backend, loader_cfg["backend"], config.LOADER_BACKENDS, "Backend")
    build_context = BuildContext.host(
        goos=str(loader_cfg["goos"]),
        goarch=str(loader_cfg["goarch"]),
        tags=config_manager.split_tags(str(loader_cfg["tags"])),
    )
    logger.debug("Build context: %s/%s", build_context.goos, build_context.goarch)
    return GoPackageLoader(
        root,
        backend=chosen,
        go_binary=str(loader_cfg["go_binary"]),
        timeout=float(loader_cfg["timeout"]),
        build_context=build_context,
    )


@app.command("extract")
def extract(
    root: Path = typer.Argument(..., exists=True, file_okay=False, help="Go module root directory."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: plain, markdown or json."),
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i", dir_okay=False, help="Read symbols from FILE instead of stdin.",
    ),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Package locator: gomod or golist."),
):
    """Read symbols (or 'caller -> callee' edges) and print their declarations.

    Examples:
        echo 'example.com/m/calc.Add' | gosnippet extract .
        callgraph-tool | gosnippet extract ~/src/m -f markdown
    """
    cfg = config_manager.load_config()
    chosen_fmt = _choose(fmt, cfg["output"]["format"], config.OUTPUT_FORMATS, "Format")
    loader = _make_loader(root, backend)

    try:
        if input_file is not None:
            text = input_file.read_text(encoding="utf-8")
        else:
            text = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        typer.echo(f"❌ failed to read symbols: {exc}", err=True)
        raise typer.Exit(code=1)

    symbols = read_symbols(text.splitlines())
    if not symbols:
        typer.echo("No symbols found in input", err=True)
        raise typer.Exit(code=0)

    result = SymbolResolver(loader).resolve(symbols)
    logger.info(
        "Resolved %d snippets in %d packages; %d symbols skipped",
        result.snippet_count, len(result), len(result.diagnostics),
    )
    typer.echo(render(result, chosen_fmt), nl=False)


@app.command("parse-symbol")
def parse_symbol_cmd(
    symbols: List[str] = typer.Argument(..., help="Symbols to parse, e.g. '(*example.com/m/calc.Calc).Add'."),
):
    """Show how symbols are split into package, receiver and member."""
    console = Console()
    table = Table(title="Parsed symbols")
    table.add_column("Symbol", style="cyan")
    table.add_column("Package")
    table.add_column("Receiver")
    table.add_column("Pointer")
    table.add_column("Member", style="bold")

    failed = 0
    for sym in symbols:
        try:
            ref = parse_symbol(sym)
        except SymbolParseError as exc:
            failed += 1
            table.add_row(escape(sym), f"[red]{escape(str(exc))}[/red]", "", "", "")
            continue
        table.add_row(
            escape(sym),
            escape(ref.unit_path),
            escape(ref.receiver_type) or "-",
            "yes" if ref.is_pointer_receiver else "no",
            escape(ref.member_name),
        )

    console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command("list-decls")
def list_decls(
    root: Path = typer.Argument(..., exists=True, file_okay=False, help="Go module root directory."),
    unit_path: str = typer.Argument(..., help="Import path of the package to list."),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Package locator: gomod or golist."),
):
    """List every symbol of a package that 'extract' can resolve."""
    loader = _make_loader(root, backend)
    try:
        units = loader.load(unit_path)
    except UnitLoadFailedError as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(code=1)

    console = Console()
    for unit in units:
        idx = DeclarationIndex.build(unit)
        table = Table(title=f"{unit.unit_path} (package {unit.name})")
        table.add_column("Symbol", style="cyan", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Location", style="dim")
        for ref, decl in idx.symbols():
            try:
                location = decl.file_path.relative_to(loader.root)
            except ValueError:
                location = decl.file_path
            table.add_row(escape(format_symbol(ref)), decl.kind, escape(f"{location}:{decl.line}"))
        console.print(table)


@app.command("show-config")
def show_config():
    """Show the effective configuration."""
    cfg = config_manager.load_config()
    exists = config.CONFIG_FILE.exists()
    typer.echo("")
    for section, values in cfg.items():
        typer.echo(typer.style(f"  [{section}]", bold=True))
        for key, value in values.items():
            typer.echo(f"  {key:<10} {typer.style(str(value), fg=typer.colors.WHITE, bold=True)}")
    source = str(config.CONFIG_FILE) if exists else f"{config.CONFIG_FILE} (not created, using defaults)"
    typer.echo(f"\n  Config     {typer.style(source, dim=True)}")


@app.command("set-config")
def set_config(
    key: str = typer.Argument(..., help="Setting as SECTION.KEY, e.g. output.format."),
    value: str = typer.Argument(..., help="New value."),
):
    """Persist a setting to the config file.

    Examples:
        gosnippet set-config output.format markdown
        gosnippet set-config loader.backend golist
    """
    section, dot, name = key.partition(".")
    if not dot or not name:
        raise typer.BadParameter("Setting must look like SECTION.KEY, e.g. output.format")
    try:
        saved = config_manager.save_setting(section, name, value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    typer.echo(typer.style(f"✅ {section}.{name} = {saved}", fg=typer.colors.GREEN))


if __name__ == "__main__":
    app()
