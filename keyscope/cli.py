"""Typer-based CLI for keyscope i18n key detection."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, config_manager
from .cli_watch import watch_app
from .config import DetectorConfig
from .detector import Document, KeyDetector
from .dictionary import SHARE_DIR, SHARE_NAMESPACE, LocaleDictionary
from .errors import DictionaryWriteError
from .models import RewriteKeyContext
from .rewriter import KeyRewriter
from .scanner import FileReport, ProjectScanner

console = Console()

app = typer.Typer(
    help="🔑 Keyscope — namespace-aware i18n key detection for source files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration — detector options.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_app, name="config")
app.add_typer(watch_app, name="watch")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"Keyscope v{__version__}")
        raise typer.Exit()


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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Keyscope: find translation keys and resolve their namespaces."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_detector(project_root: Path, locales: Optional[Path] = None) -> KeyDetector:
    """Detector wired to the configured options and the project's locales."""
    cfg = config_manager.load_detector_config()
    locales_dir = locales or project_root / cfg.locales_dir
    dictionary = LocaleDictionary(locales_dir, default_namespace=cfg.default_namespace)
    detector = KeyDetector(cfg, dictionary)
    for error in detector.pattern_errors():
        console.print(f"[yellow]⚠[/yellow] {error}")
    return detector


def print_file_report(report: FileReport) -> None:
    table = Table(title=report.path, show_header=True, title_justify="left")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Status")
    for item in report.keys:
        status = "[green]✓[/green]" if item.exists else "[red]missing[/red]"
        table.add_row(f"{item.line}:{item.column}", escape(item.key), status)
    console.print(table)


@app.command("scan")
def scan(
    path: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Project directory to scan."),
    locales: Optional[Path] = typer.Option(None, "--locales", "-l", help="Locale directory (default from config)."),
    missing_only: bool = typer.Option(False, "--missing", "-m", help="Only list keys absent from the dictionary."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables."),
):
    """🔍 Scan a project for translation key references."""
    project_root = path.resolve()
    detector = build_detector(project_root, locales)
    scanner = ProjectScanner(project_root, detector)
    reports = scanner.scan()

    if missing_only:
        for report in reports:
            report.keys = report.missing
        reports = [r for r in reports if r.keys]

    summary = ProjectScanner.summarize(reports)

    if as_json:
        typer.echo(json.dumps(
            {"summary": summary, "files": [asdict(r) for r in reports]},
            indent=2,
            ensure_ascii=False,
        ))
        return

    if not reports:
        console.print("[dim]No translation keys found.[/dim]")
        return

    for report in reports:
        print_file_report(report)

    console.print(
        f"\nFiles: {summary['files']} | Keys: {summary['keys']} | "
        f"Missing: [{'red' if summary['missing'] else 'green'}]{summary['missing']}[/]"
    )


@app.command("keys")
def keys(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source or locale file."),
    locales: Optional[Path] = typer.Option(None, "--locales", "-l", help="Locale directory (default from config)."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
):
    """📄 List the keys used in (or defined by) one file."""
    detector = build_detector(Path.cwd(), locales)
    usages = detector.get_usages(Document.from_path(file.resolve()))
    if usages is None:
        console.print(f"[red]✗[/red] Unsupported file type: {file.name}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(asdict(usages), indent=2, ensure_ascii=False))
        return

    title = f"{file.name} ({usages.type}, {usages.locale}"
    if usages.namespace:
        title += f", namespace {usages.namespace}"
    table = Table(title=title + ")", show_header=True)
    table.add_column("Offset", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    for item in usages.keys:
        table.add_row(f"{item.start}-{item.end}", escape(item.key))
    console.print(table)


@app.command("rewrite")
def rewrite(
    key: str = typer.Argument(..., help="Key as it would be typed in code."),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Namespace to prefix bare keys with."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="Resolve the namespace from this file."),
    offset: int = typer.Option(-1, "--offset", "-o", help="Offset in --file (default: end of file)."),
    templates: bool = typer.Option(False, "--templates", "-t", help="Also print code snippets for --file."),
):
    """✏️  Show the canonical form of a key for a new reference."""
    cfg = config_manager.load_detector_config()
    if file is None:
        rewriter = KeyRewriter(cfg.enable_key_prefix, cfg.default_namespace)
        typer.echo(rewriter.rewrite_key(key, "write", RewriteKeyContext(namespace=namespace)))
        return

    detector = KeyDetector(cfg)
    document = Document.from_path(file)
    position = max(len(document.text) - 1, 0) if offset < 0 else offset
    if namespace:
        result = detector.registry.rewrite_key(key, "write", RewriteKeyContext(
            target_file=document.path, namespace=namespace,
        ))
    else:
        result = detector.rewrite_for(key, document, position)
    typer.echo(result)

    if templates:
        for snippet in detector.registry.refactor_templates(result, document.language_id):
            typer.echo(f"  {snippet}")


@app.command("edit-key")
def edit_key(
    keypath: str = typer.Argument(..., help="Fully-qualified keypath, e.g. settings.title."),
    value: str = typer.Argument(..., help="New value."),
    locale: Optional[str] = typer.Option(None, "--locale", help="Locale to write (default: display language)."),
    locales: Optional[Path] = typer.Option(None, "--locales", "-l", help="Locale directory (default from config)."),
    share_file: Optional[str] = typer.Option(None, "--share-file", "-s", help=f"File under <locale>/{SHARE_DIR}/ for '{SHARE_NAMESPACE}.' keys."),
):
    """📝 Write a translation value back into the locale files."""
    cfg = config_manager.load_detector_config()
    locale = locale or cfg.display_language
    locales_dir = locales or Path.cwd() / cfg.locales_dir
    dictionary = LocaleDictionary(locales_dir, default_namespace=cfg.default_namespace)

    if dictionary.get(keypath, locale) == value:
        console.print("[dim]Value unchanged.[/dim]")
        return

    target_file = None
    update_keypath = keypath
    prefix = f"{SHARE_NAMESPACE}."
    if keypath.startswith(prefix) and share_file:
        name = share_file if share_file.endswith(".json") else f"{share_file}.json"
        target_file = locales_dir / locale / SHARE_DIR / name
        update_keypath = keypath[len(prefix):]

    try:
        written = dictionary.write(value, update_keypath, locale, filepath=target_file)
    except DictionaryWriteError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {keypath} ({locale}) → {written}")


# ── Configuration commands ───────────────────────────────────


@config_app.command("show")
def config_show():
    """Show the effective detector configuration."""
    cfg = config_manager.load_detector_config()
    table = Table(show_header=True, title="Detector configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for name, value in cfg.to_dict().items():
        table.add_row(name, json.dumps(value))
    console.print(table)
    console.print(f"[dim]Config file: {config_manager.CONFIG_FILE}[/dim]")


@config_app.command("set")
def config_set(
    option: str = typer.Argument(..., help="Option name, e.g. default_namespace."),
    values: List[str] = typer.Argument(..., help="Value (repeat for list options)."),
):
    """Set a detector option."""
    defaults = DetectorConfig().to_dict()
    if option not in defaults:
        raise typer.BadParameter(f"Unknown option '{option}'. Known: {', '.join(defaults)}")

    value = values if isinstance(defaults[option], list) else values[0]
    if not config_manager.save_detector_config({option: value}):
        console.print("[red]✗[/red] Could not write config file.")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {option} = {json.dumps(value)}")


@config_app.command("reset")
def config_reset():
    """Reset detector options to their defaults."""
    if not config_manager.clear_detector_config():
        console.print("[red]✗[/red] Could not write config file.")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Detector configuration reset.")


if __name__ == "__main__":
    app()
