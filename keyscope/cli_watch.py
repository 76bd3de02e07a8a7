"""Watch mode: invalidate cached keys and re-scan files as they change."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .config import SOURCE_LANGUAGES

console = Console()

watch_app = typer.Typer(help="👀 Watch mode — re-scan files on change.")

WATCHED_EXTENSIONS = set(SOURCE_LANGUAGES) | {".json"}


class KeyChangeHandler:
    """Collect changed paths and flush them to *callback* after a debounce."""

    def __init__(self, callback: Callable[[Path], None], debounce_seconds: float = 1.0):
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.last_flush = 0.0
        self._pending_files: set[str] = set()
        self._lock = threading.Lock()

    def dispatch(self, event) -> None:
        if event.is_directory:
            return
        if hasattr(event, "src_path"):
            self._handle_change(event.src_path)

    def _handle_change(self, src_path: str) -> None:
        file_path = Path(src_path)
        if file_path.suffix not in WATCHED_EXTENSIONS:
            return
        if any(part.startswith(".") and part not in (".", "..") for part in file_path.parts):
            return

        with self._lock:
            self._pending_files.add(str(file_path))
        self.flush_if_due()

    def flush_if_due(self) -> bool:
        """Deliver held changes once the debounce interval has passed."""
        with self._lock:
            now = time.monotonic()
            if not self._pending_files or now - self.last_flush < self.debounce_seconds:
                return False

            files = sorted(self._pending_files)
            self._pending_files.clear()
            self.last_flush = now
            for f in files:
                self.callback(Path(f))
        return True


@watch_app.command("start")
def watch(
    path: Path = typer.Argument(Path("."), help="Project directory to watch."),
    locales: Optional[Path] = typer.Option(None, "--locales", "-l", help="Locale directory (default from config)."),
    interval: float = typer.Option(1.0, "--interval", "-i", help="Debounce interval in seconds."),
):
    """👀 Re-scan changed source files and reload locale files.

    Example:
      ks watch start
      ks watch start ./web --locales ./web/locales
    """
    from .cli import build_detector, print_file_report
    from .scanner import ProjectScanner

    watch_path = path.resolve()
    if not watch_path.is_dir():
        console.print(f"[red]✗[/red] Path not found: {path}")
        raise typer.Exit(1)

    detector = build_detector(watch_path, locales)
    scanner = ProjectScanner(watch_path, detector)
    locale_root = detector.dictionary.root.resolve()
    changes = 0

    def on_change(file_path: Path) -> None:
        nonlocal changes
        resolved = file_path.resolve()
        if resolved.is_relative_to(locale_root):
            detector.dictionary.reload()
            detector.cache.clear()
            console.print(f"  [green]✓[/green] Reloaded locales ({file_path.name} changed)")
        else:
            detector.notify_changed(str(resolved))
            if not resolved.exists():
                return
            print_file_report(scanner.scan_file(resolved))
        changes += 1

    console.print(f"\n[bold green]👀 Watching[/bold green] [cyan]{watch_path}[/cyan] for changes...")
    console.print(f"[dim]  Debounce:  {interval}s")
    console.print(f"  Locales:   {locale_root}")
    console.print("  Press Ctrl+C to stop[/dim]\n")

    handler = KeyChangeHandler(on_change, debounce_seconds=interval)

    class WatchdogAdapter(FileSystemEventHandler):
        def on_modified(self, event):
            handler.dispatch(event)

        def on_created(self, event):
            handler.dispatch(event)

    observer = Observer()
    observer.schedule(WatchdogAdapter(), str(watch_path), recursive=True)
    observer.start()

    try:
        while True:
            time.sleep(min(max(interval, 0.1), 1.0))
            handler.flush_if_due()
    except KeyboardInterrupt:
        observer.stop()
        console.print(f"\n[yellow]Stopped watching.[/yellow] Handled {changes} change(s).")

    observer.join()
