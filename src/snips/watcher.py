"""File watcher: re-render documents when they or their sources change."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from watchfiles import watch as fs_watch

from snips.errors import SnipsError
from snips.markers import is_marker_line, parse_marker, split_lines
from snips.renderer import render_file

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500


def _referenced_sources(document: Path) -> set[Path]:
    """Resolve the source files named by well-formed markers in *document*."""
    try:
        text = document.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return set()

    sources: set[Path] = set()
    for lineno, line in enumerate(split_lines(text), 1):
        if not is_marker_line(line):
            continue
        try:
            _indent, locator = parse_marker(line, lineno, document)
        except SnipsError:
            continue
        sources.add((document.parent / locator.path).resolve())
    return sources


def _tracked_files(documents: Iterable[Path]) -> set[Path]:
    """Documents plus every source they reference, as absolute paths."""
    tracked: set[Path] = set()
    for doc in documents:
        tracked.add(doc.resolve())
        tracked |= _referenced_sources(doc)
    return tracked


def _get_watch_paths(tracked: Iterable[Path]) -> list[Path]:
    """Directories holding tracked files that currently exist, sorted."""
    return sorted({p.parent for p in tracked if p.parent.is_dir()})


def _filter_relevant(
    changes: Iterable[tuple[object, str]],
    tracked: set[Path],
) -> list[tuple[object, str]]:
    """Keep only changes to tracked files, ignoring temp files."""
    result: list[tuple[object, str]] = []
    for change_type, path_str in changes:
        p = Path(path_str)
        if p.name.startswith("~") or p.name.endswith(".tmp"):
            continue
        if p.resolve() not in tracked:
            continue
        result.append((change_type, path_str))
    return result


def _format_time() -> str:
    """Return current time as ``HH:MM:SS`` string."""
    return datetime.now(tz=timezone.utc).strftime("%H:%M:%S")


@dataclass(frozen=True)
class WatchEvent:
    """A single watch event after filtering and debounce."""

    files_changed: int
    documents_updated: int
    errors: int


def render_all(
    documents: list[Path],
    languages: Mapping[str, str] | None = None,
    on_error: Callable[[Path, SnipsError], None] | None = None,
) -> tuple[int, int]:
    """Render every document in place; return ``(updated, failed)`` counts.

    A failing document is reported through *on_error* and does not stop the
    others.
    """
    updated = 0
    failed = 0
    for doc in documents:
        try:
            if render_file(doc, write=True, languages=languages).updated:
                updated += 1
        except SnipsError as exc:
            failed += 1
            if on_error is not None:
                on_error(doc, exc)
    return updated, failed


def watch(
    documents: list[Path],
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    languages: Mapping[str, str] | None = None,
    callback: Callable[[WatchEvent], None] | None = None,
) -> None:
    """Watch *documents* and their snippet sources, re-rendering on change.

    When a render makes the documents reference sources in directories that
    are not yet watched, the watch restarts on the new set of directories.
    """
    console = Console()

    def _report(doc: Path, exc: SnipsError) -> None:
        console.print(f"[red]Error:[/red] {escape(str(doc))}: {escape(str(exc))}")

    tracked = _tracked_files(documents)
    watch_paths = _get_watch_paths(tracked)
    if not watch_paths:
        console.print("[red]No directories to watch.[/red]")
        return

    console.print(
        f"[bold blue]Watching:[/bold blue] {len(tracked)} file(s) in {len(watch_paths)} dir(s)"
    )
    console.print(f"[dim]Debounce: {debounce_ms}ms  |  Press Ctrl+C to stop[/dim]")
    console.print()

    try:
        while watch_paths:
            restart = False
            for batch in fs_watch(*watch_paths, debounce=debounce_ms, recursive=False):
                relevant = _filter_relevant(batch, tracked)
                if not relevant:
                    continue

                updated, failed = render_all(documents, languages, on_error=_report)
                tracked = _tracked_files(documents)
                logger.debug("Watch batch: %d change(s), %d updated", len(relevant), updated)

                timestamp = _format_time()
                console.print(
                    f"[dim]{timestamp}[/dim] "
                    f"[green]rendered[/green] "
                    f"({len(relevant)} file{'s' if len(relevant) != 1 else ''} changed, "
                    f"{updated} updated)"
                )

                if callback is not None:
                    event = WatchEvent(
                        files_changed=len(relevant),
                        documents_updated=updated,
                        errors=failed,
                    )
                    callback(event)

                new_paths = _get_watch_paths(tracked)
                if new_paths != watch_paths:
                    logger.debug("Watch directories changed: %s", new_paths)
                    watch_paths = new_paths
                    restart = True
                    break

            if not restart:
                return

    except KeyboardInterrupt:
        console.print("\n[yellow]Watch stopped.[/yellow]")
