"""snips CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.text import Text

from snips import __version__
from snips.config import load_config
from snips.diff_format import format_diff
from snips.discovery import resolve_files
from snips.errors import SnipsError
from snips.renderer import diff_file, render_file

if TYPE_CHECKING:
    from collections.abc import Mapping

    from snips.renderer import RenderOutcome, SnippetDiff


def _relative_display(path: Path, cwd: Path) -> str:
    """Show *path* relative to *cwd* when it lives underneath it."""
    try:
        return str(path.resolve().relative_to(cwd.resolve()))
    except ValueError:
        return str(path)


def _setup_logging(*, verbose: bool) -> None:
    if not verbose:
        return
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _report_error(path: Path, exc: SnipsError, cwd: Path) -> None:
    click.echo(f"Error: {_relative_display(path, cwd)}: {exc}", err=True)


# ---------------------------------------------------------------------------
# Render / check output
# ---------------------------------------------------------------------------


def _print_outcome(console: Console, label: str, outcome: RenderOutcome, *, check: bool) -> None:
    console.print(Text(label, style="bold blue"), soft_wrap=True)
    if not outcome.snippets:
        console.print(Text("  (no snippets found)", style="bright_yellow"), soft_wrap=True)
        return

    for report in outcome.snippets:
        marker = report.locator.marker()
        line = Text("  ")
        line.append("↳", style="cyan")
        line.append(" ")
        if not report.updated:
            line.append(marker, style="dim")
        elif check:
            line.append(marker, style="red")
            line.append(" [out of sync]")
        else:
            line.append(marker, style="green")
            line.append(" [updated]")
        console.print(line, soft_wrap=True)


def _snippet_status(updated: bool, *, check: bool) -> str:
    if not updated:
        return "ok"
    return "out_of_sync" if check else "updated"


def _run_render(
    files: list[Path],
    *,
    check: bool,
    quiet: bool,
    fmt: str,
    cwd: Path,
    languages: Mapping[str, str],
) -> tuple[bool, bool]:
    """Render or check *files*; return ``(any_stale, any_error)``."""
    console = Console(highlight=False)
    any_stale = False
    any_error = False
    records: list[dict[str, object]] = []

    for path in files:
        label = _relative_display(path, cwd)
        try:
            outcome = render_file(path, write=not check, languages=languages)
        except SnipsError as exc:
            any_error = True
            _report_error(path, exc, cwd)
            records.append({"path": label, "error": exc.to_dict()})
            continue

        any_stale = any_stale or outcome.updated

        if fmt == "json":
            records.append(
                {
                    "path": label,
                    "updated": outcome.updated,
                    "snippets": [
                        {
                            "marker": s.locator.marker(),
                            "status": _snippet_status(s.updated, check=check),
                        }
                        for s in outcome.snippets
                    ],
                }
            )
        elif fmt == "porcelain":
            for s in outcome.snippets:
                status = _snippet_status(s.updated, check=check)
                click.echo(f"{status}\t{label}\t{s.locator.marker()}")
        elif not quiet:
            _print_outcome(console, label, outcome, check=check)

    if fmt == "json":
        data = {
            "mode": "check" if check else "render",
            "summary": {
                "files": len(files),
                "stale": sum(1 for r in records if r.get("updated")),
                "errors": sum(1 for r in records if "error" in r),
            },
            "files": records,
        }
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))

    return any_stale, any_error


# ---------------------------------------------------------------------------
# Diff output
# ---------------------------------------------------------------------------


def _echo_diff(diff: SnippetDiff) -> None:
    lines = format_diff(diff).split("\n")
    for line in lines[:2]:
        click.echo(line)
    for line in lines[2:]:
        if line.startswith("-"):
            click.secho(line, fg="red")
        elif line.startswith("+"):
            click.secho(line, fg="green")
        else:
            click.echo(line)
    click.echo()


def _run_diff(files: list[Path], *, fmt: str, cwd: Path, languages: Mapping[str, str]) -> bool:
    """Print diffs for *files*; return True when any document failed."""
    any_error = False
    records: list[dict[str, object]] = []
    for path in files:
        label = _relative_display(path, cwd)
        try:
            diffs = diff_file(path, languages=languages)
        except SnipsError as exc:
            any_error = True
            _report_error(path, exc, cwd)
            continue

        for diff in diffs:
            if fmt == "json":
                records.append(
                    {
                        "file": label,
                        "path": diff.path,
                        "name": diff.name,
                        "old_content": diff.old_content,
                        "new_content": diff.new_content,
                    }
                )
            elif fmt == "porcelain":
                click.echo(f"{label}\t{diff.marker()}")
            else:
                _echo_diff(diff)

    if fmt == "json":
        click.echo(json.dumps({"diffs": records}, ensure_ascii=False, indent=2))
    return any_error


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


@click.command()
@click.version_option(version=__version__, prog_name="snips")
@click.option(
    "--check",
    is_flag=True,
    help="Don't write changes; exit with error if files are out of sync.",
)
@click.option("--diff", "show_diff", is_flag=True, help="Show diff of changes.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default="rich",
    help="Output format.",
)
@click.option(
    "--watch",
    "watch_mode",
    is_flag=True,
    help="Re-render when documents or sources change.",
)
@click.option("--debounce", default=500, type=int, help="Watch debounce delay in ms.")
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
def main(
    *,
    check: bool,
    show_diff: bool,
    quiet: bool,
    verbose: bool,
    fmt: str,
    watch_mode: bool,
    debounce: int,
    files: tuple[Path, ...],
) -> None:
    """Keep fenced code blocks in markdown in sync with source files.

    FILES default to every markdown file in the current directory.
    Exit codes: 0 = ok, 1 = error or out of sync (with --check), 2 = usage error.
    """
    if check and show_diff:
        raise click.UsageError("--check and --diff cannot be used together.")
    if watch_mode and (check or show_diff):
        raise click.UsageError("--watch only works in render mode.")

    _setup_logging(verbose=verbose)

    cwd = Path.cwd()
    config = load_config(cwd)

    try:
        targets = resolve_files(list(files), cwd, config)
    except SnipsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if show_diff:
        if _run_diff(targets, fmt=fmt, cwd=cwd, languages=config.languages):
            sys.exit(1)
        return

    any_stale, any_error = _run_render(
        targets,
        check=check,
        quiet=quiet,
        fmt=fmt,
        cwd=cwd,
        languages=config.languages,
    )
    if any_error:
        sys.exit(1)
    if check and any_stale:
        sys.exit(1)

    if watch_mode:
        try:
            from snips.watcher import watch
        except ImportError:
            click.echo(
                "Error: watch requires 'watchfiles'. Install with: pip install snips[watch]",
                err=True,
            )
            sys.exit(1)

        watch(targets, debounce_ms=debounce, languages=config.languages)
