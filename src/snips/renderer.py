"""Document renderer and diff computer.

Both walk a document with the same scanner: text lines pass through, marker
blocks are resolved against the document's own directory and compared with
the freshly extracted snippet.  A single staleness predicate decides whether
a block is rewritten (render) or reported (diff), so the two never disagree.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from snips.errors import MissingFileError, SnipsIOError
from snips.markers import LineCursor, is_marker_line, parse_block, split_lines
from snips.regions import read_snippet

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import Path

    from snips.markers import ParsedMarkerBlock, SnippetLocator

logger = logging.getLogger(__name__)

_BACKTICK_RUN_RE = re.compile(r"^`+")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SnippetReport:
    """Per-marker outcome of a render pass."""

    locator: SnippetLocator
    updated: bool


@dataclass
class RenderOutcome:
    """Result of rendering one document.

    ``rendered_text`` is only set when the document changed.
    """

    updated: bool = False
    rendered_text: str | None = None
    snippets: list[SnippetReport] = field(default_factory=list)


@dataclass(frozen=True)
class SnippetDiff:
    """Embedded vs. current content for one stale marker."""

    path: str
    name: str | None
    old_content: str
    new_content: str

    def marker(self) -> str:
        if self.name:
            return f"{self.path}#{self.name}"
        return self.path


@dataclass(frozen=True)
class _Block:
    """A parsed marker block paired with its freshly rendered content."""

    parsed: ParsedMarkerBlock
    new_content: str
    language: str | None

    @property
    def stale(self) -> bool:
        return is_stale(self.parsed.old_content, self.new_content)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def apply_indentation(content: str, indent: str) -> str:
    """Prefix every non-blank line of *content* with *indent*.

    Blank lines come out empty and trailing newlines are dropped.
    """
    content = content.rstrip("\n")
    if not content:
        return ""
    lines = [f"{indent}{line}" if line.strip() else "" for line in content.split("\n")]
    return "\n".join(lines)


def is_stale(old_content: str, new_content: str) -> bool:
    """Decide whether an embedded block differs from the current snippet.

    Leading and trailing whitespace is ignored; inner whitespace is not.
    """
    return old_content.strip() != new_content.strip()


def _fence_for(content: str, fence: str) -> str:
    """Widen *fence* when *content* contains a backtick run that would close it."""
    longest = 0
    for line in content.split("\n"):
        match = _BACKTICK_RUN_RE.match(line.strip())
        if match:
            longest = max(longest, len(match.group()))
    if longest >= len(fence):
        return "`" * (longest + 1)
    return fence


def _render_block(block: _Block) -> list[str]:
    parsed = block.parsed
    indent = parsed.indent
    fence = _fence_for(block.new_content, parsed.fence)
    lines = [
        f"{indent}<!-- snips: {parsed.locator.marker()} -->",
        f"{indent}{fence}{block.language or ''}",
    ]
    if block.new_content:
        lines.extend(block.new_content.split("\n"))
    lines.append(f"{indent}{fence}")
    return lines


def _scan(
    text: str,
    base_dir: Path,
    document: Path,
    languages: Mapping[str, str] | None,
) -> Iterator[str | _Block]:
    """Yield plain lines and resolved marker blocks in document order."""
    cursor = LineCursor(split_lines(text))
    for line in cursor:
        if not is_marker_line(line):
            yield line
            continue
        parsed = parse_block(cursor, line, cursor.lineno, document)
        extract = read_snippet(base_dir / parsed.locator.path, parsed.locator.name, languages)
        yield _Block(
            parsed=parsed,
            new_content=apply_indentation(extract.content, parsed.indent),
            language=extract.language,
        )


def _read_document(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except FileNotFoundError as exc:
        raise MissingFileError(path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise SnipsIOError(path, exc) from exc


# ---------------------------------------------------------------------------
# Render
# ---------------------------------------------------------------------------


def render_text(
    text: str,
    base_dir: Path,
    document: Path,
    languages: Mapping[str, str] | None = None,
) -> RenderOutcome:
    """Render every marker block in *text*.

    Stale blocks are rebuilt from the marker, the language hint and the
    current snippet; blocks already in sync are kept exactly as written.
    Source paths resolve against *base_dir*, the document's directory.
    """
    # Rebuilt lines take the document's own line ending.
    cr = "\r" if "\r\n" in text else ""
    out: list[str] = []
    reports: list[SnippetReport] = []
    for item in _scan(text, base_dir, document, languages):
        if isinstance(item, str):
            out.append(item)
            continue
        stale = item.stale
        reports.append(SnippetReport(locator=item.parsed.locator, updated=stale))
        if stale:
            out.extend(f"{line}{cr}" for line in _render_block(item))
        else:
            out.extend(item.parsed.raw_lines)

    rendered = "\n".join(out)
    if text.endswith("\n"):
        rendered += "\n"
    elif cr and rendered.endswith("\r") and not text.endswith("\r"):
        rendered = rendered[:-1]

    updated = rendered != text
    return RenderOutcome(
        updated=updated,
        rendered_text=rendered if updated else None,
        snippets=reports,
    )


def render_file(
    path: Path,
    *,
    write: bool = False,
    languages: Mapping[str, str] | None = None,
) -> RenderOutcome:
    """Render the document at *path*, replacing it on disk when *write* is set."""
    text = _read_document(path)
    outcome = render_text(text, path.parent, path, languages)
    logger.debug(
        "Rendered %s: %d snippet(s), %s",
        path,
        len(outcome.snippets),
        "updated" if outcome.updated else "unchanged",
    )
    if write and outcome.rendered_text is not None:
        try:
            with path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(outcome.rendered_text)
        except OSError as exc:
            raise SnipsIOError(path, exc) from exc
    return outcome


def check_files(paths: list[Path], languages: Mapping[str, str] | None = None) -> bool:
    """Return True when every document in *paths* is already in sync."""
    clean = True
    for path in paths:
        if render_file(path, languages=languages).updated:
            clean = False
    return clean


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def diff_text(
    text: str,
    base_dir: Path,
    document: Path,
    languages: Mapping[str, str] | None = None,
) -> list[SnippetDiff]:
    """List the stale marker blocks in *text* without rendering anything."""
    diffs: list[SnippetDiff] = []
    for item in _scan(text, base_dir, document, languages):
        if isinstance(item, str) or not item.stale:
            continue
        locator = item.parsed.locator
        diffs.append(
            SnippetDiff(
                path=locator.path,
                name=locator.name,
                old_content=item.parsed.old_content,
                new_content=item.new_content,
            )
        )
    return diffs


def diff_file(path: Path, languages: Mapping[str, str] | None = None) -> list[SnippetDiff]:
    """Read-only counterpart of :func:`render_file`."""
    return diff_text(_read_document(path), path.parent, path, languages)
