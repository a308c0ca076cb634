"""Marker parser: recognise ``<!-- snips: ... -->`` lines and the fenced block below them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from snips.errors import InvalidMarkerError, MissingCodeFenceError
from snips.regions import REGION_ID

if TYPE_CHECKING:
    from pathlib import Path

MARKER_PREFIX = "<!-- snips:"

_MARKER_RE = re.compile(
    rf"^(?P<indent>\s*)<!--\s*snips:\s*(?P<path>[^#\s]+)(?:#(?P<name>{REGION_ID}))?\s*-->\s*$"
)
_FENCE_RE = re.compile(r"`+")


def split_lines(text: str) -> list[str]:
    """Split *text* on ``\\n`` only, dropping the empty tail after a final newline.

    Carriage returns and other separators stay attached to their lines so that
    copying lines through unchanged reproduces the input byte for byte.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


@dataclass(frozen=True)
class SnippetLocator:
    """Source path as written in the marker, plus an optional region name."""

    path: str
    name: str | None = None

    def marker(self) -> str:
        """Render as ``path`` or ``path#name``."""
        if self.name:
            return f"{self.path}#{self.name}"
        return self.path


@dataclass
class ParsedMarkerBlock:
    """A marker line together with the fenced block that follows it."""

    indent: str
    locator: SnippetLocator
    old_content: str
    line: int
    fence: str = "```"
    closed: bool = True
    raw_lines: list[str] = field(default_factory=list)


class LineCursor:
    """Position-tracked iterator over a document's lines.

    ``lineno`` is the one-based number of the line most recently returned
    by :meth:`next`.
    """

    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self._pos = 0

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._lines)

    @property
    def lineno(self) -> int:
        return self._pos

    def peek(self) -> str | None:
        if self.at_end:
            return None
        return self._lines[self._pos]

    def next(self) -> str | None:
        line = self.peek()
        if line is not None:
            self._pos += 1
        return line

    def __iter__(self) -> LineCursor:
        return self

    def __next__(self) -> str:
        line = self.next()
        if line is None:
            raise StopIteration
        return line


def is_marker_line(line: str) -> bool:
    """True when *line* starts (after indentation) with the marker prefix."""
    return line.lstrip().startswith(MARKER_PREFIX)


def parse_marker(line: str, lineno: int, document: Path) -> tuple[str, SnippetLocator]:
    """Match a single marker line, returning its indent and locator."""
    match = _MARKER_RE.match(line)
    if match is None:
        raise InvalidMarkerError(document, lineno, line)
    locator = SnippetLocator(path=match.group("path"), name=match.group("name"))
    return match.group("indent"), locator


def parse_block(cursor: LineCursor, line: str, lineno: int, document: Path) -> ParsedMarkerBlock:
    """Parse the marker *line* (already consumed) and the code fence after it.

    Consumes the opening fence, the body and the closing fence from *cursor*.
    A fence left open at the end of the document swallows the remaining lines
    and the returned block has ``closed`` set to False.  ``old_content`` has
    carriage returns removed from line ends; ``raw_lines`` keeps them.

    Raises
    ------
    InvalidMarkerError
        *line* does not match the marker grammar.
    MissingCodeFenceError
        The next line is missing or does not open a backtick fence.
    """
    indent, locator = parse_marker(line, lineno, document)

    fence_line = cursor.next()
    if fence_line is None:
        raise MissingCodeFenceError(lineno, document)
    fence_match = _FENCE_RE.match(fence_line.lstrip())
    if fence_match is None:
        raise MissingCodeFenceError(lineno, document)
    fence = fence_match.group()

    raw_lines = [line, fence_line]
    body: list[str] = []
    closed = False
    for inner in cursor:
        raw_lines.append(inner)
        if inner.strip() == fence:
            closed = True
            break
        body.append(inner[:-1] if inner.endswith("\r") else inner)

    return ParsedMarkerBlock(
        indent=indent,
        locator=locator,
        old_content="\n".join(body),
        line=lineno,
        fence=fence,
        closed=closed,
        raw_lines=raw_lines,
    )
