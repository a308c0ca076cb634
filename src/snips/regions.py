"""Region extractor: pull named ``snips-start``/``snips-end`` spans out of source files.

A region is declared in a source file with a pair of line comments::

    // snips-start: connect
    let client = Client::new();
    // snips-end: connect

The end marker may also be written as ``snips-end:`` or plain ``snips-end``,
which closes whatever region is currently open.  Regions do not nest.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass
from typing import TYPE_CHECKING

from snips.errors import (
    MissingFileError,
    RegionNotFoundError,
    SnipsIOError,
    UnterminatedRegionError,
)
from snips.languages import language_for

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

# Allowed characters for region identifiers.
REGION_ID = r"[\w-]+"

_START_RE = re.compile(rf"snips-start:\s*(?P<name>{REGION_ID})\s*$")
_END_RE = re.compile(rf"snips-end(?::(?:\s*(?P<name>{REGION_ID}))?)?\s*$")


@dataclass(frozen=True)
class Extract:
    """Content pulled from a source file plus its fence language hint."""

    content: str
    language: str | None = None


def _source_lines(source_text: str) -> list[str]:
    """Split on line feeds only, dropping a trailing carriage return from each line."""
    return [line[:-1] if line.endswith("\r") else line for line in source_text.split("\n")]


def list_regions(source_text: str) -> list[str]:
    """Return every region name declared by a start marker, in file order."""
    names: list[str] = []
    for line in _source_lines(source_text):
        match = _START_RE.search(line)
        if match:
            names.append(match.group("name"))
    return names


def extract(
    source_text: str,
    region: str | None = None,
    source_id: Path | str = "<source>",
) -> str:
    """Extract *region* from *source_text*, or the whole text when *region* is None.

    The result is dedented: whitespace shared by every non-blank line is
    removed, and whitespace-only lines become empty.

    Raises
    ------
    RegionNotFoundError
        No start marker declares *region*.
    UnterminatedRegionError
        The start marker is never closed by ``snips-end`` (unnamed or with
        the same name).
    """
    if region is None:
        return textwrap.dedent(source_text)

    collected: list[str] = []
    found = False
    for line in _source_lines(source_text):
        if not found:
            start = _START_RE.search(line)
            if start and start.group("name") == region:
                found = True
            continue

        end = _END_RE.search(line)
        if end and end.group("name") in (None, region):
            return textwrap.dedent("\n".join(collected))
        collected.append(line)

    if found:
        raise UnterminatedRegionError(source_id, region)
    raise RegionNotFoundError(source_id, region, list_regions(source_text))


def read_snippet(
    path: Path,
    name: str | None = None,
    languages: Mapping[str, str] | None = None,
) -> Extract:
    """Read *path* from disk and extract the region *name* from it.

    *languages* overrides entries of the built-in extension table.
    """
    try:
        source_text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise MissingFileError(path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise SnipsIOError(path, exc) from exc

    content = extract(source_text, name, path)
    logger.debug("Extracted %s#%s (%d lines)", path, name or "", len(content.splitlines()))
    return Extract(content=content, language=language_for(path, languages))
