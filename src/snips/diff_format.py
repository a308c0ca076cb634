"""Line-level diff text for ``snips --diff``."""

from __future__ import annotations

import difflib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snips.renderer import SnippetDiff


def line_changes(old: str, new: str) -> list[str]:
    """Return every line of *old* and *new* prefixed with ``-``, ``+`` or a space.

    Unlike :func:`difflib.unified_diff` the full text is kept, without hunk
    headers, so short snippets read top to bottom.
    """
    old_lines = old.split("\n") if old else []
    new_lines = new.split("\n") if new else []
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

    out: list[str] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            out.extend(f" {line}" for line in old_lines[i1:i2])
            continue
        # "replace" shows removals before insertions.
        out.extend(f"-{line}" for line in old_lines[i1:i2])
        out.extend(f"+{line}" for line in new_lines[j1:j2])
    return out


def format_diff(diff: SnippetDiff) -> str:
    """Render one stale snippet as a ``---``/``+++`` block."""
    marker = diff.marker()
    lines = [f"--- {marker}", f"+++ {marker}"]
    lines.extend(line_changes(diff.old_content, diff.new_content))
    return "\n".join(lines)
