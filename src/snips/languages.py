"""Extension to code-fence language hint lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

# Keys are lowercase extensions without the leading dot.
LANGUAGE_HINTS: dict[str, str] = {
    "bash": "shell",
    "c": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "cs": "csharp",
    "css": "css",
    "cxx": "cpp",
    "dart": "dart",
    "diff": "diff",
    "dockerfile": "dockerfile",
    "ex": "elixir",
    "exs": "elixir",
    "go": "go",
    "h": "c",
    "hpp": "cpp",
    "hs": "haskell",
    "html": "html",
    "ini": "ini",
    "java": "java",
    "js": "javascript",
    "json": "json",
    "jsx": "jsx",
    "kt": "kotlin",
    "kts": "kotlin",
    "lua": "lua",
    "m": "objectivec",
    "md": "markdown",
    "mjs": "javascript",
    "php": "php",
    "pl": "perl",
    "proto": "protobuf",
    "py": "python",
    "pyi": "python",
    "r": "r",
    "rb": "ruby",
    "rs": "rust",
    "scala": "scala",
    "sh": "shell",
    "sql": "sql",
    "swift": "swift",
    "toml": "toml",
    "ts": "typescript",
    "tsx": "tsx",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
    "zig": "zig",
    "zsh": "shell",
}


def language_for(path: Path, overrides: Mapping[str, str] | None = None) -> str | None:
    """Return the fence language hint for *path*, or None when unknown.

    *overrides* (typically from ``.snips.yml``) take precedence over the
    built-in table.
    """
    ext = path.suffix.lstrip(".").lower()
    if not ext:
        return None
    if overrides and ext in overrides:
        return overrides[ext] or None
    return LANGUAGE_HINTS.get(ext)
