"""Documentation file discovery."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from snips.config import SnipsConfig
from snips.errors import NoMarkdownFilesError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


def is_markdown(path: Path, extensions: Iterable[str] = ("md", "markdown")) -> bool:
    """Check the suffix of *path* against *extensions*, ignoring case."""
    return path.suffix.lstrip(".").lower() in set(extensions)


def _excluded(rel: Path, exclude: Sequence[str]) -> bool:
    """Skip excluded and hidden directories; *rel* is relative to the root."""
    return any(part in exclude or part.startswith(".") for part in rel.parts[:-1])


def discover(root: Path, config: SnipsConfig | None = None) -> list[Path]:
    """List documentation files under *root*, sorted by path."""
    config = config or SnipsConfig()
    if config.recursive:
        candidates = (
            p for p in root.rglob("*") if not _excluded(p.relative_to(root), config.exclude)
        )
    else:
        candidates = root.iterdir()
    return sorted(p for p in candidates if p.is_file() and is_markdown(p, config.extensions))


def resolve_files(
    files: Sequence[Path],
    cwd: Path | None = None,
    config: SnipsConfig | None = None,
) -> list[Path]:
    """Return *files* as given, or discover documents in *cwd* when none are.

    Raises
    ------
    NoMarkdownFilesError
        Nothing was given and discovery found no documents.
    """
    if files:
        return list(files)

    root = cwd or Path.cwd()
    found = discover(root, config)
    if not found:
        raise NoMarkdownFilesError(root)
    return found
