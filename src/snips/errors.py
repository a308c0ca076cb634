"""Errors raised while scanning documents and extracting snippets."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pathlib import Path

MARKER_HELP = (
    "Expected format: <!-- snips: path/to/file.ext --> "
    "or <!-- snips: path/to/file.ext#snippet_name -->"
)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class SnipsError(Exception):
    """Base class for every failure the snippet engine reports.

    Each subclass carries a ``kind`` tag plus structured attributes so callers
    can branch on the failure without parsing the message.
    """

    kind: ClassVar[str] = "error"

    def to_dict(self) -> dict[str, object]:
        """Structured payload used by machine-readable output."""
        return {"kind": self.kind, "message": str(self)}


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


class MissingFileError(SnipsError):
    """A document or referenced source file does not exist."""

    kind = "file_not_found"

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"file not found: {path}")

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "path": str(self.path)}


class SnipsIOError(SnipsError):
    """Any other filesystem failure."""

    kind = "io"

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"IO error: {cause}")

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "path": str(self.path)}


class NoMarkdownFilesError(SnipsError):
    """File discovery found nothing to process."""

    kind = "no_markdown_files"

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"no markdown files found in {directory}")

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "directory": str(self.directory)}


# ---------------------------------------------------------------------------
# Document syntax
# ---------------------------------------------------------------------------


class InvalidMarkerError(SnipsError):
    """A line looks like a marker but does not match the marker grammar."""

    kind = "invalid_marker"

    def __init__(self, file: Path, line: int, content: str) -> None:
        self.file = file
        self.line = line
        self.content = content
        super().__init__(f"invalid marker format in {file}:{line}\n  {content}\n  {MARKER_HELP}")

    def to_dict(self) -> dict[str, object]:
        return {
            **super().to_dict(),
            "file": str(self.file),
            "line": self.line,
            "content": self.content,
        }


class MissingCodeFenceError(SnipsError):
    """A marker is not immediately followed by an opening code fence."""

    kind = "missing_code_fence"

    def __init__(self, line: int, file: Path | None = None) -> None:
        self.line = line
        self.file = file
        super().__init__(f"marker not followed by code fence: line {line}")

    def to_dict(self) -> dict[str, object]:
        file = str(self.file) if self.file is not None else None
        return {**super().to_dict(), "file": file, "line": self.line}


# ---------------------------------------------------------------------------
# Source regions
# ---------------------------------------------------------------------------


class RegionNotFoundError(SnipsError):
    """The requested region name is not declared in the source file."""

    kind = "region_not_found"

    def __init__(self, file: Path | str, name: str, available: list[str]) -> None:
        self.file = file
        self.name = name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "none"
        super().__init__(f"snippet `{name}` not found in {file}\nAvailable snippets: {listing}")

    def to_dict(self) -> dict[str, object]:
        return {
            **super().to_dict(),
            "file": str(self.file),
            "name": self.name,
            "available": self.available,
        }


class UnterminatedRegionError(SnipsError):
    """A region start marker has no matching end marker."""

    kind = "unterminated_region"

    def __init__(self, file: Path | str, name: str) -> None:
        self.file = file
        self.name = name
        super().__init__(f"unterminated snippet `{name}` in {file}")

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "file": str(self.file), "name": self.name}
