"""snips - keep markdown code blocks in sync with source files."""

from snips.errors import (
    InvalidMarkerError,
    MissingCodeFenceError,
    MissingFileError,
    NoMarkdownFilesError,
    RegionNotFoundError,
    SnipsError,
    SnipsIOError,
    UnterminatedRegionError,
)
from snips.markers import ParsedMarkerBlock, SnippetLocator
from snips.regions import Extract, extract, list_regions, read_snippet
from snips.renderer import (
    RenderOutcome,
    SnippetDiff,
    SnippetReport,
    check_files,
    diff_file,
    diff_text,
    render_file,
    render_text,
)

__version__ = "0.4.0"

__all__ = [
    "Extract",
    "InvalidMarkerError",
    "MissingCodeFenceError",
    "MissingFileError",
    "NoMarkdownFilesError",
    "ParsedMarkerBlock",
    "RegionNotFoundError",
    "RenderOutcome",
    "SnippetDiff",
    "SnippetLocator",
    "SnippetReport",
    "SnipsError",
    "SnipsIOError",
    "UnterminatedRegionError",
    "__version__",
    "check_files",
    "diff_file",
    "diff_text",
    "extract",
    "list_regions",
    "read_snippet",
    "render_file",
    "render_text",
]
