"""Shared test fixtures for snips."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def example(tmp_path: Path) -> Path:
    """A README.md with a stale whole-file marker pointing at code.rs."""
    (tmp_path / "code.rs").write_text("fn main(){}\n", encoding="utf-8")
    md = tmp_path / "README.md"
    md.write_text("<!-- snips: code.rs -->\n```\nold\n```\n", encoding="utf-8")
    return md
