"""Tests for the ``snips`` command line."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from snips import __version__
from snips.cli import main
from snips.diff_format import format_diff
from snips.renderer import diff_file

if TYPE_CHECKING:
    from pathlib import Path

STALE_DOC = "<!-- snips: code.rs -->\n```\nold\n```\n"
FRESH_DOC = "<!-- snips: code.rs -->\n```rust\nfn main(){}\n```\n"


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory holding code.rs and a stale README.md."""
    (tmp_path / "code.rs").write_text("fn main(){}\n", encoding="utf-8")
    (tmp_path / "README.md").write_text(STALE_DOC, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Render (default mode)
# ---------------------------------------------------------------------------


class TestRender:
    def test_updates_discovered_files(self, project: Path) -> None:
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 0, result.output
        assert "README.md" in result.output
        assert "↳ code.rs [updated]" in result.output
        assert (project / "README.md").read_text(encoding="utf-8") == FRESH_DOC

    def test_in_sync_file_has_no_tag(self, project: Path) -> None:
        (project / "README.md").write_text(FRESH_DOC, encoding="utf-8")
        result = CliRunner().invoke(main, ["README.md"])
        assert result.exit_code == 0
        assert "↳ code.rs" in result.output
        assert "[updated]" not in result.output

    def test_no_snippets(self, project: Path) -> None:
        (project / "README.md").write_text("# Title\n", encoding="utf-8")
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 0
        assert "(no snippets found)" in result.output

    def test_quiet(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--quiet"])
        assert result.exit_code == 0
        assert result.output == ""
        assert "fn main(){}" in (project / "README.md").read_text(encoding="utf-8")

    def test_explicit_file_outside_discovery(self, project: Path) -> None:
        docs = project / "docs"
        docs.mkdir()
        (docs / "guide.md").write_text(
            "<!-- snips: ../code.rs -->\n```\nold\n```\n", encoding="utf-8"
        )
        result = CliRunner().invoke(main, ["docs/guide.md"])
        assert result.exit_code == 0, result.output
        assert "fn main(){}" in (docs / "guide.md").read_text(encoding="utf-8")
        assert "old" in (project / "README.md").read_text(encoding="utf-8")

    def test_error_does_not_stop_other_files(self, project: Path) -> None:
        broken = "<!-- snips: missing.rs -->\n```\n```\n"
        (project / "broken.md").write_text(broken, encoding="utf-8")
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1
        assert "Error: broken.md: file not found" in result.output
        assert "fn main(){}" in (project / "README.md").read_text(encoding="utf-8")

    def test_invalid_marker_reported(self, project: Path) -> None:
        (project / "README.md").write_text("<!-- snips: -->\n```\n```\n", encoding="utf-8")
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1
        assert "invalid marker format" in result.output
        assert "Expected format" in result.output

    def test_no_markdown_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1
        assert "no markdown files found" in result.output

    def test_missing_explicit_file(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["nope.md"])
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_language_override_from_config(self, project: Path) -> None:
        (project / ".snips.yml").write_text("languages:\n  rs: rs\n", encoding="utf-8")
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 0, result.output
        assert "```rs\n" in (project / "README.md").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Check
# ---------------------------------------------------------------------------


class TestCheck:
    def test_stale_fails_without_writing(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--check"])
        assert result.exit_code == 1
        assert "[out of sync]" in result.output
        assert (project / "README.md").read_text(encoding="utf-8") == STALE_DOC

    def test_clean_passes(self, project: Path) -> None:
        assert CliRunner().invoke(main, []).exit_code == 0
        result = CliRunner().invoke(main, ["--check"])
        assert result.exit_code == 0
        assert "[out of sync]" not in result.output

    def test_quiet_check_still_fails(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--check", "-q"])
        assert result.exit_code == 1
        assert result.output == ""


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


class TestDiff:
    def test_prints_line_diff(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--diff"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[:4] == ["--- code.rs", "+++ code.rs", "-old", "+fn main(){}"]
        assert (project / "README.md").read_text(encoding="utf-8") == STALE_DOC

    def test_output_matches_formatted_diff(self, project: Path) -> None:
        [diff] = diff_file(project / "README.md")
        result = CliRunner().invoke(main, ["--diff"])
        assert result.output == format_diff(diff) + "\n\n"

    def test_nothing_to_show(self, project: Path) -> None:
        (project / "README.md").write_text(FRESH_DOC, encoding="utf-8")
        result = CliRunner().invoke(main, ["--diff"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_error_exit_code(self, project: Path) -> None:
        doc = "<!-- snips: code.rs#nope -->\n```\n```\n"
        (project / "README.md").write_text(doc, encoding="utf-8")
        result = CliRunner().invoke(main, ["--diff"])
        assert result.exit_code == 1
        assert "snippet `nope` not found" in result.output


# ---------------------------------------------------------------------------
# Machine-readable formats
# ---------------------------------------------------------------------------


class TestFormats:
    def test_render_json(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mode"] == "render"
        assert data["summary"] == {"files": 1, "stale": 1, "errors": 0}
        [record] = data["files"]
        assert record["path"] == "README.md"
        assert record["snippets"] == [{"marker": "code.rs", "status": "updated"}]

    def test_check_json(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--check", "--format", "json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["mode"] == "check"
        assert data["files"][0]["snippets"][0]["status"] == "out_of_sync"

    def test_render_porcelain(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--format", "porcelain"])
        assert result.exit_code == 0
        assert result.output == "updated\tREADME.md\tcode.rs\n"

    def test_diff_json(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--diff", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["diffs"] == [
            {
                "file": "README.md",
                "path": "code.rs",
                "name": None,
                "old_content": "old",
                "new_content": "fn main(){}",
            }
        ]

    def test_diff_porcelain(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--diff", "--format", "porcelain"])
        assert result.exit_code == 0
        assert result.output == "README.md\tcode.rs\n"


# ---------------------------------------------------------------------------
# Flags and usage
# ---------------------------------------------------------------------------


class TestUsage:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--check" in result.output
        assert "--diff" in result.output
        assert "--watch" in result.output

    def test_check_and_diff_conflict(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["--check", "--diff"])
        assert result.exit_code == 2
        assert (project / "README.md").read_text(encoding="utf-8") == STALE_DOC

    @pytest.mark.parametrize("flag", ["--check", "--diff"])
    def test_watch_only_in_render_mode(self, project: Path, flag: str) -> None:
        result = CliRunner().invoke(main, ["--watch", flag])
        assert result.exit_code == 2

    def test_unknown_format(self) -> None:
        result = CliRunner().invoke(main, ["--format", "xml"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Watch
# ---------------------------------------------------------------------------


class TestWatch:
    def test_renders_then_starts_watcher(self, project: Path) -> None:
        with patch("snips.watcher.watch") as fake_watch:
            result = CliRunner().invoke(main, ["--watch", "--debounce", "50"])
        assert result.exit_code == 0, result.output
        assert "fn main(){}" in (project / "README.md").read_text(encoding="utf-8")
        fake_watch.assert_called_once()
        args, kwargs = fake_watch.call_args
        assert [p.name for p in args[0]] == ["README.md"]
        assert kwargs["debounce_ms"] == 50

    def test_missing_watchfiles(self, project: Path) -> None:
        with patch.dict("sys.modules", {"snips.watcher": None}):
            result = CliRunner().invoke(main, ["--watch"])
        assert result.exit_code == 1
        assert "watchfiles" in result.output

    def test_import_error_inside_watch_not_masked(self, project: Path) -> None:
        with patch("snips.watcher.watch", side_effect=ImportError("boom")):
            result = CliRunner().invoke(main, ["--watch"])
        assert isinstance(result.exception, ImportError)
        assert "watchfiles" not in result.output
