"""
Tests for glob matching, glob bases and file selection.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from helpers import write
from sitepipe.build.files import (
    copy_selection,
    glob_base,
    match_glob,
    min_name,
    remove_tree,
    select_files,
)


@pytest.mark.evergreen
class TestMatchGlob:
    """match_glob follows slash-aware glob semantics."""

    @pytest.mark.parametrize(
        "path, pattern, expected",
        [
            ("js/app.js", "js/*.js", True),
            ("js/lib/app.js", "js/*.js", False),
            ("js/app.min.js", "js/*.min.js", True),
            ("index.html", "**/*.html", True),
            ("pages/deep/about.html", "**/*.html", True),
            ("scss/_vars.scss", "scss/**/*", True),
            ("dist/index.html", "dist/**", True),
            ("distant/index.html", "dist/**", False),
            ("js/a.js", "js/?.js", True),
            ("js/ab.js", "js/[!a]b.js", False),
        ],
    )
    def test_patterns(self, path: str, pattern: str, expected: bool) -> None:
        assert match_glob(path, pattern) is expected


@pytest.mark.evergreen
class TestGlobBase:
    """glob_base returns the static directory before the first wildcard."""

    def test_recursive_pattern(self) -> None:
        assert glob_base("bootstrap/dist/**/*") == "bootstrap/dist"

    def test_flat_pattern(self) -> None:
        assert glob_base("jquery/dist/*") == "jquery/dist"

    def test_root_pattern(self) -> None:
        assert glob_base("*.html") == ""


@pytest.mark.evergreen
class TestSelectFiles:
    """select_files keeps paths relative to each glob base."""

    def test_recursive_keeps_structure(self, tmp_path: Path) -> None:
        write(tmp_path / "pkg/dist/css/a.css", "a")
        write(tmp_path / "pkg/dist/js/b.js", "b")

        selection = select_files(tmp_path, ["pkg/dist/**/*"])

        assert [str(rel) for _, rel in selection] == ["css/a.css", "js/b.js"]

    def test_excludes_applied(self, tmp_path: Path) -> None:
        write(tmp_path / "lib/keep.js", "k")
        write(tmp_path / "lib/core.js", "c")

        selection = select_files(tmp_path, ["lib/*"], ["lib/core.js"])

        assert [str(rel) for _, rel in selection] == ["keep.js"]

    def test_directories_skipped(self, tmp_path: Path) -> None:
        write(tmp_path / "images/nested/deep.png", "x")
        write(tmp_path / "images/top.png", "x")

        selection = select_files(tmp_path, ["images/*"])

        assert [str(rel) for _, rel in selection] == ["top.png"]

    def test_no_match_is_empty(self, tmp_path: Path) -> None:
        assert select_files(tmp_path, ["missing/**/*"]) == []


@pytest.mark.evergreen
class TestCopyAndRemove:

    def test_copy_selection_creates_dirs(self, tmp_path: Path) -> None:
        src = write(tmp_path / "src/a.txt", "hello")
        dest = tmp_path / "out"

        written = copy_selection([(src, PurePosixPath("x/y/a.txt"))], dest)

        assert written == [dest / "x" / "y" / "a.txt"]
        assert written[0].read_text() == "hello"

    def test_remove_tree(self, tmp_path: Path) -> None:
        write(tmp_path / "tree/a/b.txt", "x")
        assert remove_tree(tmp_path / "tree") is True
        assert not (tmp_path / "tree").exists()
        assert remove_tree(tmp_path / "tree") is False

    def test_min_name(self) -> None:
        assert min_name(Path("css/style.css")) == Path("css/style.min.css")
        assert min_name(Path("js/app.js")) == Path("js/app.min.js")
