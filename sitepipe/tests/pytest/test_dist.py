"""
Tests for the distribution copy: dist/ assembly and stale-file removal.
"""

from __future__ import annotations

import pytest

from helpers import snapshot, write
from sitepipe.build.config import BuildConfig
from sitepipe.build.dist import clean_dist, copy_css, copy_html, copy_images
from sitepipe.build.orchestrator import BuildOrchestrator


@pytest.fixture
def built(config: BuildConfig) -> BuildConfig:
    """Project with compiled css/ output in place."""
    write(config.css_dir / "style.css", "body {\n  color: red;\n}\n")
    write(config.css_dir / "style.min.css", "body{color:red}")
    write(config.css_dir / "pages" / "about.min.css", ".about{margin:0}")
    return config


# =============================================================================
# Individual Copy Tests
# =============================================================================


@pytest.mark.evergreen
class TestDistCopies:

    def test_copy_html_root_only(self, built: BuildConfig) -> None:
        write(built.project_root / "partials" / "nav.html", "<nav></nav>")

        copy_html(built)

        assert sorted(p.name for p in built.dist_dir.iterdir()) == ["about.html", "index.html"]

    def test_copy_css_only_minified(self, built: BuildConfig) -> None:
        copy_css(built)

        css = built.dist_dir / "css"
        assert (css / "style.min.css").exists()
        assert (css / "pages" / "about.min.css").exists()
        assert not (css / "style.css").exists()

    def test_copy_images(self, built: BuildConfig) -> None:
        copy_images(built)

        images = built.dist_dir / "images"
        assert sorted(p.name for p in images.iterdir()) == ["header.jpg", "logo.png"]
        assert (images / "logo.png").read_bytes() == b"\x89PNG\r\n\x1a\n"

    def test_clean_dist(self, built: BuildConfig) -> None:
        copy_html(built)
        assert clean_dist(built) is True
        assert not built.dist_dir.exists()
        assert clean_dist(built) is False


# =============================================================================
# Composite Tests
# =============================================================================


@pytest.mark.evergreen
class TestDistributionCopy:
    """distribution-copy = clean, then parallel copies."""

    def test_full_layout(self, built: BuildConfig) -> None:
        assert BuildOrchestrator(built).run("distribution-copy", quiet=True)

        assert sorted(snapshot(built.dist_dir)) == [
            "about.html",
            "css/pages/about.min.css",
            "css/style.min.css",
            "images/header.jpg",
            "images/logo.png",
            "index.html",
        ]

    def test_stale_files_removed(self, built: BuildConfig) -> None:
        write(built.dist_dir / "old-page.html", "stale")
        write(built.dist_dir / "css" / "removed.min.css", "stale")

        assert BuildOrchestrator(built).run("dist", quiet=True)

        files = snapshot(built.dist_dir)
        assert "old-page.html" not in files
        assert "css/removed.min.css" not in files
        assert "index.html" in files

    def test_placeholders_copy_nothing(self, built: BuildConfig) -> None:
        write(built.js_dir / "app.min.js", "var a=1;")
        write(built.vendor_dir / "jquery" / "jquery.js", "var $;")

        assert BuildOrchestrator(built).run("distribution-copy", quiet=True)

        assert not (built.dist_dir / "js").exists()
        assert not (built.dist_dir / "vendor").exists()
