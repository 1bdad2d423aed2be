"""
Helpers for building throwaway sitepipe projects in tests.
"""

from __future__ import annotations

import json
from pathlib import Path


# =============================================================================
# Test Data Constants
# =============================================================================

PACKAGE_JSON = {
    "title": "Agency Theme",
    "name": "agency-theme",
    "version": "5.2.1",
    "homepage": "https://example.com/agency",
}

# (path relative to node_modules, content)
NODE_MODULES_FILES: list[tuple[str, str]] = [
    ("bootstrap/dist/css/bootstrap.css", ".btn { display: inline-block; }\n"),
    ("bootstrap/dist/css/bootstrap.min.css", ".btn{display:inline-block}"),
    ("bootstrap/dist/js/bootstrap.bundle.js", "/* bootstrap */\nvar bs = 1;\n"),
    ("bootstrap/package.json", '{"name": "bootstrap"}'),
    ("jquery.easing/jquery.easing.js", "/* easing */\nvar easing = 1;\n"),
    ("jquery.easing/jquery.easing.compatibility.js", "var compat = 1;\n"),
    ("jquery.easing/README.md", "# easing\n"),
    ("jquery/dist/jquery.js", "/* jquery */\nvar $ = 1;\n"),
    ("jquery/dist/jquery.min.js", "var $=1;"),
    ("jquery/dist/core.js", "var core = 1;\n"),
]

STYLE_SCSS = "body { color: red; }\n"

APP_JS = """\
// Smooth scrolling
function add(first, second) {
  return first + second;
}
"""


class FakeReloader:
    """Records live-reload notifications instead of sending them."""

    def __init__(self) -> None:
        self.css_reloads: list[str | None] = []
        self.reloads = 0

    def notify_css_reload(self, filename: str | None = None) -> None:
        self.css_reloads.append(filename)

    def notify_reload(self) -> None:
        self.reloads += 1


# =============================================================================
# Project Factory
# =============================================================================


def write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


def make_project(root: Path) -> Path:
    write(root / "package.json", json.dumps(PACKAGE_JSON))

    for rel, content in NODE_MODULES_FILES:
        write(root / "node_modules" / rel, content)

    write(root / "scss" / "style.scss", STYLE_SCSS)

    write(root / "js" / "app.js", APP_JS)
    write(root / "js" / "contact_me.js", "var contact = 1;\n")
    write(root / "js" / "jqBootstrapValidation.js", "var validation = 1;\n")

    write(root / "index.html", "<html><body><h1>Home</h1></body></html>\n")
    write(root / "about.html", "<html><body><h1>About</h1></body></html>\n")
    write(root / "images" / "logo.png", b"\x89PNG\r\n\x1a\n")
    write(root / "images" / "header.jpg", b"\xff\xd8\xff")

    return root


def snapshot(directory: Path) -> dict[str, bytes]:
    """Map of relative path -> bytes for every file under directory."""
    return {
        p.relative_to(directory).as_posix(): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


