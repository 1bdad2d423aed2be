"""
Distribution copy for sitepipe.

Assembles dist/ from the HTML pages, minified stylesheets and images.
Script and vendor copies are registered as unspecified placeholders in
the task registry and have no function here.
"""

from __future__ import annotations

from pathlib import Path

from sitepipe.build.config import BuildConfig
from sitepipe.build.files import copy_selection, remove_tree, select_files
from sitepipe.core.utils import log, plural

DIST_HTML = "*.html"
DIST_CSS = "css/**/*.min.css"
DIST_IMAGES = "images/*"


def clean_dist(config: BuildConfig) -> bool:
    """Delete the distribution tree. Returns True if it existed."""
    removed = remove_tree(config.dist_dir)
    if removed:
        log.info(f"Removed {config.dist_dir}")
    return removed


def _copy(config: BuildConfig, pattern: str, dest: Path, label: str) -> list[Path]:
    selection = select_files(config.project_root, [pattern])
    written = copy_selection(selection, dest)
    log.info(f"{label}: {plural(len(written), 'file')} -> {dest.relative_to(config.project_root).as_posix()}")
    return written


def copy_html(config: BuildConfig) -> list[Path]:
    return _copy(config, DIST_HTML, config.dist_dir, "html")


def copy_css(config: BuildConfig) -> list[Path]:
    return _copy(config, DIST_CSS, config.dist_dir / "css", "css")


def copy_images(config: BuildConfig) -> list[Path]:
    return _copy(config, DIST_IMAGES, config.dist_dir / "images", "images")
