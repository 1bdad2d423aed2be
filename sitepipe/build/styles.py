"""
Style build for sitepipe.

scss/**/*.scss -> css/**/*.css (expanded, prefixed, bannered) and
css/**/*.min.css (minified). Nothing is written unless every source
compiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import rcssmin
import sass

from sitepipe.build.banner import render_banner, stamp
from sitepipe.build.config import STYLE_SOURCES, BuildConfig
from sitepipe.build.files import min_name, write_text
from sitepipe.build.prefixer import autoprefix
from sitepipe.core.errors import StyleBuildError
from sitepipe.core.utils import log, plural

if TYPE_CHECKING:
    from sitepipe.commands.dev import ReloadBroadcaster


@dataclass
class StyleOutput:
    """Paths written for one compiled source."""

    source: Path
    expanded: Path
    minified: Path


def find_style_sources(config: BuildConfig) -> list[Path]:
    """All .scss files under scss/, skipping partials (``_name.scss``)."""
    return sorted(
        path
        for path in config.project_root.glob(STYLE_SOURCES)
        if path.is_file() and not path.name.startswith("_")
    )


def compile_scss(source: Path, config: BuildConfig) -> str:
    """Compile one source to expanded CSS. Raises sass.CompileError."""
    return sass.compile(
        filename=str(source),
        output_style="expanded",
        include_paths=[str(config.node_modules_dir), str(config.scss_dir)],
    )


def minify_css(css: str) -> str:
    return rcssmin.cssmin(css, keep_bang_comments=True)


def build_styles(
    config: BuildConfig,
    reloader: Optional["ReloadBroadcaster"] = None,
) -> list[StyleOutput]:
    """Compile, prefix, banner and minify every style source."""
    sources = find_style_sources(config)
    if not sources:
        log.warning(f"No style sources matched {STYLE_SOURCES}")
        return []

    compiled: dict[Path, str] = {}
    errors: dict[str, str] = {}
    for source in sources:
        rel = source.relative_to(config.project_root).as_posix()
        try:
            compiled[source] = compile_scss(source, config)
        except (sass.CompileError, UnicodeDecodeError) as e:
            errors[rel] = str(e)
            log.error(f"{rel}: {e}")

    if errors:
        raise StyleBuildError(errors)

    banner_text = render_banner(config.package, config.banner)
    outputs = []
    for source, css in compiled.items():
        rel = source.relative_to(config.scss_dir).with_suffix(".css")
        expanded_path = config.css_dir / rel
        expanded = stamp(autoprefix(css), banner_text)
        write_text(expanded_path, expanded)

        minified_path = min_name(expanded_path)
        write_text(minified_path, minify_css(expanded))

        outputs.append(StyleOutput(source, expanded_path, minified_path))
        log.dim(f"{rel.as_posix()} -> {minified_path.name}")

        if reloader is not None:
            reloader.notify_css_reload(minified_path.name)

    log.info(f"Built {plural(len(outputs), 'stylesheet')}")
    return outputs
