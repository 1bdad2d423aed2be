"""
Script build for sitepipe.

js/*.js -> js/*.min.js, minus already-minified files and the explicitly
excluded ones.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import rjsmin

from sitepipe.build.banner import render_banner, stamp
from sitepipe.build.config import SCRIPT_SOURCES, BuildConfig
from sitepipe.build.files import min_name, select_files, write_text
from sitepipe.core.errors import ScriptBuildError
from sitepipe.core.utils import log, plural

if TYPE_CHECKING:
    from sitepipe.commands.dev import ReloadBroadcaster


def find_script_sources(config: BuildConfig) -> list[Path]:
    selection = select_files(config.project_root, [SCRIPT_SOURCES], config.script_excludes)
    return [source for source, _ in selection]


def minify_js(script: str) -> str:
    return rjsmin.jsmin(script)


def build_scripts(
    config: BuildConfig,
    reloader: Optional["ReloadBroadcaster"] = None,
) -> list[Path]:
    """Minify and banner each script. Returns the written .min.js paths.

    Nothing is written unless every source decodes as UTF-8.
    """
    sources: dict[Path, str] = {}
    errors: dict[str, str] = {}
    for source in find_script_sources(config):
        rel = source.relative_to(config.project_root).as_posix()
        try:
            sources[source] = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            errors[rel] = str(e)
            log.error(f"{rel}: {e}")

    if errors:
        raise ScriptBuildError(errors)

    banner_text = render_banner(config.package, config.banner)
    written = []
    for source, script in sources.items():
        target = min_name(source)
        write_text(target, stamp(minify_js(script), banner_text))
        written.append(target)
        log.dim(f"{source.name} -> {target.name}")

    if written and reloader is not None:
        reloader.notify_reload()

    log.info(f"Built {plural(len(written), 'script')}")
    return written
