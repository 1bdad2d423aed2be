"""
Tests for the script build: include/exclude selection, minification and
banner stamping.
"""

from __future__ import annotations

import pytest

from helpers import FakeReloader, write
from sitepipe.build.banner import render_banner
from sitepipe.build.config import BannerConfig, BuildConfig, PackageMeta
from sitepipe.build.orchestrator import BuildOrchestrator
from sitepipe.build.scripts import build_scripts, find_script_sources
from sitepipe.core.errors import ScriptBuildError


# =============================================================================
# Banner Tests
# =============================================================================


@pytest.mark.evergreen
class TestBanner:

    def test_render_banner(self) -> None:
        meta = PackageMeta(name="x", title="Agency", version="1.2.3", homepage="https://a.b")
        assert render_banner(meta, year=2026) == (
            "/*!\n"
            " * Power Set Solutions - Agency v1.2.3 (https://a.b)\n"
            " * Copyright 2019-2026\n"
            " * Licensed under https://powersettech.com\n"
            " */\n"
            "\n"
        )

    def test_custom_banner_config(self) -> None:
        meta = PackageMeta(name="plain", version="0.1.0")
        banner = BannerConfig(organization="Acme", since=2024, license_url="MIT")
        text = render_banner(meta, banner, year=2025)
        assert " * Acme - plain v0.1.0 ()\n" in text
        assert " * Copyright 2024-2025\n" in text
        assert " * Licensed under MIT\n" in text


# =============================================================================
# Selection Tests
# =============================================================================


@pytest.mark.evergreen
class TestScriptSelection:
    """js/*.js minus *.min.js and the two named files."""

    def test_named_excludes(self, config: BuildConfig) -> None:
        names = [p.name for p in find_script_sources(config)]
        assert names == ["app.js"]

    def test_min_files_excluded(self, config: BuildConfig) -> None:
        write(config.js_dir / "legacy.min.js", "var a=1;")
        names = [p.name for p in find_script_sources(config)]
        assert "legacy.min.js" not in names

    def test_subdirectories_not_included(self, config: BuildConfig) -> None:
        write(config.js_dir / "lib" / "nested.js", "var n = 1;")
        names = [p.name for p in find_script_sources(config)]
        assert "nested.js" not in names


# =============================================================================
# Build Tests
# =============================================================================


@pytest.mark.evergreen
class TestScriptBuild:

    def test_one_output_per_included_source(self, config: BuildConfig) -> None:
        write(config.js_dir / "agency.js", "var agency = 1;\n")

        written = build_scripts(config)

        assert sorted(p.name for p in written) == ["agency.min.js", "app.min.js"]
        assert not (config.js_dir / "contact_me.min.js").exists()
        assert not (config.js_dir / "jqBootstrapValidation.min.js").exists()

    def test_output_is_minified_and_bannered(self, config: BuildConfig) -> None:
        build_scripts(config)

        out = (config.js_dir / "app.min.js").read_text()

        assert out.startswith("/*!\n * Power Set Solutions - Agency Theme v5.2.1")
        assert "return first+second" in out
        assert "Smooth scrolling" not in out

    def test_rebuild_does_not_minify_outputs(self, config: BuildConfig) -> None:
        build_scripts(config)
        build_scripts(config)
        assert not (config.js_dir / "app.min.min.js").exists()

    def test_reloader_gets_full_reload(self, config: BuildConfig, reloader: FakeReloader) -> None:
        build_scripts(config, reloader)
        assert reloader.reloads == 1
        assert reloader.css_reloads == []


# =============================================================================
# Error Tests
# =============================================================================


@pytest.mark.evergreen
class TestScriptBuildErrors:
    """A source that is not UTF-8 fails the build and writes nothing."""

    def test_undecodable_source_raises(self, config: BuildConfig) -> None:
        write(config.js_dir / "bad.js", b"var a = '\xff';\n")

        with pytest.raises(ScriptBuildError) as excinfo:
            build_scripts(config)

        assert list(excinfo.value.errors) == ["js/bad.js"]
        assert not (config.js_dir / "app.min.js").exists()

    def test_orchestrator_reports_failure(self, config: BuildConfig) -> None:
        write(config.js_dir / "bad.js", b"var a = '\xff';\n")

        assert BuildOrchestrator(config).run("script-build", quiet=True) is False
