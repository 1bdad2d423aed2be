"""
Shared pytest fixtures for sitepipe tests.

Builds a throwaway front-end project in tmp_path with a populated
node_modules/ cache, SCSS and JS sources, pages and images.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip (production tests)
  @pytest.mark.network   - Tests that bind local sockets
"""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers import FakeReloader, make_project
from sitepipe.build.config import BuildConfig, load_config
from sitepipe.core.utils import log


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _no_color() -> None:
    log.set_color(False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A complete project tree under tmp_path."""
    return make_project(tmp_path / "site")


@pytest.fixture
def config(project: Path) -> BuildConfig:
    return load_config(project)


@pytest.fixture
def reloader() -> FakeReloader:
    return FakeReloader()


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )
    config.addinivalue_line(
        "markers",
        "network: tests that bind local sockets"
    )
