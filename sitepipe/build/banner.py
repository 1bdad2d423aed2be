"""License banner stamped at the top of built CSS and JS."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sitepipe.build.config import BannerConfig, PackageMeta


def render_banner(
    package: PackageMeta,
    banner: Optional[BannerConfig] = None,
    year: Optional[int] = None,
) -> str:
    """Render the ``/*! ... */`` banner followed by a blank line.

    The ``/*!`` opener marks the comment as one minifiers must keep.
    """
    if banner is None:
        banner = BannerConfig()
    if year is None:
        year = date.today().year

    return "".join([
        "/*!\n",
        f" * {banner.organization} - {package.display_name} v{package.version} ({package.homepage})\n",
        f" * Copyright {banner.since}-{year}\n",
        f" * Licensed under {banner.license_url}\n",
        " */\n",
        "\n",
    ])


def stamp(content: str, banner_text: str) -> str:
    return banner_text + content
