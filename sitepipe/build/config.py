"""
Build configuration for sitepipe.

Constants, dataclasses, and project config loading.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from sitepipe.core.errors import ConfigError

__all__ = [
    "DEFAULT_PORT",
    "SCRIPT_SOURCES",
    "SCRIPT_EXCLUDES",
    "STYLE_SOURCES",
    "CONFIG_FILENAME",
    "PackageMeta",
    "BannerConfig",
    "VendorDependency",
    "BuildConfig",
    "default_vendor_dependencies",
    "load_package_meta",
    "load_config",
]

# =============================================================================
# Constants
# =============================================================================

DEFAULT_PORT = 3000

# Globs are relative to the project root
STYLE_SOURCES = "scss/**/*.scss"
SCRIPT_SOURCES = "js/*.js"
SCRIPT_EXCLUDES = (
    "js/*.min.js",
    "js/contact_me.js",
    "js/jqBootstrapValidation.js",
)

CONFIG_FILENAME = "sitepipe.yaml"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class PackageMeta:
    """The subset of package.json used for banners."""

    name: str
    version: str
    title: str = ""
    homepage: str = ""

    @property
    def display_name(self) -> str:
        return self.title or self.name


@dataclass
class BannerConfig:
    """Fixed parts of the license banner."""

    organization: str = "Power Set Solutions"
    since: int = 2019
    license_url: str = "https://powersettech.com"


@dataclass
class VendorDependency:
    """A pinned third-party package copied from node_modules into vendor/.

    ``sources`` and ``excludes`` are globs relative to node_modules.
    """

    name: str
    sources: list[str]
    dest: str
    excludes: list[str] = field(default_factory=list)


def default_vendor_dependencies() -> list[VendorDependency]:
    return [
        VendorDependency(
            name="bootstrap",
            sources=["bootstrap/dist/**/*"],
            dest="bootstrap",
        ),
        VendorDependency(
            name="jquery-easing",
            sources=["jquery.easing/*.js"],
            dest="jquery-easing",
        ),
        VendorDependency(
            name="jquery",
            sources=["jquery/dist/*"],
            excludes=["jquery/dist/core.js"],
            dest="jquery",
        ),
    ]


@dataclass
class BuildConfig:
    """Configuration for a build run."""

    project_root: Path
    package: PackageMeta
    banner: BannerConfig = field(default_factory=BannerConfig)
    vendor_dependencies: list[VendorDependency] = field(
        default_factory=default_vendor_dependencies
    )
    script_excludes: list[str] = field(default_factory=lambda: list(SCRIPT_EXCLUDES))
    port: int = DEFAULT_PORT

    @property
    def node_modules_dir(self) -> Path:
        return self.project_root / "node_modules"

    @property
    def vendor_dir(self) -> Path:
        return self.project_root / "vendor"

    @property
    def scss_dir(self) -> Path:
        return self.project_root / "scss"

    @property
    def css_dir(self) -> Path:
        return self.project_root / "css"

    @property
    def js_dir(self) -> Path:
        return self.project_root / "js"

    @property
    def images_dir(self) -> Path:
        return self.project_root / "images"

    @property
    def dist_dir(self) -> Path:
        return self.project_root / "dist"


# =============================================================================
# Loading
# =============================================================================


def load_package_meta(project_root: Path) -> PackageMeta:
    """Read name, title, version and homepage from package.json."""
    package_json = project_root / "package.json"

    if not package_json.exists():
        raise ConfigError(f"package.json not found in {project_root}")

    try:
        data = json.loads(package_json.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"package.json is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("name"):
        raise ConfigError("package.json missing required 'name' field")

    return PackageMeta(
        name=str(data["name"]),
        version=str(data.get("version", "0.0.0")),
        title=str(data.get("title", "")),
        homepage=str(data.get("homepage", "")),
    )


def _as_str_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"{CONFIG_FILENAME}: '{key}' must be a string or list of strings")


def _parse_vendor(entries: Any) -> list[VendorDependency]:
    if not isinstance(entries, list):
        raise ConfigError(f"{CONFIG_FILENAME}: 'vendor' must be a list")

    deps = []
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry or "src" not in entry:
            raise ConfigError(f"{CONFIG_FILENAME}: vendor entries need 'name' and 'src'")
        name = str(entry["name"])
        deps.append(VendorDependency(
            name=name,
            sources=_as_str_list(entry["src"], f"vendor.{name}.src"),
            excludes=_as_str_list(entry.get("exclude", []), f"vendor.{name}.exclude"),
            dest=str(entry.get("dest", name)),
        ))
    return deps


def _apply_overrides(config: BuildConfig, data: dict[str, Any]) -> None:
    if "port" in data:
        if not isinstance(data["port"], int):
            raise ConfigError(f"{CONFIG_FILENAME}: 'port' must be an integer")
        config.port = data["port"]

    if "script_excludes" in data:
        # Added to the fixed excludes, never replacing them
        extra = _as_str_list(data["script_excludes"], "script_excludes")
        config.script_excludes = list(SCRIPT_EXCLUDES) + [p for p in extra if p not in SCRIPT_EXCLUDES]

    if "vendor" in data:
        config.vendor_dependencies = _parse_vendor(data["vendor"])

    banner = data.get("banner")
    if banner is not None:
        if not isinstance(banner, dict):
            raise ConfigError(f"{CONFIG_FILENAME}: 'banner' must be a mapping")
        try:
            since = int(banner.get("since", config.banner.since))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{CONFIG_FILENAME}: 'banner.since' must be a year") from e
        config.banner = BannerConfig(
            organization=str(banner.get("organization", config.banner.organization)),
            since=since,
            license_url=str(banner.get("license_url", config.banner.license_url)),
        )


def load_config(project_root: Path, config_path: Optional[Path] = None) -> BuildConfig:
    """Build a BuildConfig from package.json and an optional sitepipe.yaml."""
    project_root = project_root.resolve()
    config = BuildConfig(
        project_root=project_root,
        package=load_package_meta(project_root),
    )

    if config_path is None:
        config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return config

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"{config_path.name} is not valid YAML: {e}") from e

    if data is None:
        return config
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a mapping")

    _apply_overrides(config, data)
    return config
