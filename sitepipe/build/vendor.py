"""
Vendor sync for sitepipe.

Copies pinned third-party files from node_modules/ into vendor/. The
package cache must already be populated; nothing is fetched.
"""

from __future__ import annotations

from sitepipe.build.config import BuildConfig, VendorDependency
from sitepipe.build.files import copy_selection, remove_tree, select_files
from sitepipe.core.errors import VendorSyncError
from sitepipe.core.utils import log, plural


def clean_vendor(config: BuildConfig) -> bool:
    """Delete the vendor tree. Returns True if it existed."""
    removed = remove_tree(config.vendor_dir)
    if removed:
        log.info(f"Removed {config.vendor_dir}")
    return removed


def sync_dependency(dep: VendorDependency, config: BuildConfig) -> int:
    """Copy one dependency into vendor/<dest>/. Returns the file count.

    Raises FileNotFoundError when the patterns match nothing in the cache.
    """
    selection = select_files(config.node_modules_dir, dep.sources, dep.excludes)
    if not selection:
        raise FileNotFoundError(
            f"no files matched {', '.join(dep.sources)} in {config.node_modules_dir}"
        )

    written = copy_selection(selection, config.vendor_dir / dep.dest)
    return len(written)


def sync_vendor(config: BuildConfig) -> dict[str, int]:
    """Copy every pinned dependency. Returns ``{name: files_copied}``.

    All dependencies are attempted; if any failed, VendorSyncError is
    raised afterwards so the successful ones stay in place.
    """
    copied: dict[str, int] = {}
    failures: dict[str, str] = {}

    for dep in config.vendor_dependencies:
        try:
            count = sync_dependency(dep, config)
        except OSError as e:
            failures[dep.name] = str(e)
            log.error(f"{dep.name}: {e}")
            continue
        copied[dep.name] = count
        log.info(f"{dep.name}: {plural(count, 'file')} -> vendor/{dep.dest}")

    if failures:
        raise VendorSyncError(failures)

    return copied
