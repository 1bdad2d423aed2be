"""
sitepipe.core - Foundation layer for the sitepipe CLI.

Exports logging, timing helpers and the error hierarchy.
"""

from sitepipe.core.utils import (
    log,
    Logger,
    get_project_root,
    relative_posix,
    plural,
)
from sitepipe.core.timing import (
    TimingContext,
    format_duration,
    timing_summary,
)
from sitepipe.core.errors import (
    SitepipeError,
    ConfigError,
    VendorSyncError,
    StyleBuildError,
    ScriptBuildError,
    TaskFailed,
)

__all__ = [
    # Logging
    "log",
    "Logger",
    # Path utilities
    "get_project_root",
    "relative_posix",
    "plural",
    # Timing
    "TimingContext",
    "format_duration",
    "timing_summary",
    # Errors
    "SitepipeError",
    "ConfigError",
    "VendorSyncError",
    "StyleBuildError",
    "ScriptBuildError",
    "TaskFailed",
]
