"""
sitepipe.build - Asset build tasks.

Vendor sync, style and script builds, distribution copy, and the task
registry that sequences them.
"""

from sitepipe.build.config import (
    DEFAULT_PORT,
    BannerConfig,
    BuildConfig,
    PackageMeta,
    VendorDependency,
    load_config,
)
from sitepipe.build.orchestrator import BuildOrchestrator
from sitepipe.build.tasks import (
    ActionTask,
    ParallelTask,
    SeriesTask,
    Task,
    TaskContext,
    UnspecifiedTask,
    build_registry,
    resolve_task,
    run_task,
)

__all__ = [
    # Config
    "DEFAULT_PORT",
    "BannerConfig",
    "BuildConfig",
    "PackageMeta",
    "VendorDependency",
    "load_config",
    # Tasks
    "ActionTask",
    "ParallelTask",
    "SeriesTask",
    "Task",
    "TaskContext",
    "UnspecifiedTask",
    "build_registry",
    "resolve_task",
    "run_task",
    # Orchestrator
    "BuildOrchestrator",
]
