"""
Task registry for sitepipe.

Every task is one of four variants:

- ActionTask: a leaf that runs a function against the TaskContext
- SeriesTask: steps run in order, each a strict barrier for the next
- ParallelTask: steps run concurrently; the group fails if any step fails
- UnspecifiedTask: a declared step with no behavior yet

Tasks are stateless: the filesystem is their only input and output.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from sitepipe.build import dist, scripts, styles, vendor
from sitepipe.build.config import BuildConfig
from sitepipe.core.errors import SitepipeError, TaskFailed
from sitepipe.core.timing import TimingContext
from sitepipe.core.utils import log

if TYPE_CHECKING:
    from sitepipe.commands.dev import ReloadBroadcaster


# =============================================================================
# Context
# =============================================================================


@dataclass
class TaskContext:
    """Handles passed to every task run."""

    config: BuildConfig
    reloader: Optional["ReloadBroadcaster"] = None
    timings: dict[str, float] = field(default_factory=dict)


# =============================================================================
# Task Variants
# =============================================================================


@dataclass(frozen=True)
class ActionTask:
    name: str
    action: Callable[[TaskContext], Any]
    description: str = ""


@dataclass(frozen=True)
class SeriesTask:
    name: str
    steps: tuple["Task", ...]
    description: str = ""


@dataclass(frozen=True)
class ParallelTask:
    name: str
    steps: tuple["Task", ...]
    description: str = ""


@dataclass(frozen=True)
class UnspecifiedTask:
    name: str
    reason: str
    description: str = ""


Task = Union[ActionTask, SeriesTask, ParallelTask, UnspecifiedTask]


def leaf_names(task: Task) -> list[str]:
    """Names of the leaf tasks in execution order (parallel groups flattened)."""
    if isinstance(task, (SeriesTask, ParallelTask)):
        names: list[str] = []
        for step in task.steps:
            names.extend(leaf_names(step))
        return names
    return [task.name]


# =============================================================================
# Execution
# =============================================================================


def run_task(task: Task, ctx: TaskContext) -> None:
    """Run a task tree. Raises on the first failure (series) or after all
    steps finish with any failure (parallel)."""
    if isinstance(task, ActionTask):
        _run_action(task, ctx)
    elif isinstance(task, SeriesTask):
        for step in task.steps:
            run_task(step, ctx)
    elif isinstance(task, ParallelTask):
        _run_parallel(task, ctx)
    elif isinstance(task, UnspecifiedTask):
        log.warning(f"{task.name}: not yet specified ({task.reason})")
    else:
        raise TypeError(f"Unknown task variant: {task!r}")


def _run_action(task: ActionTask, ctx: TaskContext) -> None:
    log.info(f"Starting '{task.name}'")
    try:
        with TimingContext(ctx.timings, task.name):
            task.action(ctx)
    except (SitepipeError, OSError) as e:
        log.error(f"'{task.name}' failed: {e}")
        raise
    log.success(f"Finished '{task.name}'")


def _run_parallel(task: ParallelTask, ctx: TaskContext) -> None:
    if not task.steps:
        return

    with ThreadPoolExecutor(max_workers=len(task.steps)) as pool:
        futures = [(step, pool.submit(run_task, step, ctx)) for step in task.steps]

    failed = []
    for step, future in futures:
        exc = future.exception()
        if exc is None:
            continue
        if not isinstance(exc, (SitepipeError, OSError)):
            raise exc
        failed.append(step.name)

    if failed:
        raise TaskFailed(task.name, failed)


# =============================================================================
# Registry
# =============================================================================

# Names from the original gulp tasks
ALIASES: dict[str, str] = {
    "css": "style-build",
    "js": "script-build",
    "clean": "clean-vendor",
    "vendor": "vendor-sync",
    "dist-clean": "clean-distribution",
    "dist": "distribution-copy",
}


def build_registry() -> dict[str, Task]:
    """Create the named task table."""
    clean_vendor = ActionTask(
        "clean-vendor",
        lambda ctx: vendor.clean_vendor(ctx.config),
        "Delete vendor/",
    )
    vendor_copy = ActionTask(
        "vendor-copy",
        lambda ctx: vendor.sync_vendor(ctx.config),
        "Copy pinned dependencies from node_modules/ into vendor/",
    )
    vendor_sync = SeriesTask(
        "vendor-sync",
        (clean_vendor, vendor_copy),
        "Rebuild vendor/ from node_modules/",
    )
    style_build = ActionTask(
        "style-build",
        lambda ctx: styles.build_styles(ctx.config, ctx.reloader),
        "Compile scss/ into css/ (expanded and .min)",
    )
    script_build = ActionTask(
        "script-build",
        lambda ctx: scripts.build_scripts(ctx.config, ctx.reloader),
        "Minify js/*.js into js/*.min.js",
    )
    build = SeriesTask(
        "build",
        (vendor_sync, ParallelTask("assets", (style_build, script_build))),
        "vendor-sync, then style-build and script-build in parallel",
    )

    clean_distribution = ActionTask(
        "clean-distribution",
        lambda ctx: dist.clean_dist(ctx.config),
        "Delete dist/",
    )
    dist_html = ActionTask(
        "dist-html",
        lambda ctx: dist.copy_html(ctx.config),
        "Copy *.html into dist/",
    )
    dist_css = ActionTask(
        "dist-css",
        lambda ctx: dist.copy_css(ctx.config),
        "Copy css/**/*.min.css into dist/css/",
    )
    dist_js = UnspecifiedTask(
        "dist-js",
        "script copy into dist/ has no defined sources",
        "Copy scripts into dist/ (placeholder)",
    )
    dist_images = ActionTask(
        "dist-images",
        lambda ctx: dist.copy_images(ctx.config),
        "Copy images/* into dist/images/",
    )
    dist_vendor = UnspecifiedTask(
        "dist-vendor",
        "vendor copy into dist/ has no defined sources",
        "Copy vendor files into dist/ (placeholder)",
    )
    distribution_copy = SeriesTask(
        "distribution-copy",
        (
            clean_distribution,
            ParallelTask(
                "dist-files",
                (dist_html, dist_css, dist_js, dist_images, dist_vendor),
            ),
        ),
        "clean-distribution, then copy html, css and images into dist/",
    )

    tasks: list[Task] = [
        clean_vendor,
        vendor_sync,
        style_build,
        script_build,
        build,
        clean_distribution,
        dist_html,
        dist_css,
        dist_js,
        dist_images,
        dist_vendor,
        distribution_copy,
    ]
    registry: dict[str, Task] = {task.name: task for task in tasks}
    registry["default"] = build
    return registry


def resolve_task(name: str, registry: Optional[dict[str, Task]] = None) -> Task:
    """Look up a task by name or alias. Raises KeyError if unknown."""
    if registry is None:
        registry = build_registry()
    name = ALIASES.get(name, name)
    if name not in registry:
        raise KeyError(name)
    return registry[name]
