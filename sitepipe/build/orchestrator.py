"""
Build orchestrator for sitepipe.

Resolves a named task, runs it with timing, and reports the outcome.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Optional

from sitepipe.build.config import BuildConfig
from sitepipe.build.tasks import (
    Task,
    TaskContext,
    build_registry,
    resolve_task,
    run_task,
)
from sitepipe.core.errors import SitepipeError
from sitepipe.core.timing import format_duration, timing_summary
from sitepipe.core.utils import log

if TYPE_CHECKING:
    from sitepipe.commands.dev import ReloadBroadcaster


class BuildOrchestrator:
    """Runs tasks from the registry against one project."""

    def __init__(
        self,
        config: BuildConfig,
        reloader: Optional["ReloadBroadcaster"] = None,
        registry: Optional[dict[str, Task]] = None,
    ):
        self.config = config
        self.reloader = reloader
        self.registry = registry if registry is not None else build_registry()
        self.last_timings: dict[str, float] = {}

    def resolve(self, name: str) -> Task:
        return resolve_task(name, self.registry)

    def run(self, name: str, quiet: bool = False) -> bool:
        """Run a named task. Returns True on success.

        Raises KeyError for an unknown task name.
        """
        task = self.resolve(name)
        ctx = TaskContext(config=self.config, reloader=self.reloader)

        if not quiet:
            log.header(f"sitepipe: {task.name}")

        start = time.time()
        success = True
        try:
            run_task(task, ctx)
        except (SitepipeError, OSError) as e:
            success = False
            log.error(f"{task.name} failed after {format_duration(time.time() - start)}: {e}")

        self.last_timings = dict(ctx.timings)

        if success and not quiet:
            log.dim(timing_summary(ctx.timings))
            log.success(f"{task.name} completed in {format_duration(time.time() - start)}")

        return success
