"""
Watch mode for sitepipe.

Monitors source files and re-runs the style or script build, or pushes a
full-page reload, when they change. Each rebuild kind has its own run
gate so bursts of events collapse into at most one queued rerun.
"""

from __future__ import annotations

import argparse
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from sitepipe.build.config import BuildConfig, load_config
from sitepipe.build.files import match_any
from sitepipe.build.orchestrator import BuildOrchestrator
from sitepipe.commands.dev import DevServer, ReloadBroadcaster
from sitepipe.core.errors import ConfigError
from sitepipe.core.utils import log, relative_posix


# =============================================================================
# Change Classification
# =============================================================================


class WatchKind(Enum):
    """What a changed file triggers."""
    STYLES = auto()   # scss changed -> style-build
    SCRIPTS = auto()  # js changed -> script-build
    HTML = auto()     # page changed -> full reload


@dataclass(frozen=True)
class WatchRule:
    kind: WatchKind
    includes: tuple[str, ...]
    ignores: tuple[str, ...] = ()

    def matches(self, rel_path: str) -> bool:
        return match_any(rel_path, self.includes) and not match_any(rel_path, self.ignores)


def default_watch_rules() -> list[WatchRule]:
    return [
        WatchRule(WatchKind.STYLES, ("scss/**/*",)),
        # The script build writes *.min.js into js/; watching them would loop
        WatchRule(WatchKind.SCRIPTS, ("js/**/*",), ("js/**/*.min.js",)),
        WatchRule(
            WatchKind.HTML,
            ("**/*.html",),
            ("dist/**", "vendor/**", "node_modules/**"),
        ),
    ]


def classify(rel_path: str, rules: list[WatchRule]) -> list[WatchKind]:
    """Return every kind whose rule matches the relative POSIX path."""
    return [rule.kind for rule in rules if rule.matches(rel_path)]


# =============================================================================
# Run Gate
# =============================================================================


class RunState(Enum):
    IDLE = auto()
    RUNNING = auto()
    PENDING = auto()  # running, with one rerun queued


def _spawn_thread(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class RunGate:
    """Serializes runs of one task kind and coalesces triggers.

    IDLE + trigger -> RUNNING (start a run)
    RUNNING + trigger -> PENDING
    PENDING + trigger -> PENDING
    run finishes: PENDING -> RUNNING (rerun once), RUNNING -> IDLE
    """

    def __init__(
        self,
        name: str,
        action: Callable[[], object],
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        self.name = name
        self.action = action
        self._spawn = spawn or _spawn_thread
        self._lock = threading.Lock()
        self._state = RunState.IDLE
        self._runs = 0

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def run_count(self) -> int:
        with self._lock:
            return self._runs

    def trigger(self) -> RunState:
        """Request a run. Returns the state after the request."""
        with self._lock:
            start = self._state is RunState.IDLE
            if start:
                self._state = RunState.RUNNING
            else:
                self._state = RunState.PENDING
            state = self._state

        if start:
            self._spawn(self._drain)
        return state

    def _drain(self) -> None:
        while True:
            with self._lock:
                self._runs += 1
                run = self._runs

            start = time.time()
            try:
                self.action()
            except Exception as e:
                log.error(f"[{run}] {self.name} crashed after {time.time() - start:.1f}s: {e}")

            with self._lock:
                if self._state is RunState.PENDING:
                    self._state = RunState.RUNNING
                    continue
                self._state = RunState.IDLE
                return


# =============================================================================
# File System Event Handler
# =============================================================================


class AssetEventHandler(FileSystemEventHandler):
    """Maps file system events under the project root to watch kinds."""

    def __init__(
        self,
        root: Path,
        rules: list[WatchRule],
        callback: Callable[[WatchKind, str], None],
    ):
        super().__init__()
        self.root = root
        self.rules = rules
        self.callback = callback

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle(event.src_path)
        self._handle(event.dest_path)

    def _handle(self, raw_path) -> None:
        rel = relative_posix(Path(os.fsdecode(raw_path)), self.root)
        if rel is None:
            return
        for kind in classify(rel, self.rules):
            self.callback(kind, rel)


# =============================================================================
# Watcher
# =============================================================================


class Watcher:
    """Wires file events to rebuild gates and the live-reload channel."""

    def __init__(
        self,
        config: BuildConfig,
        orchestrator: BuildOrchestrator,
        reloader: Optional[ReloadBroadcaster] = None,
        rules: Optional[list[WatchRule]] = None,
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        self.config = config
        self.orchestrator = orchestrator
        self.reloader = reloader
        self.rules = rules if rules is not None else default_watch_rules()
        self.gates = {
            WatchKind.STYLES: RunGate(
                "style-build", lambda: orchestrator.run("style-build", quiet=True), spawn
            ),
            WatchKind.SCRIPTS: RunGate(
                "script-build", lambda: orchestrator.run("script-build", quiet=True), spawn
            ),
        }
        self.handler = AssetEventHandler(config.project_root, self.rules, self.on_change)
        self._observer: Optional[Observer] = None

    def on_change(self, kind: WatchKind, rel_path: str) -> None:
        log.info(f"Change detected: {rel_path} -> {kind.name}")
        if kind is WatchKind.HTML:
            if self.reloader is not None:
                self.reloader.notify_reload()
            return
        self.gates[kind].trigger()

    @property
    def run_count(self) -> int:
        return sum(gate.run_count for gate in self.gates.values())

    def start(self) -> None:
        self._observer = Observer()
        self._observer.schedule(self.handler, str(self.config.project_root), recursive=True)
        self._observer.start()
        for rule in self.rules:
            log.info(f"Watching: {rule.kind.name.lower()} ({', '.join(rule.includes)})")

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None


# =============================================================================
# Watch Command
# =============================================================================


def cmd_watch(args: argparse.Namespace) -> int:
    """Build, then serve with live reload and rebuild on change."""
    try:
        config = load_config(Path(args.root))
    except ConfigError as e:
        log.error(str(e))
        return 2

    if getattr(args, "port", None):
        config.port = args.port

    orchestrator = BuildOrchestrator(config)
    if not orchestrator.run("build"):
        return 1

    log.header(f"sitepipe watch: {config.package.display_name}")

    server = DevServer(config.project_root, config.port)
    try:
        server.start()
    except OSError as e:
        log.error(f"Could not start dev server on port {config.port}: {e}")
        return 1

    orchestrator.reloader = server.broadcaster
    watcher = Watcher(config, orchestrator, server.broadcaster)
    watcher.start()

    log.info("")
    log.info("Watching for changes... (Ctrl+C to stop)")
    log.info("")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        log.info("")
        log.header("Shutting down")

        watcher.stop()
        server.stop()

        log.info(f"Rebuilds performed: {watcher.run_count}")
        log.success("Watch mode stopped")

    return 0
