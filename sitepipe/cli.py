"""
Main CLI for the sitepipe tool.

Every registered task is a subcommand; `watch` adds the dev server and
file watcher on top of a full build.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sitepipe import __version__
from sitepipe.build.config import load_config
from sitepipe.build.orchestrator import BuildOrchestrator
from sitepipe.build.tasks import ALIASES, build_registry
from sitepipe.core.errors import ConfigError
from sitepipe.core.utils import get_project_root, log


# =============================================================================
# Argument Parsing
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all subcommands."""

    parser = argparse.ArgumentParser(
        prog="sitepipe",
        description="Static-site asset pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sitepipe                       # Same as `sitepipe default`
  sitepipe vendor-sync           # Rebuild vendor/ from node_modules/
  sitepipe css                   # Compile scss/ (alias of style-build)
  sitepipe distribution-copy     # Assemble dist/
  sitepipe watch --port 8080     # Build, serve and live-reload
  sitepipe list                  # Show all tasks
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--root",
        help="Project root (default: nearest directory with package.json)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    aliases_by_task: dict[str, list[str]] = {}
    for alias, target in ALIASES.items():
        aliases_by_task.setdefault(target, []).append(alias)

    for name, task in build_registry().items():
        subparsers.add_parser(
            name,
            aliases=aliases_by_task.get(name, []),
            help=task.description or f"Run {name}",
        )

    # --- watch ---
    watch_parser = subparsers.add_parser(
        "watch",
        help="Build, then serve with live reload and rebuild on change",
        description="Run the default build, start the dev server and watch sources.",
    )
    watch_parser.add_argument(
        "--port",
        type=int,
        help="HTTP port (default: 3000; live reload uses port + 1)",
    )

    # --- list ---
    subparsers.add_parser(
        "list",
        help="List available tasks",
    )

    return parser


# =============================================================================
# Command Handlers
# =============================================================================


def _resolve_root(args: argparse.Namespace) -> Path:
    if args.root:
        return Path(args.root)
    return get_project_root() or Path.cwd()


def cmd_list(args: argparse.Namespace) -> int:
    log.header("Tasks")
    for name, task in build_registry().items():
        log.table_row(name, task.description, col1_width=22)
    log.table_row("watch", "Build, then serve with live reload", col1_width=22)
    log.header("Aliases")
    for alias, target in ALIASES.items():
        log.table_row(alias, target, col1_width=22)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Run a registered task. Exit 0 on success, 1 on failure."""
    try:
        config = load_config(Path(args.root))
    except ConfigError as e:
        log.error(str(e))
        return 2

    orchestrator = BuildOrchestrator(config)
    return 0 if orchestrator.run(args.command) else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle --no-color
    if args.no_color:
        log.set_color(False)

    args.root = str(_resolve_root(args))
    if not args.command:
        args.command = "default"

    try:
        if args.command == "list":
            return cmd_list(args)

        elif args.command == "watch":
            from .commands.watch import cmd_watch
            return cmd_watch(args)

        else:
            return cmd_run(args)

    except KeyboardInterrupt:
        log.warning("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
