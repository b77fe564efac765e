"""Command line entry point: open or clone a repository and start the browser."""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from rich.console import Console

from gitcui.app import GitCuiApp
from gitcui.config import MAX_OPEN_DEPTH, Settings, configure_logging
from gitcui.errors import GitCuiError, RepositoryAccessError
from gitcui.repository import Repository

logger = logging.getLogger(__name__)


def _depth(value: str) -> int:
    try:
        depth = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if depth < 0:
        raise argparse.ArgumentTypeError("depth must be zero or more")
    return depth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitcui",
        description="Browse the commits of a git repository in the terminal.",
    )
    parser.add_argument("source", help="URL or local path of the repository")
    parser.add_argument(
        "--clone", action="store_true", default=False,
        help="clone SOURCE instead of opening a local repository",
    )
    parser.add_argument(
        "--depth", type=_depth, default=MAX_OPEN_DEPTH, dest="max_open_depth",
        help=f"directory levels expanded in the tree panel (default {MAX_OPEN_DEPTH})",
    )
    parser.add_argument("--log-file", help="write log records to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser


def parse_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(
        source=args.source,
        clone=args.clone,
        max_open_depth=args.max_open_depth,
        log_file=args.log_file,
        verbose=args.verbose,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the browser; returns the process exit code."""
    settings = parse_settings(argv)
    configure_logging(settings.log_file, settings.verbose)
    console = Console(stderr=True)

    try:
        if settings.clone:
            repository = Repository.clone(settings.source)
        else:
            repository = Repository.open(settings.source)
    except RepositoryAccessError as exc:
        action = "clone" if settings.clone else "open"
        logger.error(f"Failed to {action}: {exc}")
        console.print(f"Failed to {action}: {exc}", style="red", markup=False)
        return 1

    with repository:
        try:
            commits = repository.load_history()
        except GitCuiError as exc:
            logger.error(f"Failed to get log: {exc}")
            console.print(str(exc), style="red", markup=False)
            return 1

        logger.info("Starting application")
        GitCuiApp(repository, commits, max_open_depth=settings.max_open_depth).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
