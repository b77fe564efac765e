"""
Runtime configuration for gitcui.

Fixed limits live here as module constants; the CLI builds a `Settings`
instance from its flags and hands it to the application.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

# Number of commits loaded from the log, newest first.
MAX_COMMITS = 99

# Directories closer to the root than this start expanded in the tree panel.
MAX_OPEN_DEPTH = 2

DIFF_CONTEXT_LINES = 3

# Tabs are expanded before a diff line is rendered.
EXPAND_TAB = "    "

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """Options for one browser session, filled in from the command line."""

    source: str
    clone: bool = False
    max_open_depth: int = MAX_OPEN_DEPTH
    log_file: Optional[str] = None
    verbose: bool = False


def configure_logging(log_file: Optional[str], verbose: bool = False) -> None:
    """Send log records to `log_file`.

    The terminal belongs to the UI while the app runs, so without a log file
    records are dropped instead of being written to stderr.
    """
    if not log_file:
        logging.getLogger("gitcui").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
