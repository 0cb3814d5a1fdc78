"""Debug tracing helpers.

Every component takes a ``log`` callable so that ``--debug`` can switch
tracing on for the whole run without module-level state.
"""

from __future__ import annotations

import sys
from typing import Callable

Logger = Callable[[str], None]


def silent(msg: str) -> None:
    """Logger that discards everything."""


def make_logger(debug: bool) -> Logger:
    """Return a logger that prints to stderr when debug is enabled."""
    if not debug:
        return silent

    def _log(msg: str) -> None:
        print(msg, file=sys.stderr, flush=True)

    return _log
