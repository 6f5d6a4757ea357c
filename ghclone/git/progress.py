"""Transfer progress parsing.

git reports transfer progress on stderr when run with ``--progress``:

    Receiving objects:  45% (450/1000), 1.20 MiB | 2.40 MiB/s

Only the "Receiving objects" phase is reported; it is the phase that counts
objects actually transferred.
"""

from __future__ import annotations

import re
from collections.abc import Callable

__all__ = ["ProgressCallback", "parse_progress", "progress_handler"]

type ProgressCallback = Callable[[int, int], None]

_RECEIVING = re.compile(r"Receiving objects:\s+\d+%\s+\((\d+)/(\d+)\)")


def parse_progress(line: str) -> tuple[int, int] | None:
    """Return (received, total) from a git progress line, or None."""
    match = _RECEIVING.search(line)
    if not match:
        return None
    return (int(match.group(1)), int(match.group(2)))


def progress_handler(on_progress: ProgressCallback | None) -> Callable[[str], None]:
    """Adapt a progress callback into a stderr line handler."""

    def handle(line: str) -> None:
        if on_progress is None:
            return
        parsed = parse_progress(line)
        if parsed is not None:
            on_progress(*parsed)

    return handle
