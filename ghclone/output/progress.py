"""Transfer progress rendering.

The synchronizer only knows a ``(received, total)`` callback. A
TransferProgress turns those calls into output: a rich progress bar in the
terminal, nothing at all, or a recorded list in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.progress import Progress, TaskID

    from ghclone.output.console import RichConsole

__all__ = [
    "TransferProgress",
    "NullProgress",
    "RichProgress",
    "MockProgress",
]


class TransferProgress(Protocol):
    """Progress display for one transfer at a time."""

    def start(self, label: str) -> None: ...

    def update(self, received: int, total: int) -> None: ...

    def stop(self) -> None: ...


class NullProgress:
    """Discards progress (non-interactive output)."""

    def start(self, label: str) -> None:
        pass

    def update(self, received: int, total: int) -> None:
        pass

    def stop(self) -> None:
        pass


class RichProgress:
    """Transient rich progress bar: objects received out of total."""

    def __init__(self, console: RichConsole) -> None:
        self._console = console
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def start(self, label: str) -> None:
        from rich.progress import (
            BarColumn,
            MofNCompleteColumn,
            Progress,
            TaskProgressColumn,
            TextColumn,
        )

        self.stop()
        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            console=self._console.rich,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task(label, total=None)

    def update(self, received: int, total: int) -> None:
        if self._progress is None or self._task is None:
            return
        self._progress.update(self._task, completed=received, total=total or None)

    def stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None


def _empty_updates() -> list[tuple[str, int, int]]:
    return []


def _empty_labels() -> list[str]:
    return []


@dataclass
class MockProgress:
    """Records progress calls for testing."""

    labels: list[str] = field(default_factory=_empty_labels)
    updates: list[tuple[str, int, int]] = field(default_factory=_empty_updates)
    active: str | None = None

    def start(self, label: str) -> None:
        self.labels.append(label)
        self.active = label

    def update(self, received: int, total: int) -> None:
        self.updates.append((self.active or "", received, total))

    def stop(self) -> None:
        self.active = None
