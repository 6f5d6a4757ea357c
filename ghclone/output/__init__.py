"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .progress import MockProgress, NullProgress, RichProgress, TransferProgress

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "MockProgress",
    "NullProgress",
    "RichConsole",
    "RichProgress",
    "Style",
    "TransferProgress",
]
