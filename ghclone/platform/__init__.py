"""Process and filesystem primitives."""

from .files import RemoveError, remove_tree
from .process import ProcessError, run, run_streaming

__all__ = [
    "ProcessError",
    "RemoveError",
    "remove_tree",
    "run",
    "run_streaming",
]
