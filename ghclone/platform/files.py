"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ghclone.core.result import Err, Ok, Result

__all__ = ["RemoveError", "remove_tree"]


@dataclass(frozen=True, slots=True)
class RemoveError:
    """A path could not be (fully) removed."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"cannot remove {self.path}: {self.message}"


def _remove_readonly(func: Callable[[str], object], path: str, exc: BaseException) -> None:
    # git marks pack files read-only
    if not isinstance(exc, PermissionError):
        raise exc
    parent = os.path.dirname(path)
    if parent:
        os.chmod(parent, os.stat(parent).st_mode | stat.S_IWRITE | stat.S_IEXEC)
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    func(path)


def remove_tree(path: Path) -> Result[None, RemoveError]:
    """Remove ``path`` whatever it is.

    Directories are removed recursively. Files and symlinks are unlinked; a
    symlink to a directory is never followed.
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path, onexc=_remove_readonly)
    except OSError as e:
        return Err(RemoveError(path=path, message=e.strerror or str(e)))

    if path.exists() or path.is_symlink():
        return Err(RemoveError(path=path, message="path still exists after removal"))
    return Ok(None)
