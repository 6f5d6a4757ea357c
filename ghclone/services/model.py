"""Domain types for listing and synchronizing repositories."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from ghclone.git.repository import Repository
from ghclone.services.sync_errors import SyncError, ValidationError

__all__ = [
    "ClonedFresh",
    "LocalRepositoryHandle",
    "LocalState",
    "MergedUpToDate",
    "RecloneAfterCorruption",
    "RepositoryDescriptor",
    "SyncFailed",
    "SyncOutcome",
    "is_safe_name",
    "transition",
]


def is_safe_name(name: str) -> bool:
    """True if ``name`` can be used as a single path component."""
    if not name or name in {".", ".."}:
        return False
    return "/" not in name and "\\" not in name and "\0" not in name


@dataclass(frozen=True, slots=True)
class RepositoryDescriptor:
    """One remote repository as reported by the hosting service.

    Attributes:
        name: Repository name, unique within a listing; the local directory leaf
        clone_url: URL git clones and fetches from
        fork: True if the repository is a fork of another one
        default_branch: Branch the remote HEAD points to (None for empty repos)
        full_name: "owner/name"
    """

    name: str
    clone_url: str
    fork: bool = False
    default_branch: str | None = None
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class LocalRepositoryHandle:
    """An opened local repository validated against ``descriptor``.

    Only validation creates handles; one exists only while the directory at
    ``path`` is a repository rooted at ``path`` whose remote points at the
    descriptor's clone URL.
    """

    repository: Repository
    descriptor: RepositoryDescriptor
    bare: bool

    @property
    def path(self) -> Path:
        return self.repository.path


class LocalState(Enum):
    """State of a local path during one synchronization pass.

    UNKNOWN  -> VALID     the path holds a matching repository
    UNKNOWN  -> CORRUPT   the path exists but failed validation
    UNKNOWN  -> ABSENT    nothing at the path
    CORRUPT  -> ABSENT    the path was removed
    VALID and ABSENT end the pass (fetch + merge, clone).
    """

    UNKNOWN = auto()
    VALID = auto()
    CORRUPT = auto()
    ABSENT = auto()

    def __str__(self) -> str:
        return self.name.lower()


_TRANSITIONS: dict[LocalState, frozenset[LocalState]] = {
    LocalState.UNKNOWN: frozenset({LocalState.VALID, LocalState.CORRUPT, LocalState.ABSENT}),
    LocalState.CORRUPT: frozenset({LocalState.ABSENT}),
    LocalState.VALID: frozenset(),
    LocalState.ABSENT: frozenset(),
}


def transition(current: LocalState, target: LocalState) -> LocalState:
    """Return ``target`` if the move is allowed.

    Raises:
        ValueError: The transition is not in the state table.
    """
    if target not in _TRANSITIONS[current]:
        raise ValueError(f"illegal local state transition: {current} -> {target}")
    return target


@dataclass(frozen=True, slots=True)
class MergedUpToDate:
    name: str
    path: Path
    head: str | None = None


@dataclass(frozen=True, slots=True)
class ClonedFresh:
    name: str
    path: Path


@dataclass(frozen=True, slots=True)
class RecloneAfterCorruption:
    name: str
    path: Path
    reason: ValidationError


@dataclass(frozen=True, slots=True)
class SyncFailed:
    name: str
    path: Path
    error: SyncError


SyncOutcome = MergedUpToDate | ClonedFresh | RecloneAfterCorruption | SyncFailed
