"""Per-repository synchronization.

Each call walks an explicit state machine for one local path:

    UNKNOWN --(nothing there)------------------> ABSENT  --> clone
    UNKNOWN --(matching repository)------------> VALID   --> fetch + ff merge
    UNKNOWN --(exists, fails validation)-------> CORRUPT --> remove --> ABSENT --> clone

State is derived from disk on every call; nothing is cached between runs.
Removal happens only from CORRUPT, i.e. only after validation positively
failed. When git cannot be run at all the outcome is a failure and the
directory is left alone.

Every failure is returned as a SyncFailed outcome. There are no retries: the
next run starts over from UNKNOWN.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ghclone.core.config import DEFAULT_NETWORK_TIMEOUT, DEFAULT_REMOTE
from ghclone.core.result import Err, Ok, Result
from ghclone.git.progress import ProgressCallback
from ghclone.git.repository import GitError, Repository
from ghclone.platform.files import remove_tree
from ghclone.services.model import (
    ClonedFresh,
    LocalRepositoryHandle,
    LocalState,
    MergedUpToDate,
    RecloneAfterCorruption,
    RepositoryDescriptor,
    SyncFailed,
    SyncOutcome,
    transition,
)
from ghclone.services.sync_errors import (
    FilesystemError,
    MergeConflictError,
    TransportError,
    ValidationError,
)

__all__ = [
    "RepositorySynchronizer",
    "SyncOptions",
    "normalize_url",
    "validate_local",
]

# Bare clones have no remote-tracking refs; branches are updated in place.
# No leading "+": git rejects updates that are not fast-forwards.
_BARE_REFSPECS = ("refs/heads/*:refs/heads/*",)


@dataclass(frozen=True, slots=True)
class SyncOptions:
    """How local copies are created and updated.

    Attributes:
        bare: Clone bare repositories instead of working-tree clones
        remote: Name of the remote pointing at the hosting service
        network_timeout: Upper bound in seconds for one clone or fetch
    """

    bare: bool = False
    remote: str = DEFAULT_REMOTE
    network_timeout: float = DEFAULT_NETWORK_TIMEOUT


def normalize_url(url: str) -> str:
    """Canonical form for comparing remote URLs ("x.git/" == "x")."""
    return url.strip().rstrip("/").removesuffix(".git")


def _inconclusive(error: GitError) -> bool:
    # returncode -1: git did not run (missing executable, timeout)
    return error.returncode == -1


def validate_local(
    descriptor: RepositoryDescriptor,
    path: Path,
    remote: str = DEFAULT_REMOTE,
) -> Result[LocalRepositoryHandle, ValidationError]:
    """Open ``path`` and check it is a clone of ``descriptor``.

    Valid means: a directory, the root of its own repository (not a
    subdirectory of some enclosing repository), with ``remote`` pointing at
    the descriptor's clone URL. Bare and working-tree layouts are both
    accepted.
    """
    if not path.is_dir():
        return Err(ValidationError(path=path, reason="not a directory"))

    repo = Repository(path)

    git_dir = repo.git_dir()
    if isinstance(git_dir, Err):
        return Err(
            ValidationError(
                path=path,
                reason=f"not a git repository ({git_dir.error.message})",
                inconclusive=_inconclusive(git_dir.error),
            )
        )

    bare = repo.is_bare()
    if isinstance(bare, Err):
        return Err(
            ValidationError(
                path=path,
                reason=bare.error.message,
                inconclusive=_inconclusive(bare.error),
            )
        )

    expected_root = path.resolve()
    if bare.value:
        root = git_dir.value.resolve()
    else:
        toplevel = repo.toplevel()
        if isinstance(toplevel, Err):
            return Err(
                ValidationError(
                    path=path,
                    reason=toplevel.error.message,
                    inconclusive=_inconclusive(toplevel.error),
                )
            )
        root = toplevel.value.resolve()

    if root != expected_root:
        return Err(ValidationError(path=path, reason=f"belongs to the repository at {root}"))

    url = repo.remote_url(remote)
    if isinstance(url, Err):
        return Err(
            ValidationError(
                path=path,
                reason=url.error.message,
                inconclusive=_inconclusive(url.error),
            )
        )

    if normalize_url(url.value) != normalize_url(descriptor.clone_url):
        return Err(
            ValidationError(
                path=path,
                reason=f"remote '{remote}' is {url.value}, expected {descriptor.clone_url}",
            )
        )

    return Ok(LocalRepositoryHandle(repository=repo, descriptor=descriptor, bare=bare.value))


class RepositorySynchronizer:
    """Brings one local path in line with one remote repository.

    ``on_progress(received, total)`` is called during clone and fetch
    transfers.
    """

    def __init__(
        self,
        options: SyncOptions | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._options = options or SyncOptions()
        self._on_progress = on_progress

    @property
    def options(self) -> SyncOptions:
        return self._options

    def synchronize(self, descriptor: RepositoryDescriptor, local_path: Path) -> SyncOutcome:
        local_path = local_path.absolute()
        state = LocalState.UNKNOWN
        handle: LocalRepositoryHandle | None = None
        corruption: ValidationError | None = None

        while True:
            match state:
                case LocalState.UNKNOWN:
                    if not local_path.exists() and not local_path.is_symlink():
                        state = transition(state, LocalState.ABSENT)
                        continue
                    match validate_local(descriptor, local_path, self._options.remote):
                        case Ok(opened):
                            handle = opened
                            state = transition(state, LocalState.VALID)
                        case Err(reason) if reason.inconclusive:
                            return SyncFailed(descriptor.name, local_path, reason)
                        case Err(reason):
                            corruption = reason
                            state = transition(state, LocalState.CORRUPT)

                case LocalState.VALID:
                    assert handle is not None
                    return self._update(handle)

                case LocalState.CORRUPT:
                    removed = remove_tree(local_path)
                    if isinstance(removed, Err):
                        return SyncFailed(
                            descriptor.name,
                            local_path,
                            FilesystemError(path=local_path, message=removed.error.message),
                        )
                    state = transition(state, LocalState.ABSENT)

                case LocalState.ABSENT:
                    return self._clone(descriptor, local_path, corruption)

    def _update(self, handle: LocalRepositoryHandle) -> SyncOutcome:
        """Fetch, then fast-forward. A failure here leaves the clone in place."""
        repo = handle.repository
        name = handle.descriptor.name
        remote = self._options.remote

        if handle.bare:
            fetched = repo.fetch(
                remote,
                _BARE_REFSPECS,
                on_progress=self._on_progress,
                timeout=self._options.network_timeout,
            )
            if isinstance(fetched, Err):
                message = fetched.error.message
                if "non-fast-forward" in message or "[rejected]" in message:
                    conflict = MergeConflictError(target="refs/heads/*", message=message)
                    return SyncFailed(name, handle.path, conflict)
                return SyncFailed(name, handle.path, TransportError("fetch", message))
            return MergedUpToDate(name, handle.path, repo.head_sha())

        fetched = repo.fetch(
            remote,
            on_progress=self._on_progress,
            timeout=self._options.network_timeout,
        )
        if isinstance(fetched, Err):
            return SyncFailed(name, handle.path, TransportError("fetch", fetched.error.message))

        target = repo.upstream()
        if target is None and handle.descriptor.default_branch:
            target = f"{remote}/{handle.descriptor.default_branch}"
        if target is None or repo.resolve(target) is None:
            # Empty remote: nothing to merge
            return MergedUpToDate(name, handle.path, repo.head_sha())

        merged = repo.merge_ff(target)
        if isinstance(merged, Err):
            return SyncFailed(
                name, handle.path, MergeConflictError(target=target, message=merged.error.message)
            )
        return MergedUpToDate(name, handle.path, repo.head_sha())

    def _clone(
        self,
        descriptor: RepositoryDescriptor,
        local_path: Path,
        corruption: ValidationError | None,
    ) -> SyncOutcome:
        cloned = Repository.clone(
            descriptor.clone_url,
            local_path,
            bare=self._options.bare,
            origin=self._options.remote,
            on_progress=self._on_progress,
            timeout=self._options.network_timeout,
        )
        if isinstance(cloned, Err):
            return SyncFailed(
                descriptor.name, local_path, TransportError("clone", cloned.error.message)
            )
        if corruption is not None:
            return RecloneAfterCorruption(descriptor.name, local_path, corruption)
        return ClonedFresh(descriptor.name, local_path)
