"""Git repository abstraction.

This module provides the Repository class for single-repo git operations.
All fallible operations return Result types.

Usage:
    match Repository.clone(url, Path("acme/a"), bare=False, on_progress=report):
        case Ok(repo):
            print(f"cloned at {repo.path}")
        case Err(e):
            print(f"clone failed: {e.message}")

    repo = Repository(Path("acme/a"))
    match repo.fetch("origin", on_progress=report):
        case Ok(_):
            repo.merge_ff("origin/main")
        case Err(e):
            print(f"fetch failed: {e.message}")
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ghclone.core.result import Err, Ok, Result
from ghclone.git.progress import ProgressCallback, progress_handler
from ghclone.platform.process import ProcessError
from ghclone.platform.process import run as run_process
from ghclone.platform.process import run_streaming

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 10 * 60.0

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code (-1 if git did not run or timed out)
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


def _network_env() -> dict[str, str]:
    # No credential prompts: an unreachable or private URL must fail, not hang.
    # Untranslated messages: callers match on git's stderr.
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}


def _to_git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    message = error.stderr.strip() or error.stdout.strip() or fallback
    return GitError(command=command, message=message, returncode=error.returncode)


class Repository:
    """A local git repository, bare or with a working tree.

    Attributes:
        path: Path to the repository root (the working tree, or the bare
            repository directory itself)
    """

    def __init__(self, path: Path) -> None:
        # git runs with the repository as its working directory
        self.path = path.absolute()

    def git_dir(self) -> Result[Path, GitError]:
        """Absolute path of the git directory governing ``path``.

        git searches parent directories, so the result may belong to an
        enclosing repository; compare it to ``path`` before trusting it.
        """
        result = self._run(["rev-parse", "--absolute-git-dir"])
        match result:
            case Err(e):
                return Err(_to_git_error("rev-parse", e, "not a git repository"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    def is_bare(self) -> Result[bool, GitError]:
        result = self._run(["rev-parse", "--is-bare-repository"])
        match result:
            case Err(e):
                return Err(_to_git_error("rev-parse", e, "not a git repository"))
            case Ok(stdout):
                return Ok(stdout.strip() == "true")

    def toplevel(self) -> Result[Path, GitError]:
        """Root of the working tree (non-bare repositories only)."""
        result = self._run(["rev-parse", "--show-toplevel"])
        match result:
            case Err(e):
                return Err(_to_git_error("rev-parse", e, "no working tree"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    def remote_url(self, name: str) -> Result[str, GitError]:
        """Configured URL of remote ``name``."""
        result = self._run(["config", "--get", f"remote.{name}.url"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="config",
                        message=f"remote '{name}' is not configured",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def upstream(self) -> str | None:
        """Upstream of the current branch (e.g. "origin/main"), if configured."""
        result = self._run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def resolve(self, rev: str) -> str | None:
        """Commit SHA ``rev`` points to, or None if it does not exist."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def head_sha(self) -> str | None:
        return self.resolve("HEAD")

    def fetch(
        self,
        remote: str,
        refspecs: Sequence[str] = (),
        *,
        on_progress: ProgressCallback | None = None,
        timeout: float = _GIT_NETWORK_TIMEOUT_SECONDS,
    ) -> Result[str, GitError]:
        """Fetch from ``remote``, reporting transfer progress.

        Without refspecs the remote's configured fetch refspecs apply. Refspecs
        without a leading ``+`` make git reject non-fast-forward ref updates.
        """
        result = run_streaming(
            ["git", "fetch", "--progress", remote, *refspecs],
            cwd=self.path,
            on_line=progress_handler(on_progress),
            env=_network_env(),
            timeout=timeout,
        )
        match result:
            case Err(e):
                return Err(_to_git_error("fetch", e, "fetch failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def merge_ff(self, target: str) -> Result[str, GitError]:
        """Merge ``target`` into the current branch, fast-forward only.

        Returns:
            Ok(output) on success (including "Already up to date.")
            Err(GitError) when the histories have diverged or the tree is dirty
        """
        result = self._run(["merge", "--ff-only", target])
        match result:
            case Err(e):
                return Err(_to_git_error("merge --ff-only", e, "merge failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        *,
        bare: bool = False,
        origin: str = "origin",
        on_progress: ProgressCallback | None = None,
        timeout: float = _GIT_NETWORK_TIMEOUT_SECONDS,
    ) -> Result[Repository, GitError]:
        """Clone ``url`` into ``dest``, which must not exist yet.

        Parent directories are created as needed.
        """
        dest = dest.absolute()
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(GitError(command="clone", message=str(e), returncode=-1))

        cmd = ["git", "clone", "--progress", "--origin", origin]
        if bare:
            cmd.append("--bare")
        cmd.extend([url, str(dest)])

        result = run_streaming(
            cmd,
            cwd=dest.parent,
            on_line=progress_handler(on_progress),
            env=_network_env(),
            timeout=timeout,
        )
        match result:
            case Err(e):
                return Err(_to_git_error("clone", e, "clone failed"))
            case Ok(_):
                return Ok(cls(dest))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a local (non-network) git command in this repository."""
        return run_process(
            ["git", *args],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
