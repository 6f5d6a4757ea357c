from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "user.email=test@example.com", "-c", "user.name=Test", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise RuntimeError(
            f"git {' '.join(args)} failed (code {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout.strip()


@dataclass
class RemoteRepo:
    """A bare "hosted" repository plus a working clone used to push to it."""

    name: str
    path: Path
    seed: Path

    @property
    def url(self) -> str:
        return self.path.as_uri()

    def commit(self, filename: str, content: str, message: str = "update") -> str:
        (self.seed / filename).write_text(content, encoding="utf-8")
        _git(self.seed, "add", filename)
        _git(self.seed, "commit", "-m", message)
        _git(self.seed, "push", "origin", "main")
        return _git(self.seed, "rev-parse", "HEAD")

    def force_rewrite(self, filename: str, content: str) -> None:
        """Replace the remote history with an unrelated commit."""
        _git(self.seed, "checkout", "--orphan", "rewrite")
        _git(self.seed, "rm", "-rf", "--quiet", ".")
        (self.seed / filename).write_text(content, encoding="utf-8")
        _git(self.seed, "add", filename)
        _git(self.seed, "commit", "-m", "rewrite")
        _git(self.seed, "push", "--force", "origin", "rewrite:main")


@pytest.fixture
def git() -> Callable[..., str]:
    """Run git in a directory: ``git(cwd, "status")``."""
    if shutil.which("git") is None:
        pytest.skip("git not available")
    return _git


@pytest.fixture
def make_remote(tmp_path: Path) -> Callable[..., RemoteRepo]:
    """Factory for bare remotes with one initial commit on ``main``.

    ``make_remote("a", empty=True)`` creates a remote without commits.
    """
    if shutil.which("git") is None:
        pytest.skip("git not available")

    remotes_dir = tmp_path / "remotes"
    remotes_dir.mkdir(exist_ok=True)

    def factory(name: str, *, empty: bool = False) -> RemoteRepo:
        remote = remotes_dir / f"{name}.git"
        seed = remotes_dir / f"{name}-seed"

        _git(remotes_dir, "init", "--bare", "-b", "main", str(remote))
        seed.mkdir()
        _git(seed, "init", "-b", "main")
        _git(seed, "remote", "add", "origin", remote.as_uri())

        repo = RemoteRepo(name=name, path=remote, seed=seed)
        if not empty:
            repo.commit("hello.txt", "v1\n", "init")
        return repo

    return factory
