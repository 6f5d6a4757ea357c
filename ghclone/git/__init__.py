"""Git operations.

Usage:
    from ghclone.git import Repository

    repo = Repository(Path("acme/a"))
    if repo.exists():
        repo.fetch("origin")
"""

from ghclone.git.progress import ProgressCallback, parse_progress, progress_handler
from ghclone.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "ProgressCallback",
    "Repository",
    "parse_progress",
    "progress_handler",
]
