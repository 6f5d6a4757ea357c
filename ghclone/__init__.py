"""ghclone: keep local copies of every repository of a GitHub user or org."""

__version__ = "0.3.0"
