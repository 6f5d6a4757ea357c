"""Hosting service access (GitHub REST API over HttpClient)."""

from ghclone.hosting.github import decode_page, fetch_page, list_repositories, repos_url
from ghclone.hosting.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "decode_page",
    "fetch_page",
    "list_repositories",
    "repos_url",
]
