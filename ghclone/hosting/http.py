"""HTTP client abstraction for the hosting API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from email.message import Message
from typing import Protocol, runtime_checkable

from ghclone import __version__
from ghclone.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]

_GITHUB_ACCEPT = "application/vnd.github+json"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        rate_limited: True if the server refused because of rate limiting
        malformed: True if the body arrived but could not be decoded as text
    """

    url: str
    status: int
    message: str
    rate_limited: bool = False
    malformed: bool = False

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def _is_rate_limited(status: int, headers: Message | None) -> bool:
    if status == 429:
        return True
    if status != 403 or headers is None:
        return False
    return headers.get("X-RateLimit-Remaining") == "0"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Allows injecting mock clients so tests never touch the network.
    """

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Fetch URL and return the body as text.

        Args:
            url: URL to fetch

        Returns:
            Ok with response text, or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Every request is bounded by ``timeout`` seconds.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = f"ghclone/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(self, url: str) -> Result[bytes, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                headers={"User-Agent": self.user_agent, "Accept": _GITHUB_ACCEPT},
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(
                HttpError(
                    url=url,
                    status=e.code,
                    message=e.reason if isinstance(e.reason, str) else str(e.reason),
                    rate_limited=_is_rate_limited(e.code, e.headers),
                )
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Fetch URL and return as text."""
        result = self._request(url)
        if isinstance(result, Err):
            return result

        try:
            return Ok(result.value.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(
                HttpError(url=url, status=0, message=f"Decode error: {e}", malformed=True)
            )


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_text("https://api.github.com/users/acme/repos?per_page=2&page=1", "[]")
        result = client.get_text("https://api.github.com/users/acme/repos?per_page=2&page=1")
        assert result == Ok("[]")
    """

    def __init__(self) -> None:
        self._text_responses: dict[str, str | HttpError] = {}
        self.calls: list[str] = []

    def set_text(self, url: str, response: str | HttpError) -> None:
        """Set text response for URL."""
        self._text_responses[url] = response

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Get mocked text response; unknown URLs are 404."""
        self.calls.append(url)

        if url not in self._text_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._text_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
