"""Repository listing from the GitHub REST API.

The listing is paginated: ``/users/{entity}/repos?per_page=P&page=N``. The
endpoint serves both users and organizations. Pages are requested one after
the other until a page comes back with fewer than P records. When the total
is an exact multiple of P the next (empty) page is what ends the listing, so
R repositories take ceil(R/P) + [R mod P == 0] requests.

Usage:
    http = RealHttpClient(timeout=30)
    match list_repositories(http, "acme", exclude_forks=True):
        case Ok(descriptors):
            ...
        case Err(NotFound(entity=entity)):
            print(f"no such user or organization: {entity}")
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from urllib.parse import quote

from ghclone.core.config import DEFAULT_API_URL, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ghclone.core.result import Err, Ok, Result
from ghclone.core.structured import as_obj_list, as_str_dict, get_bool, get_str
from ghclone.services.model import RepositoryDescriptor, is_safe_name
from ghclone.services.sync_errors import (
    DecodeError,
    ListingError,
    NotFound,
    RateLimited,
    TransportError,
)

if TYPE_CHECKING:
    from ghclone.hosting.http import HttpClient, HttpError

__all__ = [
    "decode_page",
    "fetch_page",
    "list_repositories",
    "repos_url",
]


def repos_url(api_url: str, entity: str, page: int, per_page: int) -> str:
    """URL of one listing page (pages are 1-based)."""
    base = api_url.rstrip("/")
    return f"{base}/users/{quote(entity, safe='')}/repos?per_page={per_page}&page={page}"


def _listing_error(error: HttpError, entity: str) -> ListingError:
    if error.status == 404:
        return NotFound(entity=entity)
    if error.rate_limited:
        return RateLimited(url=error.url, message=error.message)
    if error.malformed:
        return DecodeError(url=error.url, message=error.message)
    return TransportError(operation="list", message=str(error))


def decode_page(text: str, url: str) -> Result[list[RepositoryDescriptor], DecodeError]:
    """Decode one listing page into descriptors, in API order.

    Any malformed record fails the whole page; records are never dropped, so
    the number of descriptors equals the number of records on the page.
    """
    try:
        raw_data: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(DecodeError(url=url, message=f"JSON parse error: {e}"))

    records = as_obj_list(raw_data)
    if records is None:
        return Err(DecodeError(url=url, message="Expected JSON array"))

    descriptors: list[RepositoryDescriptor] = []
    for index, item in enumerate(records):
        record = as_str_dict(item)
        if record is None:
            return Err(DecodeError(url=url, message=f"record {index} is not an object"))

        name = get_str(record, "name")
        clone_url = get_str(record, "clone_url")
        if name is None:
            return Err(DecodeError(url=url, message=f"record {index} has no name"))
        if clone_url is None:
            return Err(DecodeError(url=url, message=f"record {index} ({name}) has no clone_url"))
        if not is_safe_name(name):
            return Err(DecodeError(url=url, message=f"unsafe repository name: {name!r}"))

        descriptors.append(
            RepositoryDescriptor(
                name=name,
                clone_url=clone_url,
                fork=get_bool(record, "fork") or False,
                default_branch=get_str(record, "default_branch"),
                full_name=get_str(record, "full_name"),
            )
        )

    return Ok(descriptors)


def fetch_page(
    http: HttpClient,
    entity: str,
    page: int,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    api_url: str = DEFAULT_API_URL,
) -> Result[list[RepositoryDescriptor], ListingError]:
    """Fetch and decode a single listing page."""
    url = repos_url(api_url, entity, page, page_size)
    result = http.get_text(url)
    if isinstance(result, Err):
        return Err(_listing_error(result.error, entity))
    return decode_page(result.value, url)


def list_repositories(
    http: HttpClient,
    entity: str,
    *,
    exclude_forks: bool = False,
    page_size: int = DEFAULT_PAGE_SIZE,
    api_url: str = DEFAULT_API_URL,
) -> Result[list[RepositoryDescriptor], ListingError]:
    """List every repository of ``entity``.

    Args:
        http: HTTP client to use
        entity: User or organization login
        exclude_forks: Drop descriptors flagged as forks
        page_size: Records per page, 1..100
        api_url: API root (GitHub Enterprise installs differ)

    Returns:
        Ok with all descriptors in API order, or Err with the first failure.
        A failure on any page discards the pages already fetched.

    Raises:
        ValueError: page_size is out of range.
    """
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")

    descriptors: list[RepositoryDescriptor] = []
    seen: dict[str, str] = {}
    page = 1

    while True:
        result = fetch_page(http, entity, page, page_size=page_size, api_url=api_url)
        if isinstance(result, Err):
            return result
        batch = result.value

        kept: list[RepositoryDescriptor] = []
        for descriptor in batch:
            known_url = seen.get(descriptor.name)
            if known_url is None:
                seen[descriptor.name] = descriptor.clone_url
                kept.append(descriptor)
                continue
            # A repository created mid-listing shifts later pages by one.
            if known_url != descriptor.clone_url:
                return Err(
                    DecodeError(
                        url=repos_url(api_url, entity, page, page_size),
                        message=f"duplicate repository name: {descriptor.name}",
                    )
                )

        if exclude_forks:
            kept = [d for d in kept if not d.fork]
        descriptors.extend(kept)

        # Decided on the raw page, before fork filtering
        if len(batch) < page_size:
            break
        page += 1

    return Ok(descriptors)
