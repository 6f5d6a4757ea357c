"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ghclone.core.errors import ErrorCode
from ghclone.output.console import Style
from ghclone.services.sync_errors import (
    DecodeError,
    FilesystemError,
    ListingError,
    MergeConflictError,
    NotFound,
    RateLimited,
    SyncError,
    TransportError,
    ValidationError,
)

if TYPE_CHECKING:
    from ghclone.output.console import ConsoleProtocol

__all__ = [
    "describe_sync_error",
    "listing_error_exit_code",
    "print_listing_error",
]


def print_listing_error(error: ListingError, console: ConsoleProtocol) -> None:
    """Print a listing failure to console."""
    match error:
        case NotFound(entity=entity):
            console.error(f"no GitHub user or organization named '{entity}'")
        case RateLimited(message=message):
            console.error(f"GitHub API rate limit exceeded: {message}")
            console.print("hint: wait for the limit to reset and run again", Style.DIM)
        case TransportError(message=message):
            console.error(f"Error getting repositories: {message}")
        case DecodeError(url=url, message=message):
            console.error(f"unexpected response from {url}: {message}")


def listing_error_exit_code(error: ListingError) -> int:
    """Get exit code for a listing failure."""
    match error:
        case NotFound():
            return int(ErrorCode.USER_ERROR)
        case RateLimited() | TransportError() | DecodeError():
            return int(ErrorCode.NETWORK_ERROR)


def describe_sync_error(error: SyncError) -> str:
    """One-line cause for a failed repository."""
    match error:
        case TransportError(operation=operation, message=message):
            return f"{operation} failed: {message}"
        case MergeConflictError(target=target, message=message):
            return f"cannot fast-forward to {target}: {message}"
        case ValidationError(path=path, reason=reason):
            return f"cannot inspect {path}: {reason}"
        case FilesystemError(path=path, message=message):
            return f"cannot remove invalid repository at {path}: {message}"
