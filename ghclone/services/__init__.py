"""Listing and synchronization services.

Services implement the behaviour of the tool, coordinating between the
domain types (model.py, sync_errors.py) and infrastructure (git/, hosting/).
"""

from ghclone.services.model import (
    ClonedFresh,
    LocalRepositoryHandle,
    LocalState,
    MergedUpToDate,
    RecloneAfterCorruption,
    RepositoryDescriptor,
    SyncFailed,
    SyncOutcome,
)
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

__all__ = [
    # Model
    "ClonedFresh",
    "LocalRepositoryHandle",
    "LocalState",
    "MergedUpToDate",
    "RecloneAfterCorruption",
    "RepositoryDescriptor",
    "SyncFailed",
    "SyncOutcome",
    # Errors
    "DecodeError",
    "FilesystemError",
    "ListingError",
    "MergeConflictError",
    "NotFound",
    "RateLimited",
    "SyncError",
    "TransportError",
    "ValidationError",
]
