from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, slots=True)
class NotFound:
    entity: str


@dataclass(frozen=True, slots=True)
class RateLimited:
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class TransportError:
    operation: Literal["list", "clone", "fetch"]
    message: str


@dataclass(frozen=True, slots=True)
class DecodeError:
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationError:
    """The directory at ``path`` is not a usable clone of the descriptor.

    ``inconclusive`` means git could not be run at all, which says nothing
    about the directory and must never lead to its removal.
    """

    path: Path
    reason: str
    inconclusive: bool = False


@dataclass(frozen=True, slots=True)
class MergeConflictError:
    target: str
    message: str


@dataclass(frozen=True, slots=True)
class FilesystemError:
    path: Path
    message: str


ListingError = NotFound | RateLimited | TransportError | DecodeError

SyncError = TransportError | ValidationError | MergeConflictError | FilesystemError
