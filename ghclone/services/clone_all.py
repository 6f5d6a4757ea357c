from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ghclone.core.config import Config
from ghclone.core.errors import ErrorCode
from ghclone.core.result import Err, Ok, Result
from ghclone.hosting.github import list_repositories
from ghclone.hosting.http import HttpClient
from ghclone.output.console import ConsoleProtocol, Style
from ghclone.output.errors import describe_sync_error
from ghclone.output.progress import NullProgress, TransferProgress
from ghclone.services.model import (
    ClonedFresh,
    MergedUpToDate,
    RecloneAfterCorruption,
    RepositoryDescriptor,
    SyncFailed,
    SyncOutcome,
    is_safe_name,
)
from ghclone.services.sync_errors import FilesystemError, ListingError
from ghclone.services.synchronizer import RepositorySynchronizer, SyncOptions


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """Outcomes of one run, in listing order."""

    outcomes: tuple[SyncOutcome, ...]

    def _count(self, kind: type) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, kind))

    @property
    def merged(self) -> int:
        return self._count(MergedUpToDate)

    @property
    def cloned(self) -> int:
        return self._count(ClonedFresh)

    @property
    def recloned(self) -> int:
        return self._count(RecloneAfterCorruption)

    @property
    def failed(self) -> list[SyncFailed]:
        return [o for o in self.outcomes if isinstance(o, SyncFailed)]

    @property
    def filesystem_failures(self) -> list[SyncFailed]:
        return [o for o in self.failed if isinstance(o.error, FilesystemError)]

    @property
    def exit_code(self) -> ErrorCode:
        # An undeletable directory needs a human; report it above plain failures.
        if self.filesystem_failures:
            return ErrorCode.IO_ERROR
        if self.failed:
            return ErrorCode.SYNC_ERROR
        return ErrorCode.OK


class CloneAllService:
    """Clone or update every repository of an entity.

    Policy:
    - The listing is fetched once; if it fails nothing is touched.
    - Repositories are processed one at a time, in listing order.
    - A failing repository is reported and the next one is attempted.
    - Local copies land at ``<dest>/<entity>/<name>``.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        http: HttpClient,
        config: Config | None = None,
        progress: TransferProgress | None = None,
    ) -> None:
        self._console = console
        self._http = http
        self._config = config or Config()
        self._progress = progress or NullProgress()

    def run(
        self,
        entity: str,
        *,
        exclude_forks: bool = False,
        bare: bool = False,
        dest: Path | None = None,
    ) -> Result[BatchSummary, ListingError]:
        """List the entity's repositories and synchronize each of them.

        Raises:
            ValueError: ``entity`` cannot be used as a directory name.
        """
        if not is_safe_name(entity):
            raise ValueError(f"invalid entity name: {entity!r}")

        listing = list_repositories(
            self._http,
            entity,
            exclude_forks=exclude_forks,
            page_size=self._config.github.page_size,
            api_url=self._config.github.api_url,
        )
        if isinstance(listing, Err):
            return listing
        descriptors = listing.value

        root = (dest if dest is not None else Path(self._config.sync.dest)) / entity
        synchronizer = RepositorySynchronizer(
            SyncOptions(
                bare=bare,
                remote=self._config.git.remote,
                network_timeout=self._config.git.network_timeout,
            ),
            on_progress=self._progress.update,
        )

        self._console.print(f"Cloning {len(descriptors)} repositories...")
        outcomes: list[SyncOutcome] = []
        for descriptor in descriptors:
            outcome = self._sync_one(synchronizer, descriptor, root / descriptor.name)
            self._report(descriptor, outcome)
            outcomes.append(outcome)

        summary = BatchSummary(outcomes=tuple(outcomes))
        self._console.newline()
        self._console.print(
            f"{summary.merged} updated, {summary.cloned} cloned, "
            f"{summary.recloned} re-cloned, {len(summary.failed)} failed",
            Style.ERROR if summary.failed else Style.SUCCESS,
        )
        return Ok(summary)

    def _sync_one(
        self,
        synchronizer: RepositorySynchronizer,
        descriptor: RepositoryDescriptor,
        path: Path,
    ) -> SyncOutcome:
        self._progress.start(descriptor.name)
        try:
            return synchronizer.synchronize(descriptor, path)
        finally:
            self._progress.stop()

    def _report(self, descriptor: RepositoryDescriptor, outcome: SyncOutcome) -> None:
        match outcome:
            case MergedUpToDate(head=head):
                suffix = f" ({head[:7]})" if head else ""
                self._console.success(f"Successfully fetched {descriptor.clone_url}{suffix}")
            case ClonedFresh():
                self._console.success(f"Successfully cloned {descriptor.clone_url}")
            case RecloneAfterCorruption(reason=reason):
                self._console.warning(
                    f"Repository {descriptor.name} was invalid ({reason.reason}), re-cloned it"
                )
                self._console.success(f"Successfully cloned {descriptor.clone_url}")
            case SyncFailed(error=error, path=path):
                self._console.error(f"{descriptor.name}: {describe_sync_error(error)}")
                if isinstance(error, FilesystemError):
                    self._console.print(
                        f"hint: remove {path} manually, it will be cloned on the next run",
                        Style.DIM,
                    )
