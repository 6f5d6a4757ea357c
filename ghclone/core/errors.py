"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ghclone command.

    - 0: Success
    - 1: User error (bad arguments or config, unknown entity)
    - 3: Sync error (one or more repositories failed to sync)
    - 4: Network error (repository listing failed)
    - 5: I/O error (a local directory could not be removed)
    """

    OK = 0
    USER_ERROR = 1
    SYNC_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
