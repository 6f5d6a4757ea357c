"""Tests for ghclone.core.errors module."""

import pytest

from ghclone.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the command-line contract."""

    @pytest.mark.parametrize(
        ("code", "value"),
        [
            (ErrorCode.OK, 0),
            (ErrorCode.USER_ERROR, 1),
            (ErrorCode.SYNC_ERROR, 3),
            (ErrorCode.NETWORK_ERROR, 4),
            (ErrorCode.IO_ERROR, 5),
        ],
    )
    def test_value(self, code: ErrorCode, value: int) -> None:
        assert code == value


class TestErrorCodeUsage:
    def test_can_use_as_int(self) -> None:
        code: int = ErrorCode.SYNC_ERROR
        assert code == 3

    def test_str(self) -> None:
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.IO_ERROR.is_success
