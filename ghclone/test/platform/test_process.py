"""Tests for ghclone.platform.process module."""

from __future__ import annotations

import shutil
import sys
import time
from pathlib import Path

import pytest

from ghclone.core.result import Err, Ok
from ghclone.platform.process import ProcessError, run, run_streaming


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "clone", "--progress", "url", "dest"),
            returncode=128,
            stdout="",
            stderr="error",
        )
        assert str(error) == "git clone --progress ... failed (exit 128)"

    def test_str_timed_out(self) -> None:
        error = ProcessError(("git", "fetch"), -1, "", "", timed_out=True)
        assert str(error) == "git fetch timed out"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
        result = run(cmd, cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert result.error.timed_out is True


class TestRunStreaming:
    def test_lines_split_on_carriage_return(self, tmp_path: Path) -> None:
        script = (
            "import sys\n"
            "sys.stderr.write('a 1/3\\ra 2/3\\ra 3/3\\nsecond\\n')\n"
            "sys.stderr.flush()\n"
            "print('out')\n"
        )
        lines: list[str] = []

        result = run_streaming([sys.executable, "-c", script], cwd=tmp_path, on_line=lines.append)

        assert isinstance(result, Ok)
        assert result.value.strip() == "out"
        assert lines == ["a 1/3", "a 2/3", "a 3/3", "second"]

    def test_trailing_partial_line_is_delivered(self, tmp_path: Path) -> None:
        script = "import sys; sys.stderr.write('no newline')"
        lines: list[str] = []

        run_streaming([sys.executable, "-c", script], cwd=tmp_path, on_line=lines.append)

        assert lines == ["no newline"]

    def test_failure_keeps_stderr(self, tmp_path: Path) -> None:
        script = "import sys; sys.stderr.write('fatal: nope\\n'); sys.exit(128)"

        result = run_streaming([sys.executable, "-c", script], cwd=tmp_path, on_line=lambda _: None)

        assert isinstance(result, Err)
        assert result.error.returncode == 128
        assert "fatal: nope" in result.error.stderr

    def test_timeout_kills_process(self, tmp_path: Path) -> None:
        result = run_streaming(
            [sys.executable, "-c", "import time; time.sleep(30)"],
            cwd=tmp_path,
            on_line=lambda _: None,
            timeout=0.3,
        )
        assert isinstance(result, Err)
        assert result.error.timed_out is True
        assert result.error.returncode == -1

    @pytest.mark.skipif(
        sys.platform == "win32" or shutil.which("sh") is None, reason="POSIX shell"
    )
    def test_timeout_kills_background_children(self, tmp_path: Path) -> None:
        started = time.monotonic()

        result = run_streaming(
            ["sh", "-c", "(sleep 30) & sleep 60"],
            cwd=tmp_path,
            on_line=lambda _: None,
            timeout=0.5,
        )

        assert time.monotonic() - started < 10
        assert isinstance(result, Err)
        assert result.error.timed_out is True

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_streaming(["nonexistent_command_12345"], cwd=tmp_path, on_line=lambda _: None)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_callback_exception_propagates(self, tmp_path: Path) -> None:
        script = "import sys, time; sys.stderr.write('x\\n'); sys.stderr.flush(); time.sleep(30)"

        def explode(_line: str) -> None:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            run_streaming([sys.executable, "-c", script], cwd=tmp_path, on_line=explode)
