"""Subprocess execution with Result-based error handling.

Two flavours:
- run(): capture stdout/stderr, for short local git queries.
- run_streaming(): hand stderr to a callback line by line while the command
  runs, for clone/fetch where git reports transfer progress on stderr.

Both return Ok(stdout) or Err(ProcessError) and never raise for a failing
command. In run_streaming() a timeout or KeyboardInterrupt kills the process
together with the children it started; KeyboardInterrupt then propagates.
"""

from __future__ import annotations

import codecs
import os
import re
import signal
import subprocess
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from ghclone.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]

_CHUNK_SIZE = 4096

# POSIX: each streamed command leads its own process group so that helpers it
# spawns (git-remote-https, index-pack) are killed with it.
_NEW_SESSION = sys.platform != "win32"

# git rewrites progress lines in place with a bare carriage return
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
        timed_out: True if the process was killed after its timeout.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def _pump_lines(stream: IO[bytes], on_line: Callable[[str], None]) -> str:
    """Read ``stream`` to EOF, calling ``on_line`` per non-empty line.

    Returns everything read, newline-joined.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    lines: list[str] = []
    pending = ""
    fd = stream.fileno()

    while True:
        chunk = os.read(fd, _CHUNK_SIZE)
        if not chunk:
            break
        pending += decoder.decode(chunk)
        *complete, pending = _LINE_BREAK.split(pending)
        for line in complete:
            if line:
                lines.append(line)
                on_line(line)

    pending += decoder.decode(b"", final=True)
    if pending:
        lines.append(pending)
        on_line(pending)

    return "\n".join(lines)


def _kill_group(proc: subprocess.Popen[bytes]) -> None:
    if not _NEW_SESSION:
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        proc.kill()


def run_streaming(
    cmd: list[str],
    cwd: Path,
    on_line: Callable[[str], None],
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command, streaming its stderr to ``on_line``.

    Stderr is split on both ``\\n`` and ``\\r``. The callback runs on the
    calling thread, so an exception it raises propagates (after the process
    has been killed).

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        on_line: Called with each stderr line as it arrives.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds the command may run (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure or timeout.
    """
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=_NEW_SESSION,
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    finished = False
    timed_out = threading.Event()

    def _kill_on_timeout() -> None:
        timed_out.set()
        _kill_group(proc)

    timer = threading.Timer(timeout, _kill_on_timeout) if timeout is not None else None
    stdout_parts: list[bytes] = []

    def _drain_stdout() -> None:
        if proc.stdout is not None:
            stdout_parts.append(proc.stdout.read())

    drainer = threading.Thread(target=_drain_stdout, daemon=True)

    with proc:
        if timer is not None:
            timer.start()
        drainer.start()
        try:
            stderr = _pump_lines(proc.stderr, on_line) if proc.stderr is not None else ""
            returncode = proc.wait()
            finished = True
        finally:
            if timer is not None:
                timer.cancel()
            if not finished:
                _kill_group(proc)
                proc.wait()
            drainer.join()

    stdout = b"".join(stdout_parts).decode("utf-8", errors="replace")

    if timed_out.is_set():
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=stdout,
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        )

    if returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
            )
        )

    return Ok(stdout)
