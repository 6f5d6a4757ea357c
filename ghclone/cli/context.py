from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from ghclone.core.config import Config, find_config_path, load_config_or_default
from ghclone.core.errors import ErrorCode
from ghclone.core.result import Err
from ghclone.hosting.http import HttpClient, RealHttpClient
from ghclone.output.console import ConsoleProtocol, RichConsole
from ghclone.output.progress import NullProgress, RichProgress, TransferProgress


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    http: HttpClient
    progress: TransferProgress


def build_context(config_path: Path | None = None) -> CLIContext:
    path = find_config_path(config_path)
    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    config = config_result.value

    console = RichConsole()
    progress: TransferProgress = (
        RichProgress(console) if console.rich.is_terminal else NullProgress()
    )

    return CLIContext(
        config=config,
        console=console,
        http=RealHttpClient(timeout=config.github.timeout),
        progress=progress,
    )
