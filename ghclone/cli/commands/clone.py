from __future__ import annotations

from pathlib import Path

import typer

from ghclone import __version__
from ghclone.cli.context import build_context
from ghclone.core.config import CONFIG_ENV_VAR, MAX_PAGE_SIZE
from ghclone.core.errors import ErrorCode
from ghclone.core.result import Err, Ok
from ghclone.output.errors import listing_error_exit_code, print_listing_error
from ghclone.services.clone_all import CloneAllService
from ghclone.services.model import is_safe_name


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def clone(
    entity: str = typer.Argument(
        ..., help="User or Org of which all repositories shall be cloned"
    ),
    bare: bool = typer.Option(False, "--bare", help="Creates bare Git repositories"),
    no_forks: bool = typer.Option(False, "--no-forks", help="Whether forks should be ignored"),
    dest: Path | None = typer.Option(
        None,
        "--dest",
        help="Directory receiving <entity>/<repository> (default: sync.dest or .)",
    ),
    page_size: int | None = typer.Option(
        None,
        "--page-size",
        min=1,
        max=MAX_PAGE_SIZE,
        help="Repositories per listing request",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar=CONFIG_ENV_VAR,
        help="Config file (default: ./ghclone.toml if present)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Clone every repository of a GitHub user or organization, or update existing clones."""
    if not is_safe_name(entity):
        typer.echo(f"error: invalid user or organization name: {entity!r}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context(config)
    cfg = ctx.config if page_size is None else ctx.config.with_page_size(page_size)

    service = CloneAllService(
        console=ctx.console,
        http=ctx.http,
        config=cfg,
        progress=ctx.progress,
    )
    result = service.run(entity, exclude_forks=no_forks, bare=bare, dest=dest)
    match result:
        case Err(e):
            print_listing_error(e, ctx.console)
            raise typer.Exit(code=listing_error_exit_code(e))
        case Ok(summary):
            if not summary.exit_code.is_success:
                raise typer.Exit(code=int(summary.exit_code))
