from __future__ import annotations

import typer

from ghclone.cli.commands.clone import clone

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(clone)


def main() -> None:
    app()
