from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from ghclone import __version__
from ghclone.cli.app import app
from ghclone.cli.context import CLIContext
from ghclone.core.config import Config
from ghclone.hosting.github import repos_url
from ghclone.hosting.http import HttpError, MockHttpClient
from ghclone.output.console import MockConsole
from ghclone.output.progress import NullProgress

runner = CliRunner()

API = "https://api.github.com"


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch, console: MockConsole) -> MockHttpClient:
    """MockHttpClient wired into the clone command through build_context."""
    import ghclone.cli.commands.clone as clone_cmd

    client = MockHttpClient()

    def fake_build_context(config_path: Path | None = None) -> CLIContext:
        return CLIContext(config=Config(), console=console, http=client, progress=NullProgress())

    monkeypatch.setattr(clone_cmd, "build_context", fake_build_context)
    return client


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_invalid_entity_is_rejected() -> None:
    result = runner.invoke(app, ["../etc"])
    assert result.exit_code == 1
    assert "invalid user or organization name" in result.output


def test_missing_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["acme", "--config", str(tmp_path / "nope.toml")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_page_size_out_of_range() -> None:
    result = runner.invoke(app, ["acme", "--page-size", "0"])
    assert result.exit_code == 2


def test_empty_listing_succeeds(
    tmp_path: Path, http: MockHttpClient, console: MockConsole
) -> None:
    http.set_text(repos_url(API, "acme", 1, 100), "[]")

    result = runner.invoke(app, ["acme", "--dest", str(tmp_path)])

    assert result.exit_code == 0
    assert console.messages[0] == "Cloning 0 repositories..."


def test_page_size_option_reaches_listing(tmp_path: Path, http: MockHttpClient) -> None:
    http.set_text(repos_url(API, "acme", 1, 7), "[]")

    result = runner.invoke(app, ["acme", "--page-size", "7", "--dest", str(tmp_path)])

    assert result.exit_code == 0
    assert http.calls == [repos_url(API, "acme", 1, 7)]


def test_unknown_entity_exit_code(http: MockHttpClient, console: MockConsole) -> None:
    result = runner.invoke(app, ["ghost"])

    assert result.exit_code == 1
    assert console.find("no GitHub user or organization named 'ghost'")


def test_network_failure_exit_code(http: MockHttpClient, console: MockConsole) -> None:
    url = repos_url(API, "acme", 1, 100)
    http.set_text(url, HttpError(url, 0, "connection refused"))

    result = runner.invoke(app, ["acme"])

    assert result.exit_code == 4
    assert console.has_error()


def test_failed_repository_exit_code(
    tmp_path: Path, http: MockHttpClient, console: MockConsole, git: object
) -> None:
    missing = (tmp_path / "gone.git").as_uri()
    http.set_text(
        repos_url(API, "acme", 1, 100),
        json.dumps([{"name": "gone", "clone_url": missing}]),
    )

    result = runner.invoke(app, ["acme", "--dest", str(tmp_path / "out")])

    assert result.exit_code == 3
    assert console.find("error: gone: clone failed:")


def test_no_forks_and_bare_flags(
    tmp_path: Path, http: MockHttpClient, console: MockConsole
) -> None:
    records = [{"name": "f", "clone_url": "https://github.com/x/f.git", "fork": True}]
    http.set_text(repos_url(API, "acme", 1, 100), json.dumps(records))

    result = runner.invoke(app, ["acme", "--no-forks", "--bare", "--dest", str(tmp_path)])

    assert result.exit_code == 0
    assert console.messages[0] == "Cloning 0 repositories..."


def test_default_dest_rerun_updates_in_place(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    http: MockHttpClient,
    console: MockConsole,
    make_remote: Callable[..., Any],
) -> None:
    remote = make_remote("a")
    records = [{"name": "a", "clone_url": remote.url, "default_branch": "main"}]
    http.set_text(repos_url(API, "acme", 1, 100), json.dumps(records))
    monkeypatch.chdir(tmp_path)

    first = runner.invoke(app, ["acme"])
    second = runner.invoke(app, ["acme"])

    assert first.exit_code == 0
    assert second.exit_code == 0
    assert (tmp_path / "acme" / "a" / "hello.txt").exists()
    assert not (tmp_path / "acme" / "acme").exists()
    assert console.find(f"Successfully fetched {remote.url}")
    assert not console.has_error()
