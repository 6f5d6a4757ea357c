"""Tests for ghclone.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ghclone.core.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_NAME,
    Config,
    GitConfig,
    GithubConfig,
    find_config_path,
    load_config,
    load_config_or_default,
)
from ghclone.core.result import Err, Ok


class TestDefaults:
    def test_github_defaults(self) -> None:
        config = GithubConfig()
        assert config.api_url == "https://api.github.com"
        assert config.page_size == 100
        assert config.timeout == 30.0

    def test_git_defaults(self) -> None:
        config = GitConfig()
        assert config.remote == "origin"
        assert config.network_timeout == 600.0

    def test_config_defaults(self) -> None:
        config = Config()
        assert config.sync.dest == "."
        assert config.github.page_size == 100

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.github = GithubConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty_dict_gives_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_values_are_read(self) -> None:
        config = Config.from_dict(
            {
                "github": {
                    "api_url": "https://ghe.example.com/api/v3/",
                    "page_size": 50,
                    "timeout": 5,
                },
                "git": {"remote": "upstream", "network_timeout": 120.5},
                "sync": {"dest": "/srv/mirror"},
            }
        )
        assert config.github.api_url == "https://ghe.example.com/api/v3"
        assert config.github.page_size == 50
        assert config.github.timeout == 5.0
        assert config.git.remote == "upstream"
        assert config.git.network_timeout == 120.5
        assert config.sync.dest == "/srv/mirror"

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        config = Config.from_dict({"github": {"page_size": "many", "timeout": True}})
        assert config.github.page_size == 100
        assert config.github.timeout == 30.0

    def test_page_size_override(self) -> None:
        config = Config().with_page_size(2)
        assert config.github.page_size == 2
        assert config.github.api_url == Config().github.api_url


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "ghclone.toml"
        path.write_text('[github]\npage_size = 10\n\n[sync]\ndest = "mirror"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.github.page_size == 10
        assert result.value.sync.dest == "mirror"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[github\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    @pytest.mark.parametrize("page_size", [0, 101, -3])
    def test_page_size_out_of_range(self, tmp_path: Path, page_size: int) -> None:
        path = tmp_path / "ghclone.toml"
        path.write_text(f"[github]\npage_size = {page_size}\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "page_size" in result.error.message

    def test_non_positive_timeout(self, tmp_path: Path) -> None:
        path = tmp_path / "ghclone.toml"
        path.write_text("[git]\nnetwork_timeout = 0\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "network_timeout" in result.error.message

    def test_or_default_without_path(self) -> None:
        assert load_config_or_default(None) == Ok(Config())


class TestFindConfigPath:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.toml"))
        explicit = tmp_path / "explicit.toml"
        assert find_config_path(explicit, cwd=tmp_path) == explicit

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.toml"))
        assert find_config_path(None, cwd=tmp_path) == tmp_path / "env.toml"

    def test_cwd_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        (tmp_path / DEFAULT_CONFIG_NAME).write_text("", encoding="utf-8")
        assert find_config_path(None, cwd=tmp_path) == tmp_path / DEFAULT_CONFIG_NAME

    def test_nothing_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert find_config_path(None, cwd=tmp_path) is None
