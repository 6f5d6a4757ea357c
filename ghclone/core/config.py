"""Typed configuration loading and access.

The config file is optional TOML:

    [github]
    api_url = "https://api.github.com"
    page_size = 100
    timeout = 30

    [git]
    remote = "origin"
    network_timeout = 600

    [sync]
    dest = "."
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_number, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "GitConfig",
    "GithubConfig",
    "SyncConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_NAME",
    "MAX_PAGE_SIZE",
    "find_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "GHCLONE_CONFIG"
DEFAULT_CONFIG_NAME = "ghclone.toml"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_REMOTE = "origin"
DEFAULT_NETWORK_TIMEOUT = 10 * 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded, parsed or validated."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GithubConfig:
    """Listing API settings."""

    api_url: str = DEFAULT_API_URL
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Git transport settings."""

    remote: str = DEFAULT_REMOTE
    network_timeout: float = DEFAULT_NETWORK_TIMEOUT


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Where clones land: ``<dest>/<entity>/<name>``."""

    dest: str = "."


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    github: GithubConfig = field(default_factory=GithubConfig)
    git: GitConfig = field(default_factory=GitConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        github: StrDict = get_table(data, "github") or {}
        git: StrDict = get_table(data, "git") or {}
        sync: StrDict = get_table(data, "sync") or {}

        page_size = get_int(github, "page_size")
        timeout = get_number(github, "timeout")
        network_timeout = get_number(git, "network_timeout")

        return cls(
            github=GithubConfig(
                api_url=(get_str(github, "api_url") or DEFAULT_API_URL).rstrip("/"),
                page_size=DEFAULT_PAGE_SIZE if page_size is None else page_size,
                timeout=DEFAULT_HTTP_TIMEOUT if timeout is None else timeout,
            ),
            git=GitConfig(
                remote=get_str(git, "remote") or DEFAULT_REMOTE,
                network_timeout=(
                    DEFAULT_NETWORK_TIMEOUT if network_timeout is None else network_timeout
                ),
            ),
            sync=SyncConfig(dest=get_str(sync, "dest") or "."),
        )

    def with_page_size(self, page_size: int) -> Config:
        return replace(self, github=replace(self.github, page_size=page_size))


def validate_config(config: Config, path: Path | None = None) -> Result[Config, ConfigError]:
    """Check value ranges that the TOML types alone cannot express."""
    page_size = config.github.page_size
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        return Err(
            ConfigError(
                f"github.page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}",
                path=path,
            )
        )
    if config.github.timeout <= 0:
        return Err(ConfigError("github.timeout must be positive", path=path))
    if config.git.network_timeout <= 0:
        return Err(ConfigError("git.network_timeout must be positive", path=path))
    return Ok(config)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load, parse and validate configuration from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
    return validate_config(config, path)


def find_config_path(explicit: Path | None = None, cwd: Path | None = None) -> Path | None:
    """Locate the config file.

    Order: explicit path, ``$GHCLONE_CONFIG``, ``./ghclone.toml``. An explicit
    or environment path is returned even if missing so that loading reports it.
    """
    if explicit is not None:
        return explicit

    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()

    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return candidate
    return None


def load_config_or_default(path: Path | None) -> Result[Config, ConfigError]:
    """Load config from ``path``, or the defaults when there is no config file."""
    if path is None:
        return Ok(Config())
    return load_config(path)
