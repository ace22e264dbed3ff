"""
Configuration for the remote repository, site layout and admin gate.

Resolution order for every setting:
  1. Environment variables (GITHUB_OWNER, GITHUB_REPO, GITHUB_TOKEN, ...)
  2. Config file ($PRESSROOM_CONFIG or ~/.config/pressroom/config.yaml)
  3. Built-in defaults

Settings are read once per process through ``get_settings()`` and passed
explicitly to the client, store and managers from there on.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class RemoteSettings:
    """Coordinates and credentials for the GitHub repository holding the content."""

    owner: str | None = None
    repo: str | None = None
    branch: str = DEFAULT_BRANCH
    token: str | None = field(default=None, repr=False)
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    dry_run: bool = False

    @property
    def is_configured(self) -> bool:
        """True when owner, repository and token are all set."""
        return bool(self.owner and self.repo and self.token)

    @property
    def contents_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}/contents"

    @property
    def missing(self) -> list[str]:
        """Names of the unset credentials."""
        return [
            name
            for name, value in (("owner", self.owner), ("repo", self.repo), ("token", self.token))
            if not value
        ]


@dataclass(frozen=True)
class SiteLayout:
    """Where content and uploads live inside the repository."""

    content_root: str = "src/content"
    asset_root: str = "public/uploads"
    asset_url_prefix: str = "/uploads"


@dataclass(frozen=True)
class AdminCredentials:
    """Username and password expected by the admin gate."""

    username: str | None = None
    password: str | None = field(default=None, repr=False)

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class Settings:
    """All settings, grouped."""

    remote: RemoteSettings = field(default_factory=RemoteSettings)
    layout: SiteLayout = field(default_factory=SiteLayout)
    admin: AdminCredentials = field(default_factory=AdminCredentials)

    def with_dry_run(self, dry_run: bool = True) -> Settings:
        return replace(self, remote=replace(self.remote, dry_run=dry_run))


def get_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the path to the pressroom config file.

    ``$PRESSROOM_CONFIG`` wins; otherwise respects XDG_CONFIG_HOME if set,
    defaulting to ~/.config/pressroom/config.yaml.

    Returns:
        Path to config file (may not exist).
    """
    env = os.environ if environ is None else environ
    explicit = env.get("PRESSROOM_CONFIG")
    if explicit:
        return Path(explicit).expanduser()
    xdg_config_home = env.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "pressroom" / "config.yaml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Returns:
        Configuration dict, or empty dict if file is missing or invalid.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _pick(env: Mapping[str, str], env_key: str, section: dict[str, Any], key: str, default: Any = None) -> Any:
    value = env.get(env_key)
    if value:
        return value
    value = section.get(key)
    if value is not None and value != "":
        return value
    return default


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> Settings:
    """Build settings from the environment and the config file.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        config_path: Config file to read (defaults to ``get_config_path()``)

    Returns:
        Settings value
    """
    env = os.environ if environ is None else environ
    config = load_config_file(config_path or get_config_path(env))
    remote_cfg = _section(config, "remote")
    layout_cfg = _section(config, "layout")
    admin_cfg = _section(config, "admin")

    timeout = _pick(env, "PRESSROOM_TIMEOUT", remote_cfg, "timeout", DEFAULT_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT

    remote = RemoteSettings(
        owner=_pick(env, "GITHUB_OWNER", remote_cfg, "owner"),
        repo=_pick(env, "GITHUB_REPO", remote_cfg, "repo"),
        branch=_pick(env, "GITHUB_BRANCH", remote_cfg, "branch", DEFAULT_BRANCH),
        token=_pick(env, "GITHUB_TOKEN", remote_cfg, "token"),
        api_url=_pick(env, "GITHUB_API_URL", remote_cfg, "api_url", DEFAULT_API_URL),
        timeout=timeout,
    )
    defaults = SiteLayout()
    layout = SiteLayout(
        content_root=str(_pick(env, "PRESSROOM_CONTENT_ROOT", layout_cfg, "content_root", defaults.content_root)).strip("/"),
        asset_root=str(_pick(env, "PRESSROOM_ASSET_ROOT", layout_cfg, "asset_root", defaults.asset_root)).strip("/"),
        asset_url_prefix="/" + str(
            _pick(env, "PRESSROOM_ASSET_URL_PREFIX", layout_cfg, "asset_url_prefix", defaults.asset_url_prefix)
        ).strip("/"),
    )
    admin = AdminCredentials(
        username=_pick(env, "ADMIN_USERNAME", admin_cfg, "username"),
        password=_pick(env, "ADMIN_PASSWORD", admin_cfg, "password"),
    )
    return Settings(remote=remote, layout=layout, admin=admin)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached process-wide settings."""
    return load_settings()
