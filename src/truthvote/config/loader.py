"""Configuration loading: TOML files, env var overrides, merge logic.

Discovery order (later overrides earlier):
    1. Built-in defaults (Pydantic model defaults)
    2. User config: ``~/.config/truthvote/config.toml``
    3. Project-local config: ``./truthvote.toml``
    4. ``$TRUTHVOTE_CONFIG`` environment variable (explicit path)
    5. An explicit path passed to ``load_config``
    6. ``$TRUTHVOTE_DATABASE_URL`` (database URL only)
    7. Programmatic overrides (passed to ``load_config``, e.g. CLI flags)

Each provider's ``api_key_env`` field names an env var (e.g.
``OPENAI_API_KEY``).  If the env var is set *and* ``api_key`` is not
already provided, the loader resolves it.  A provider left without a key
is not an error; the fact checker answers with placeholders for it.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from truthvote.core.errors import ConfigError

from .schema import TruthVoteConfig


def _user_config_path() -> Path:
    """Return XDG-compliant user config path."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "truthvote" / "config.toml"


def _project_config_path() -> Path:
    """Return project-local config path."""
    return Path.cwd() / "truthvote.toml"


def _discover_config_files() -> list[Path]:
    """Return config files in merge order (first = lowest priority)."""
    paths: list[Path] = []

    user = _user_config_path()
    if user.is_file():
        paths.append(user)

    project = _project_config_path()
    if project.is_file():
        paths.append(project)

    env_path = os.environ.get("TRUTHVOTE_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            msg = f"TRUTHVOTE_CONFIG points to non-existent file: {env_path}"
            raise ConfigError(msg)
        paths.append(p)

    return paths


def _read_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _database_url_from_env() -> dict[str, Any]:
    """Read ``$TRUTHVOTE_DATABASE_URL`` into a ``database`` section.

    Plain ``postgresql://`` URLs (as hosting platforms hand them out) are
    pointed at the asyncpg driver.
    """
    url = os.environ.get("TRUTHVOTE_DATABASE_URL", "").strip()
    if not url:
        return {}
    if url.startswith("postgres://"):
        url = "postgresql://" + url.removeprefix("postgres://")
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url.removeprefix("postgresql://")
    return {"database": {"url": url}}


def _resolve_api_keys(config: TruthVoteConfig) -> None:
    """Resolve API keys from environment variables (in-place)."""
    for provider in config.providers.values():
        if provider.api_key is None and provider.api_key_env:
            provider.api_key = os.environ.get(provider.api_key_env) or None


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> TruthVoteConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file path (highest file priority).
        overrides: Dict of overrides merged last (highest overall priority).

    Returns:
        Validated TruthVoteConfig instance.

    Raises:
        ConfigError: On invalid TOML, missing files, or validation failure.
    """
    merged: dict[str, Any] = {}

    files = _discover_config_files()

    if path is not None:
        p = Path(path)
        if not p.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        files.append(p)

    for config_file in files:
        data = _read_toml(config_file)
        merged = _deep_merge(merged, data)

    merged = _deep_merge(merged, _database_url_from_env())

    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        config = TruthVoteConfig.model_validate(merged)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e

    _resolve_api_keys(config)

    return config
