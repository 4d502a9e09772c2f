"""Tests for configuration loading and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from truthvote.config.loader import _deep_merge, load_config
from truthvote.config.schema import (
    AnalysisConfig,
    APIConfig,
    DatabaseConfig,
    GeneralConfig,
    LoggingConfig,
    TruthVoteConfig,
    WebContextConfig,
)
from truthvote.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep the developer's real config files and API keys out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRUTHVOTE_CONFIG", raising=False)
    monkeypatch.delenv("TRUTHVOTE_DATABASE_URL", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


# ─── Schema Defaults ──────────────────────────────────────────


class TestSchemaDefaults:
    def test_truthvote_config_all_defaults(self):
        cfg = TruthVoteConfig()
        assert cfg.general.feed_limit == 200
        assert cfg.database.url == (
            "sqlite+aiosqlite:///~/.local/share/truthvote/truthvote.db"
        )
        assert set(cfg.providers) == {"openai", "google"}
        assert cfg.providers["openai"].api_key_env == "OPENAI_API_KEY"
        assert cfg.providers["openai"].default_model == "gpt-4o"
        assert cfg.providers["google"].api_key_env == "GEMINI_API_KEY"
        assert cfg.providers["google"].display_name == "Gemini"
        assert cfg.logging.level == "INFO"

    def test_analysis_defaults(self):
        cfg = AnalysisConfig()
        assert cfg.temperature == 0.2
        assert cfg.max_tokens == 2048
        assert cfg.web_context.enabled is True

    def test_web_context_defaults(self):
        cfg = WebContextConfig()
        assert cfg.endpoint == "https://api.duckduckgo.com/"
        assert cfg.query_words == 5

    def test_api_defaults(self):
        cfg = APIConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8080

    def test_database_and_logging_defaults(self):
        assert DatabaseConfig().pool_size == 5
        assert LoggingConfig().structured is False
        assert GeneralConfig().feed_limit == 200


class TestSchemaValidation:
    def test_invalid_type_raises(self):
        with pytest.raises(ValidationError):
            GeneralConfig(feed_limit="lots")  # type: ignore[arg-type]

    def test_nested_from_dict(self):
        cfg = TruthVoteConfig.model_validate(
            {"analysis": {"web_context": {"enabled": False}}}
        )
        assert cfg.analysis.web_context.enabled is False
        assert cfg.analysis.temperature == 0.2


# ─── Deep Merge ───────────────────────────────────────────────


class TestDeepMerge:
    def test_nested_merge(self):
        base = {"a": {"x": 1, "y": 2}}
        result = _deep_merge(base, {"a": {"y": 3}})
        assert result == {"a": {"x": 1, "y": 3}}

    def test_override_replaces_non_dict(self):
        assert _deep_merge({"a": [1]}, {"a": [2]}) == {"a": [2]}

    def test_base_unchanged(self):
        base = {"a": {"x": 1}}
        _deep_merge(base, {"a": {"x": 2}})
        assert base == {"a": {"x": 1}}


# ─── load_config ──────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_when_no_files(self):
        cfg = load_config()
        assert cfg.general.feed_limit == 200
        assert cfg.providers["openai"].api_key is None

    def test_load_from_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[general]\nfeed_limit = 25\n")
        cfg = load_config(path=path)
        assert cfg.general.feed_limit == 25

    def test_project_local_file(self, tmp_path):
        (tmp_path / "truthvote.toml").write_text("[api]\nport = 9000\n")
        cfg = load_config()
        assert cfg.api.port == 9000

    def test_user_file_then_project_file(self, tmp_path):
        user_dir = tmp_path / "xdg" / "truthvote"
        user_dir.mkdir(parents=True)
        (user_dir / "config.toml").write_text("[api]\nport = 9000\nhost = 'a'\n")
        (tmp_path / "truthvote.toml").write_text("[api]\nport = 9001\n")
        cfg = load_config()
        assert cfg.api.port == 9001
        assert cfg.api.host == "a"

    def test_explicit_path_not_found_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(path=tmp_path / "missing.toml")

    def test_invalid_toml_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[general\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path=path)

    def test_validation_failure_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[general]\nfeed_limit = 'lots'\n")
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path=path)

    def test_overrides_beat_file(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text("[general]\nfeed_limit = 25\n")
        cfg = load_config(path=path, overrides={"general": {"feed_limit": 7}})
        assert cfg.general.feed_limit == 7


class TestEnvVarOverrides:
    def test_config_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.toml"
        path.write_text("[general]\nfeed_limit = 3\n")
        monkeypatch.setenv("TRUTHVOTE_CONFIG", str(path))
        assert load_config().general.feed_limit == 3

    def test_config_env_missing_file_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRUTHVOTE_CONFIG", str(tmp_path / "nope.toml"))
        with pytest.raises(ConfigError, match="TRUTHVOTE_CONFIG"):
            load_config()

    def test_database_url_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "c.toml"
        path.write_text('[database]\nurl = "sqlite+aiosqlite:///a.db"\n')
        monkeypatch.setenv("TRUTHVOTE_DATABASE_URL", "sqlite+aiosqlite:///b.db")
        assert load_config(path=path).database.url == "sqlite+aiosqlite:///b.db"

    @pytest.mark.parametrize(
        "raw",
        ["postgres://u:p@db:5432/tv", "postgresql://u:p@db:5432/tv"],
    )
    def test_database_url_env_uses_asyncpg(self, raw, monkeypatch):
        monkeypatch.setenv("TRUTHVOTE_DATABASE_URL", raw)
        url = load_config().database.url
        assert url == "postgresql+asyncpg://u:p@db:5432/tv"

    def test_database_url_env_loses_to_overrides(self, monkeypatch):
        monkeypatch.setenv("TRUTHVOTE_DATABASE_URL", "sqlite+aiosqlite:///b.db")
        cfg = load_config(overrides={"database": {"url": "sqlite+aiosqlite://"}})
        assert cfg.database.url == "sqlite+aiosqlite://"

    def test_api_key_resolved_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        cfg = load_config()
        assert cfg.providers["openai"].api_key == "sk-test"
        assert cfg.providers["google"].api_key is None

    def test_explicit_key_not_replaced(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        path = tmp_path / "k.toml"
        path.write_text('[providers.google]\napi_key = "from-file"\n')
        cfg = load_config(path=path)
        assert cfg.providers["google"].api_key == "from-file"

    def test_empty_env_var_is_no_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        assert load_config().providers["google"].api_key is None
