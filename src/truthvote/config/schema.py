"""Pydantic models for truthvote configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """Configuration for a single LLM provider."""

    enabled: bool = True
    api_key: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None
    default_model: str | None = None
    display_name: str | None = None


class WebContextConfig(BaseModel):
    """Best-effort web lookup that feeds the fact-check prompt."""

    enabled: bool = True
    endpoint: str = "https://api.duckduckgo.com/"
    timeout: float = 10.0
    query_words: int = 5


class AnalysisConfig(BaseModel):
    """Dual-model fact-check settings."""

    temperature: float = 0.2
    max_tokens: int = 2048
    web_context: WebContextConfig = Field(default_factory=WebContextConfig)


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///~/.local/share/truthvote/truthvote.db"
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class APIConfig(BaseModel):
    """REST/WebSocket server settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    structured: bool = False


class GeneralConfig(BaseModel):
    """General application settings."""

    feed_limit: int = 200


class TruthVoteConfig(BaseModel):
    """Top-level configuration for truthvote."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    providers: dict[str, ProviderConfig] = Field(
        default_factory=lambda: {
            "openai": ProviderConfig(
                api_key_env="OPENAI_API_KEY",
                default_model="gpt-4o",
                display_name="OpenAI",
            ),
            "google": ProviderConfig(
                api_key_env="GEMINI_API_KEY",
                default_model="gemini-2.5-pro",
                display_name="Gemini",
            ),
        }
    )
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
