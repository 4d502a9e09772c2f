"""Configuration loading and validation."""

from truthvote.config.loader import load_config
from truthvote.config.schema import (
    AnalysisConfig,
    APIConfig,
    DatabaseConfig,
    GeneralConfig,
    LoggingConfig,
    ProviderConfig,
    TruthVoteConfig,
    WebContextConfig,
)

__all__ = [
    "APIConfig",
    "AnalysisConfig",
    "DatabaseConfig",
    "GeneralConfig",
    "LoggingConfig",
    "ProviderConfig",
    "TruthVoteConfig",
    "WebContextConfig",
    "load_config",
]
