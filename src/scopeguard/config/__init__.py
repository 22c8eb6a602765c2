"""Configuration module for ScopeGuard.

Configuration is stored in ~/.scopeguard/ (config.yaml, credentials.yaml).

Usage:
    from scopeguard.config import load_config_or_default, resolve_api_key

    config = load_config_or_default()
    api_key = resolve_api_key(config)
    ceiling = config.questioning.max_questions
"""

from scopeguard.config.loader import (
    config_exists,
    create_default_config,
    credentials_file_secure,
    ensure_config_dir,
    load_config,
    load_config_or_default,
    load_credentials,
    resolve_api_key,
    resolve_path,
)
from scopeguard.config.models import (
    CredentialsConfig,
    LoggingConfig,
    OracleConfig,
    ProviderCredentials,
    QuestioningConfig,
    ScopeGuardConfig,
    SessionsConfig,
    UsageConfig,
    get_config_dir,
    get_default_config,
    get_default_credentials,
)

__all__ = [
    # Models
    "ScopeGuardConfig",
    "OracleConfig",
    "QuestioningConfig",
    "UsageConfig",
    "SessionsConfig",
    "LoggingConfig",
    "CredentialsConfig",
    "ProviderCredentials",
    # Loader functions
    "load_config",
    "load_config_or_default",
    "load_credentials",
    "resolve_api_key",
    "resolve_path",
    "create_default_config",
    "ensure_config_dir",
    "config_exists",
    "credentials_file_secure",
    # Model helpers
    "get_config_dir",
    "get_default_config",
    "get_default_credentials",
]
