"""Wiring shared by CLI commands: configuration, logging and stores."""

from pathlib import Path

import typer

from scopeguard.cli.formatters.panels import print_error
from scopeguard.config import (
    ScopeGuardConfig,
    load_config_or_default,
    resolve_api_key,
    resolve_path,
)
from scopeguard.core.errors import ConfigError
from scopeguard.observability import (
    LoggingConfig,
    configure_logging,
    log_mode_from_env,
    set_console_logging,
)
from scopeguard.questionnaire.store import SessionStore
from scopeguard.questionnaire.usage import DailyRateLimiter, JsonFileUsageStore


def load_settings(config_path: Path | None = None) -> ScopeGuardConfig:
    """Load configuration, exiting with code 1 on a malformed file."""
    try:
        return load_config_or_default(config_path)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(code=1) from e


def setup_logging(config: ScopeGuardConfig, *, debug: bool = False) -> None:
    """Send structured logs to the log file; echo them to the console only in debug mode."""
    log_file = resolve_path(config.logging.log_path)
    configure_logging(
        LoggingConfig(
            mode=log_mode_from_env(),
            log_level="DEBUG" if debug else config.logging.level.upper(),
            log_dir=log_file.parent,
            enable_file_logging=config.logging.enable_file_logging,
        )
    )
    set_console_logging(debug)


def require_api_key(config: ScopeGuardConfig) -> str:
    """Return the oracle credential or exit with a configuration error."""
    try:
        api_key = resolve_api_key(config)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(code=1) from e

    if not api_key:
        error = ConfigError(
            f"No API key configured for provider '{config.provider}'. "
            "Set SCOPEGUARD_API_KEY, add it to ~/.scopeguard/credentials.yaml, "
            "or run with --offline to use built-in questions.",
            config_key=f"providers.{config.provider}.api_key",
        )
        print_error(error.message, title="Configuration Error")
        raise typer.Exit(code=1)
    return api_key


def usage_store_for(config: ScopeGuardConfig) -> JsonFileUsageStore:
    return JsonFileUsageStore(resolve_path(config.usage.store_path))


def rate_limiter_for(config: ScopeGuardConfig, store: JsonFileUsageStore) -> DailyRateLimiter:
    return DailyRateLimiter(store=store, daily_limit=config.usage.daily_project_limit)


def session_store_for(config: ScopeGuardConfig, state_dir: Path | None = None) -> SessionStore:
    return SessionStore(state_dir or resolve_path(config.sessions.state_dir))


__all__ = [
    "load_settings",
    "rate_limiter_for",
    "require_api_key",
    "session_store_for",
    "setup_logging",
    "usage_store_for",
]
