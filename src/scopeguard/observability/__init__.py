"""Observability module for ScopeGuard - structured logging."""

from scopeguard.observability.logging import (
    LoggingConfig,
    LogMode,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    log_mode_from_env,
    set_console_logging,
    unbind_context,
)

__all__ = [
    "LogMode",
    "LoggingConfig",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_mode_from_env",
    "set_console_logging",
    "unbind_context",
]
