"""ScopeGuard core module - shared Result type, errors and security helpers."""

from scopeguard.core.errors import (
    ConfigError,
    OracleRejection,
    PersistenceError,
    ProviderError,
    RateLimitExceeded,
    ScopeGuardError,
    ValidationError,
)
from scopeguard.core.security import mask_api_key
from scopeguard.core.types import Result

__all__ = [
    # Types
    "Result",
    # Errors
    "ScopeGuardError",
    "ValidationError",
    "RateLimitExceeded",
    "OracleRejection",
    "ProviderError",
    "ConfigError",
    "PersistenceError",
    # Security
    "mask_api_key",
]
