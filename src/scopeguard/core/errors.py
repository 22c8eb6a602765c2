"""Error hierarchy for ScopeGuard.

These classes double as exceptions (for configuration failures and bugs) and
as the error half of Result for expected, user-recoverable failures.

Exception Hierarchy:
    ScopeGuardError (base)
    ├── ValidationError    - description/answer rejected, illegal transition
    ├── RateLimitExceeded  - daily project allowance used up
    ├── OracleRejection    - the LLM judged the description not a project
    ├── ProviderError      - LLM transport failures (masked by fallback)
    ├── ConfigError        - configuration and credentials issues
    └── PersistenceError   - usage/session store failures
"""

from __future__ import annotations

from typing import Any


class ScopeGuardError(Exception):
    """Base exception for all ScopeGuard errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ValidationError(ScopeGuardError):
    """Input failed a validation rule.

    Attributes:
        field: The field that failed validation.
        value: The invalid value if safe to include.

    Security Note:
        Use safe_value instead of value when logging.
    """

    _SENSITIVE_FIELDS = frozenset({
        "password", "api_key", "secret", "token", "credential",
        "auth", "key", "private", "apikey", "api-key",
    })

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value

    @property
    def safe_value(self) -> str:
        """Return a representation of the value that is safe to log.

        Masks values of sensitive fields and secret-looking strings, and
        truncates long strings such as project descriptions.
        """
        if self.value is None:
            return "<None>"

        if self.field:
            field_lower = self.field.lower()
            if any(sensitive in field_lower for sensitive in self._SENSITIVE_FIELDS):
                return "<REDACTED>"

        if isinstance(self.value, str):
            value_str = self.value
            secret_prefixes = ("sk-", "pk-", "api-", "bearer ", "token ", "secret_")
            if any(value_str.lower().startswith(p) for p in secret_prefixes):
                return "<REDACTED>"
            if len(value_str) > 50:
                return f"{value_str[:20]}...({len(value_str)} chars)"
            return repr(value_str)

        return f"<{type(self.value).__name__}>"

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field}, value: {self.safe_value})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base


class RateLimitExceeded(ScopeGuardError):
    """The daily allowance of new projects is used up.

    Attributes:
        limit: The configured daily cap.
        count: Projects already started today.
    """

    def __init__(
        self,
        message: str,
        *,
        limit: int,
        count: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.limit = limit
        self.count = count


class OracleRejection(ScopeGuardError):
    """The oracle declined the description (simple task, gibberish, nothing to ask).

    Attributes:
        validation_type: Rejection category reported by the oracle
            ("task", "gibberish") or None when it simply declined to ask.
        reasoning: The oracle's explanation, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        validation_type: str | None = None,
        reasoning: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.validation_type = validation_type
        self.reasoning = reasoning


class ProviderError(ScopeGuardError):
    """Error from LLM provider operations (rate limits, API errors, timeouts).

    Attributes:
        provider: Name of the provider (e.g., "gemini", "openrouter").
        status_code: HTTP status code if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.provider = provider
        self.status_code = status_code

    @classmethod
    def from_exception(
        cls, exc: Exception, *, provider: str | None = None
    ) -> ProviderError:
        """Wrap a provider exception, keeping it as ``__cause__``."""
        status_code = getattr(exc, "status_code", None)
        error = cls(
            str(exc),
            provider=provider,
            status_code=status_code,
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class ConfigError(ScopeGuardError):
    """Configuration loading, parsing or validation failed.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


class PersistenceError(ScopeGuardError):
    """A usage-counter or session-store operation failed.

    Attributes:
        operation: The operation that failed (e.g., "save", "load").
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
