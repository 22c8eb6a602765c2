"""Pydantic models for ScopeGuard configuration.

All configuration validation happens through these models.

Classes:
    OracleConfig: LLM model and call pacing used for question generation
    QuestioningConfig: Session ceilings and coverage minimums
    UsageConfig: Daily project allowance
    SessionsConfig: Where saved questionnaires live
    LoggingConfig: Logging configuration
    ProviderCredentials / CredentialsConfig: The access credential
    ScopeGuardConfig: Top-level configuration combining all sections
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_PROVIDER = "gemini"
PLACEHOLDER_API_KEY = "YOUR_API_KEY"


class OracleConfig(BaseModel, frozen=True):
    """Question-generation oracle configuration.

    Attributes:
        model: LiteLLM model identifier
        temperature: Sampling temperature for question generation
        max_tokens: Upper bound on reply length
        min_call_interval_seconds: Minimum spacing between two oracle calls
        timeout: Per-request timeout in seconds
        max_retries: Transport-level retries inside the adapter
    """

    model: str = "gemini/gemini-2.5-flash"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=64)
    min_call_interval_seconds: float = Field(default=1.0, ge=0.0)
    timeout: float = Field(default=60.0, gt=0.0)
    max_retries: int = Field(default=2, ge=1)


class QuestioningConfig(BaseModel, frozen=True):
    """Questioning session limits.

    Attributes:
        max_questions: Hard ceiling on questions per session
        checkpoint_question: Question number at which the oracle asks the
            user whether to continue
        min_budget_questions: Budget questions required before stopping
        min_timeline_questions: Timeline questions required before stopping
    """

    max_questions: int = Field(default=20, ge=1, le=20)
    checkpoint_question: int = Field(default=15, ge=1)
    min_budget_questions: int = Field(default=2, ge=0)
    min_timeline_questions: int = Field(default=2, ge=0)

    @field_validator("checkpoint_question")
    @classmethod
    def validate_checkpoint(cls, v: int, info: object) -> int:
        """Checkpoint must come no later than the ceiling."""
        data = getattr(info, "data", {})
        ceiling = data.get("max_questions", 20)
        if v > ceiling:
            msg = f"checkpoint_question ({v}) must be <= max_questions ({ceiling})"
            raise ValueError(msg)
        return v


class UsageConfig(BaseModel, frozen=True):
    """Daily usage limiting.

    Attributes:
        daily_project_limit: New questionnaires allowed per calendar day
        store_path: Usage record file (relative to config dir)
    """

    daily_project_limit: int = Field(default=5, ge=1)
    store_path: str = "data/usage.json"


class SessionsConfig(BaseModel, frozen=True):
    """Saved session configuration.

    Attributes:
        state_dir: Directory for saved sessions (relative to config dir)
    """

    state_dir: str = "data/sessions"


class LoggingConfig(BaseModel, frozen=True):
    """Logging configuration.

    Attributes:
        level: Log level (debug, info, warning, error)
        log_path: Path to log file (relative to config dir)
        enable_file_logging: Whether to write a rotating JSON log file
    """

    level: Literal["debug", "info", "warning", "error"] = "info"
    log_path: str = "logs/scopeguard.log"
    enable_file_logging: bool = True


class ProviderCredentials(BaseModel, frozen=True):
    """API credentials for the oracle provider.

    Attributes:
        api_key: The API key for the provider
        base_url: Optional custom base URL for the provider
    """

    api_key: str = Field(min_length=1)
    base_url: str | None = None


class CredentialsConfig(BaseModel, frozen=True):
    """Configuration for provider credentials.

    Attributes:
        providers: Dict mapping provider name to credentials
    """

    providers: dict[str, ProviderCredentials] = Field(default_factory=dict)


class ScopeGuardConfig(BaseModel, frozen=True):
    """Top-level ScopeGuard configuration, validated against config.yaml.

    Attributes:
        oracle: Question-generation oracle configuration
        questioning: Session limits
        usage: Daily usage limiting
        sessions: Saved session storage
        logging: Logging configuration
    """

    oracle: OracleConfig = Field(default_factory=OracleConfig)
    questioning: QuestioningConfig = Field(default_factory=QuestioningConfig)
    usage: UsageConfig = Field(default_factory=UsageConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def provider(self) -> str:
        """Provider name derived from the oracle model prefix."""
        if "/" in self.oracle.model:
            return self.oracle.model.split("/")[0]
        return DEFAULT_PROVIDER


def get_default_config() -> ScopeGuardConfig:
    """Get the default ScopeGuard configuration."""
    return ScopeGuardConfig()


def get_default_credentials() -> CredentialsConfig:
    """Get the credentials template written by ``scopeguard config init``.

    The placeholder key is treated as absent until the user replaces it.
    """
    return CredentialsConfig(
        providers={
            DEFAULT_PROVIDER: ProviderCredentials(api_key=PLACEHOLDER_API_KEY),
        }
    )


def get_config_dir() -> Path:
    """Get the ScopeGuard configuration directory path (~/.scopeguard/)."""
    return Path.home() / ".scopeguard"
