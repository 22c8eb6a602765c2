"""Unit tests for scopeguard.config.models module."""

from pydantic import ValidationError
import pytest

from scopeguard.config.models import (
    DEFAULT_PROVIDER,
    PLACEHOLDER_API_KEY,
    OracleConfig,
    ProviderCredentials,
    QuestioningConfig,
    ScopeGuardConfig,
    UsageConfig,
    get_default_config,
    get_default_credentials,
)


class TestOracleConfig:
    def test_defaults(self) -> None:
        config = OracleConfig()

        assert config.model == "gemini/gemini-2.5-flash"
        assert config.min_call_interval_seconds == 1.0
        assert config.max_retries == 2

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValidationError):
            OracleConfig(min_call_interval_seconds=-1)

    def test_is_frozen(self) -> None:
        config = OracleConfig()

        with pytest.raises(ValidationError):
            config.model = "other"  # type: ignore[misc]


class TestQuestioningConfig:
    def test_defaults(self) -> None:
        config = QuestioningConfig()

        assert config.max_questions == 20
        assert config.checkpoint_question == 15
        assert config.min_budget_questions == 2
        assert config.min_timeline_questions == 2

    def test_max_questions_capped_at_twenty(self) -> None:
        with pytest.raises(ValidationError):
            QuestioningConfig(max_questions=21)

    def test_checkpoint_must_not_exceed_ceiling(self) -> None:
        with pytest.raises(ValidationError, match="checkpoint_question"):
            QuestioningConfig(max_questions=10, checkpoint_question=12)

    def test_checkpoint_equal_to_ceiling_allowed(self) -> None:
        assert QuestioningConfig(max_questions=10, checkpoint_question=10).checkpoint_question == 10


class TestUsageConfig:
    def test_default_daily_limit(self) -> None:
        assert UsageConfig().daily_project_limit == 5

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            UsageConfig(daily_project_limit=0)


class TestScopeGuardConfig:
    def test_default_config_has_all_sections(self) -> None:
        config = get_default_config()

        assert isinstance(config, ScopeGuardConfig)
        assert config.sessions.state_dir == "data/sessions"
        assert config.logging.level == "info"

    def test_provider_from_model_prefix(self) -> None:
        config = ScopeGuardConfig(oracle=OracleConfig(model="openrouter/google/gemini-2.0-flash"))

        assert config.provider == "openrouter"

    def test_provider_defaults_without_prefix(self) -> None:
        config = ScopeGuardConfig(oracle=OracleConfig(model="gpt-4o"))

        assert config.provider == DEFAULT_PROVIDER

    def test_validates_from_dict(self) -> None:
        config = ScopeGuardConfig.model_validate(
            {"questioning": {"max_questions": 12, "checkpoint_question": 8}}
        )

        assert config.questioning.max_questions == 12
        assert config.oracle.model == "gemini/gemini-2.5-flash"


class TestCredentials:
    def test_default_credentials_use_placeholder(self) -> None:
        credentials = get_default_credentials()

        assert credentials.providers[DEFAULT_PROVIDER].api_key == PLACEHOLDER_API_KEY

    def test_api_key_required(self) -> None:
        with pytest.raises(ValidationError):
            ProviderCredentials(api_key="")
