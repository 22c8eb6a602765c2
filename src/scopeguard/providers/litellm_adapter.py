"""LiteLLM adapter for the question-generation oracle.

Implements LLMAdapter on top of ``litellm.acompletion`` so any provider
LiteLLM supports (Gemini by default, OpenRouter, OpenAI, Anthropic) can
serve as the oracle.
"""

import os
from typing import Any

import litellm
import stamina
import structlog

from scopeguard.core.errors import ProviderError
from scopeguard.core.security import MAX_LLM_RESPONSE_LENGTH
from scopeguard.core.types import Result
from scopeguard.providers.base import (
    CompletionConfig,
    CompletionResponse,
    Message,
    UsageInfo,
)

log = structlog.get_logger()

# Transient failures retried by stamina before giving up
RETRIABLE_EXCEPTIONS = (
    litellm.RateLimitError,
    litellm.ServiceUnavailableError,
    litellm.Timeout,
    litellm.APIConnectionError,
)

_ENV_KEYS_BY_PREFIX = (
    ("gemini/", "GEMINI_API_KEY"),
    ("openrouter/", "OPENROUTER_API_KEY"),
    ("anthropic/", "ANTHROPIC_API_KEY"),
    ("claude", "ANTHROPIC_API_KEY"),
    ("openai/", "OPENAI_API_KEY"),
    ("gpt", "OPENAI_API_KEY"),
)


class LiteLLMAdapter:
    """LLM adapter using LiteLLM for unified provider access.

    Example:
        adapter = LiteLLMAdapter(api_key=resolve_api_key(config))
        result = await adapter.complete(
            messages=[Message(role=MessageRole.USER, content=prompt)],
            config=CompletionConfig(model="gemini/gemini-2.5-flash"),
        )
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        """Initialize the LiteLLM adapter.

        Args:
            api_key: Explicit API key (overrides environment variables).
            api_base: Optional API base URL for custom endpoints.
            timeout: Request timeout in seconds.
            max_retries: Attempts for transient errors.
        """
        self._api_key = api_key
        self._api_base = api_base
        self._timeout = timeout
        self._max_retries = max_retries

    def _get_api_key(self, model: str) -> str | None:
        """Explicit key first, then the provider's environment variable."""
        if self._api_key:
            return self._api_key

        for prefix, env_var in _ENV_KEYS_BY_PREFIX:
            if model.startswith(prefix):
                return os.environ.get(env_var)

        return None

    def _build_completion_kwargs(
        self,
        messages: list[Message],
        config: CompletionConfig,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "timeout": self._timeout,
        }

        if config.stop:
            kwargs["stop"] = config.stop

        api_key = self._get_api_key(config.model)
        if api_key:
            kwargs["api_key"] = api_key

        if self._api_base:
            kwargs["api_base"] = self._api_base

        return kwargs

    async def _raw_complete(
        self,
        messages: list[Message],
        config: CompletionConfig,
    ) -> litellm.ModelResponse:
        kwargs = self._build_completion_kwargs(messages, config)

        log.debug(
            "llm.request.started",
            model=config.model,
            message_count=len(messages),
            max_tokens=config.max_tokens,
        )

        response = await litellm.acompletion(**kwargs)

        log.debug(
            "llm.request.completed",
            model=config.model,
            finish_reason=response.choices[0].finish_reason,
        )

        return response

    def _parse_response(
        self,
        response: litellm.ModelResponse,
        config: CompletionConfig,
    ) -> CompletionResponse:
        choice = response.choices[0]
        usage = response.usage
        content = choice.message.content or ""

        if len(content) > MAX_LLM_RESPONSE_LENGTH:
            log.warning(
                "llm.response.truncated",
                model=config.model,
                original_length=len(content),
                max_length=MAX_LLM_RESPONSE_LENGTH,
            )
            content = content[:MAX_LLM_RESPONSE_LENGTH]

        return CompletionResponse(
            content=content,
            model=response.model or config.model,
            usage=UsageInfo(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            finish_reason=choice.finish_reason or "stop",
            raw_response=response.model_dump() if hasattr(response, "model_dump") else {},
        )

    async def complete(
        self,
        messages: list[Message],
        config: CompletionConfig,
    ) -> Result[CompletionResponse, ProviderError]:
        """Make a completion request, retrying transient errors with stamina.

        Returns:
            Result containing either the completion response or a ProviderError.
        """
        provider = self._extract_provider(config.model)

        @stamina.retry(
            on=RETRIABLE_EXCEPTIONS,
            attempts=self._max_retries,
            wait_initial=1.0,
            wait_max=10.0,
            wait_jitter=1.0,
        )
        async def _with_retry() -> litellm.ModelResponse:
            return await self._raw_complete(messages, config)

        try:
            response = await _with_retry()
            return Result.ok(self._parse_response(response, config))
        except RETRIABLE_EXCEPTIONS as e:
            log.warning(
                "llm.request.failed.retries_exhausted",
                model=config.model,
                error=str(e),
                max_retries=self._max_retries,
            )
            return Result.err(ProviderError.from_exception(e, provider=provider))
        except litellm.AuthenticationError as e:
            log.warning("llm.request.failed.auth_error", model=config.model, error=str(e))
            return Result.err(
                ProviderError(
                    "Authentication failed - check API key",
                    provider=provider,
                    status_code=401,
                    details={"original_exception": type(e).__name__},
                )
            )
        except (litellm.BadRequestError, litellm.APIError) as e:
            log.warning(
                "llm.request.failed.api_error",
                model=config.model,
                error=str(e),
                status_code=getattr(e, "status_code", None),
            )
            return Result.err(ProviderError.from_exception(e, provider=provider))
        except Exception as e:
            log.exception("llm.request.failed.unexpected", model=config.model, error=str(e))
            return Result.err(
                ProviderError(
                    f"Unexpected error: {e!s}",
                    provider=provider,
                    details={"original_exception": type(e).__name__},
                )
            )

    @staticmethod
    def _extract_provider(model: str) -> str:
        """Provider name from a model string ('gemini/gemini-2.5-flash' -> 'gemini')."""
        if "/" in model:
            return model.split("/")[0]
        if model.startswith("gpt"):
            return "openai"
        if model.startswith("claude"):
            return "anthropic"
        return "unknown"
