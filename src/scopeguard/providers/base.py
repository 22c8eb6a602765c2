"""LLM adapter protocol and its data models.

The oracle client talks to the text-generation service only through
LLMAdapter, so tests can substitute an AsyncMock and alternative providers
can be plugged in without touching questionnaire logic.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from scopeguard.core.errors import ProviderError
from scopeguard.core.types import Result


class MessageRole(StrEnum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Message:
    """A single chat message."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to the ``{"role", "content"}`` dict LLM APIs expect."""
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True, slots=True)
class CompletionConfig:
    """Per-request completion settings.

    Attributes:
        model: The model identifier (e.g., 'gemini/gemini-2.5-flash').
        temperature: Sampling temperature (0.0-2.0).
        max_tokens: Maximum tokens to generate.
        stop: Optional stop sequences.
    """

    model: str
    temperature: float = 0.7
    max_tokens: int = 1024
    stop: list[str] | None = None


@dataclass(frozen=True, slots=True)
class UsageInfo:
    """Token usage reported by the provider."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True, slots=True)
class CompletionResponse:
    """Response from an LLM completion request.

    Attributes:
        content: The generated text.
        model: The model that generated the response.
        usage: Token usage information.
        finish_reason: Why generation stopped (e.g., 'stop', 'length').
        raw_response: Provider payload kept for debugging.
    """

    content: str
    model: str
    usage: UsageInfo
    finish_reason: str = "stop"
    raw_response: dict[str, object] = field(default_factory=dict)


class LLMAdapter(Protocol):
    """Protocol for LLM provider adapters.

    Implementations convert every expected failure (auth, rate limit, timeout,
    malformed request) into ``Result.err(ProviderError)``; exceptions escape
    only for programming errors.
    """

    async def complete(
        self,
        messages: list[Message],
        config: CompletionConfig,
    ) -> Result[CompletionResponse, ProviderError]:
        """Make a completion request to the LLM provider."""
        ...
