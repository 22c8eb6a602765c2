"""LLM provider adapters for ScopeGuard."""

from scopeguard.providers.base import (
    CompletionConfig,
    CompletionResponse,
    LLMAdapter,
    Message,
    MessageRole,
    UsageInfo,
)
from scopeguard.providers.litellm_adapter import LiteLLMAdapter

__all__ = [
    # Protocol
    "LLMAdapter",
    # Models
    "Message",
    "MessageRole",
    "CompletionConfig",
    "CompletionResponse",
    "UsageInfo",
    # Implementations
    "LiteLLMAdapter",
]
