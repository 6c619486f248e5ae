"""
Abstract LLM Provider Interface

Defines the chat-completion interface that all LLM providers must implement.
Provides factory for creating provider instances based on configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from devassist.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    """One message of a chat conversation."""

    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class CompletionRequest:
    """
    A single chat-completion request.

    Attributes:
        messages: Ordered conversation, usually one system and one user message
        temperature: Sampling temperature
        max_tokens: Upper bound on generated tokens
        model: Model identifier; the provider's default when None
    """

    messages: List[ChatMessage] = field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 256
    model: Optional[str] = None

    @property
    def system_prompt(self) -> Optional[str]:
        """Concatenated content of all system messages, if any."""
        parts = [m.content for m in self.messages if m.role == "system"]
        return "\n\n".join(parts) if parts else None

    @property
    def conversation(self) -> List[ChatMessage]:
        """Messages without the system role."""
        return [m for m in self.messages if m.role != "system"]


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All LLM providers (Claude, OpenRouter/OpenAI, Ollama) must implement this
    interface to be usable by the suggestion pipeline.
    """

    model: str

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> str:
        """
        Run a chat completion.

        Args:
            request: Messages and sampling parameters

        Returns:
            Generated text, possibly empty

        Raises:
            TimeoutError: If the request takes too long
            RuntimeError: If the provider is unavailable or returns an error
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None

    def resolve_model(self, request: CompletionRequest) -> str:
        return request.model or self.model


def get_llm_provider(config: Optional[Settings] = None) -> LLMProvider:
    """
    Factory function to create LLM provider based on configuration.

    Args:
        config: Settings to read from (global settings when omitted)

    Returns:
        Configured LLM provider instance

    Raises:
        ValueError: If configured provider is not supported or required config is missing
    """
    config = config or default_settings
    provider_name = config.llm_provider.lower()

    if provider_name == "claude":
        from devassist.llm.claude import ClaudeProvider

        if not config.claude_api_key:
            raise ValueError(
                "Claude provider selected but CLAUDE_API_KEY not configured"
            )

        return ClaudeProvider(
            api_key=config.claude_api_key,
            model=config.llm_model or ClaudeProvider.DEFAULT_MODEL,
            timeout=config.llm_timeout,
        )

    elif provider_name == "openrouter":
        from devassist.llm.openrouter import OpenRouterProvider

        if not config.openrouter_api_key:
            raise ValueError(
                "OpenRouter provider selected but OPENROUTER_API_KEY not configured"
            )

        return OpenRouterProvider(
            api_key=config.openrouter_api_key,
            model=config.llm_model or OpenRouterProvider.DEFAULT_MODEL,
            timeout=config.llm_timeout,
        )

    elif provider_name == "openai":
        from devassist.llm.openrouter import OpenRouterProvider

        if not config.openai_api_key:
            raise ValueError(
                "OpenAI provider selected but OPENAI_API_KEY not configured"
            )

        return OpenRouterProvider(
            api_key=config.openai_api_key,
            model=config.llm_model or "gpt-4-turbo",
            timeout=config.llm_timeout,
            base_url=config.openai_base_url,
        )

    elif provider_name == "ollama":
        from devassist.llm.ollama import OllamaProvider

        return OllamaProvider(
            base_url=config.ollama_base_url,
            model=config.llm_model or OllamaProvider.DEFAULT_MODEL,
            timeout=max(config.llm_timeout, 120),
        )

    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. "
            f"Must be 'claude', 'openrouter', 'openai', or 'ollama'"
        )
