"""
LLM Provider Module

Provides pluggable abstraction for different chat-completion backends
(Claude, OpenRouter/OpenAI, Ollama).
"""

from devassist.llm.provider import (
    ChatMessage,
    CompletionRequest,
    LLMProvider,
    get_llm_provider,
)
from devassist.llm.claude import ClaudeProvider
from devassist.llm.openrouter import OpenRouterProvider
from devassist.llm.ollama import OllamaProvider

__all__ = [
    "ChatMessage",
    "CompletionRequest",
    "LLMProvider",
    "get_llm_provider",
    "ClaudeProvider",
    "OpenRouterProvider",
    "OllamaProvider",
]
