"""
OpenRouter LLM Provider Implementation

Talks to any OpenAI-compatible chat completions endpoint. Defaults to
OpenRouter, which fronts many models (Claude, GPT-4, Mixtral, ...); pointing
``base_url`` at https://api.openai.com/v1 uses OpenAI directly.
"""

import json
import logging
from typing import Dict, Optional

import httpx

from devassist.llm.provider import CompletionRequest, LLMProvider

logger = logging.getLogger(__name__)


class OpenRouterProvider(LLMProvider):
    """
    OpenAI-compatible chat completions provider.

    Supports model shorthands for the common OpenRouter models.
    """

    DEFAULT_MODEL = "openai/gpt-4-turbo"

    DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

    # Recommended models by use case
    MODELS = {
        "claude-3.5-sonnet": "anthropic/claude-3.5-sonnet",  # Balanced
        "gpt-4-turbo": "openai/gpt-4-turbo",  # Original default
        "gpt-4o-mini": "openai/gpt-4o-mini",  # Cheap, fast
        "mixtral": "mistralai/mixtral-8x7b",  # Cost effective
    }

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: int = 60,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize OpenRouter provider.

        Args:
            api_key: API key for the endpoint
            model: Model identifier; full path or a shorthand from MODELS.
                   Shorthands are only resolved for OpenRouter.
            timeout: Request timeout in seconds (default: 60)
            base_url: Chat completions base URL
            client: Preconfigured AsyncClient (tests inject a mock transport)

        Raises:
            ValueError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key cannot be empty")

        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

        if self.base_url == self.DEFAULT_BASE_URL and model in self.MODELS:
            self.model = self.MODELS[model]
        else:
            self.model = model

        self.client = client or httpx.AsyncClient(timeout=timeout)
        logger.info(f"Initialized chat completions provider {self.base_url} with model: {self.model}")

    async def complete(self, request: CompletionRequest) -> str:
        """
        Make a request to the chat completions API.

        Args:
            request: Messages and sampling parameters

        Returns:
            Model's response text ("" when the model returned nothing)

        Raises:
            TimeoutError: If request exceeds timeout
            RuntimeError: If API returns an error
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.base_url == self.DEFAULT_BASE_URL:
            headers["X-Title"] = "devassist"

        payload = {
            "model": self.resolve_model(request),
            "messages": [m.to_dict() for m in request.messages],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
            )

            # Check for HTTP errors
            if response.status_code != 200:
                error_msg = self._error_message(response)
                logger.error(f"Chat completions API error: {error_msg}")
                raise RuntimeError(f"Chat completions API error: {error_msg}")

            response_text = self._extract_content(response.json())

        except RuntimeError:
            raise

        except httpx.TimeoutException as e:
            logger.error(f"Chat completions timeout after {self.timeout}s: {str(e)}")
            raise TimeoutError(f"Completion timed out: {str(e)}")

        except httpx.RequestError as e:
            logger.error(f"Chat completions request error: {str(e)}")
            raise RuntimeError(f"Request error: {str(e)}")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse chat completions response: {str(e)}")
            raise RuntimeError(f"Invalid JSON response: {str(e)}")

        except Exception as e:
            logger.error(f"Unexpected error calling chat completions: {str(e)}")
            raise RuntimeError(f"Unexpected error: {str(e)}")

        logger.debug(f"Completion response: {response_text[:200]}...")
        return response_text

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        fallback = f"HTTP {response.status_code}"
        try:
            error_data = response.json()
        except json.JSONDecodeError:
            return fallback

        error = error_data.get("error") if isinstance(error_data, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return fallback

    @staticmethod
    def _extract_content(response_data) -> str:
        """Text of the first choice; "" when the body has no usable message."""
        if not isinstance(response_data, dict):
            return ""

        choices = response_data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""

        message = choices[0].get("message")
        if not isinstance(message, dict):
            return ""

        content = message.get("content")
        return content if isinstance(content, str) else ""

    async def aclose(self) -> None:
        await self.client.aclose()

    @staticmethod
    def get_available_models() -> Dict[str, str]:
        """
        Get available model shortcuts and their full identifiers.

        Returns:
            Dictionary mapping model names to full OpenRouter model IDs
        """
        return OpenRouterProvider.MODELS.copy()
