"""
Ollama LLM Provider Implementation

Connects to local Ollama instance for running open-source models locally.
Useful for development and testing without API costs.
"""

import logging
from typing import Optional

import httpx

from devassist.llm.provider import CompletionRequest, LLMProvider

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """
    Ollama LLM Provider for local model inference.

    Uses the non-streaming /api/chat endpoint. Supports any model installed
    in Ollama (llama3, mistral, codellama, ...).
    """

    DEFAULT_MODEL = "llama3"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = DEFAULT_MODEL,
        timeout: int = 120,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Ollama provider.

        Args:
            base_url: Base URL of Ollama instance (default: http://localhost:11434)
            model: Model name to use (default: llama3)
            timeout: Request timeout in seconds (default: 120, as local inference is slower)
            client: Preconfigured AsyncClient (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def verify_connection(self) -> None:
        """
        Verify that Ollama is accessible.

        Raises:
            RuntimeError: If Ollama is not running or accessible
        """
        try:
            response = await self.client.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()
            logger.info(f"Connected to Ollama at {self.base_url}")
        except httpx.HTTPError as e:
            raise RuntimeError(
                f"Cannot connect to Ollama at {self.base_url}. "
                f"Is Ollama running? Error: {str(e)}"
            )

    async def complete(self, request: CompletionRequest) -> str:
        """
        Make a request to the Ollama chat API.

        Args:
            request: Messages and sampling parameters

        Returns:
            Model's response text

        Raises:
            TimeoutError: If request exceeds timeout
            RuntimeError: If Ollama returns an error
        """
        payload = {
            "model": self.resolve_model(request),
            "messages": [m.to_dict() for m in request.messages],
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
        }

        try:
            response = await self.client.post(f"{self.base_url}/api/chat", json=payload)
            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException:
            logger.error(f"Ollama request timed out after {self.timeout}s")
            raise TimeoutError(
                f"Ollama completion timed out after {self.timeout}s"
            )

        except httpx.ConnectError as e:
            logger.error(f"Cannot connect to Ollama: {str(e)}")
            raise RuntimeError(
                f"Cannot connect to Ollama at {self.base_url}: {str(e)}"
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama HTTP error: {str(e)}")
            raise RuntimeError(f"Ollama HTTP error: {str(e)}")

        except Exception as e:
            logger.error(f"Unexpected error calling Ollama: {str(e)}")
            raise RuntimeError(f"Unexpected error: {str(e)}")

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        response_text = content if isinstance(content, str) else ""
        logger.debug(f"Ollama response: {response_text[:200]}...")
        return response_text

    async def aclose(self) -> None:
        await self.client.aclose()
