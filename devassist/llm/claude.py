"""
Claude LLM Provider Implementation

Uses the async Anthropic SDK to run chat completions against Claude models.
"""

import logging

from anthropic import AsyncAnthropic, APIError, APITimeoutError

from devassist.llm.provider import CompletionRequest, LLMProvider

logger = logging.getLogger(__name__)


class ClaudeProvider(LLMProvider):
    """
    Claude LLM Provider using Anthropic API.

    System messages are passed through Anthropic's dedicated ``system``
    parameter; the remaining messages form the conversation.
    """

    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: int = 60,
    ):
        """
        Initialize Claude provider.

        Args:
            api_key: Anthropic API key
            model: Claude model ID (default: claude-3-5-sonnet-20241022)
            timeout: Request timeout in seconds (default: 60)
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.client = AsyncAnthropic(api_key=api_key)

    async def complete(self, request: CompletionRequest) -> str:
        """
        Make a request to Claude API.

        Args:
            request: Messages and sampling parameters

        Returns:
            Claude's response text

        Raises:
            TimeoutError: If request exceeds timeout
            RuntimeError: If API returns an error
        """
        kwargs = {
            "model": self.resolve_model(request),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [m.to_dict() for m in request.conversation],
            "timeout": self.timeout,
        }
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        try:
            message = await self.client.messages.create(**kwargs)

        except APITimeoutError as e:
            logger.error(f"Claude API timeout after {self.timeout}s: {str(e)}")
            raise TimeoutError(f"Claude completion timed out: {str(e)}")

        except APIError as e:
            logger.error(f"Claude API error: {str(e)}")
            raise RuntimeError(f"Claude API error: {str(e)}")

        except Exception as e:
            logger.error(f"Unexpected error calling Claude: {str(e)}")
            raise RuntimeError(f"Unexpected error: {str(e)}")

        # Extract text from response
        if message.content and len(message.content) > 0:
            response_text = message.content[0].text
            logger.debug(f"Claude response: {response_text[:200]}...")
            return response_text

        return ""

    async def aclose(self) -> None:
        await self.client.close()
