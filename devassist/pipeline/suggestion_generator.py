"""
Suggestion Generator - short improvement suggestions for on-screen code.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from devassist.database import CodeSnippet, DeveloperContext
from devassist.llm.prompts import build_suggestion_request, parse_bullet_points
from devassist.llm.provider import LLMProvider
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

# Recent snippets included as prompt context
CONTEXT_SNIPPETS = 3


class SuggestionGenerator:
    """
    Asks the completion API for up to three suggestions.

    Recent snippets and the current developer context are advisory; if they
    cannot be loaded the prompt is built without them. Any failure yields an
    empty list.
    """

    def __init__(self, store: CodeStore, llm_provider: LLMProvider, temperature: float = 0.7):
        self.store = store
        self.llm_provider = llm_provider
        self.temperature = temperature

    async def generate(
        self,
        code: str,
        file_path: Optional[str] = None,
        language: Optional[str] = None,
    ) -> List[str]:
        """
        Generate suggestions for a piece of code.

        Args:
            code: Code text from the screen
            file_path: File being edited, if known
            language: Language tag, if known

        Returns:
            At most three suggestions without bullet markers
        """
        if not code.strip():
            return []

        current = self._current_context()
        snippets = self._recent_snippets(language)

        request = build_suggestion_request(
            code=code,
            file_path=file_path or (current.active_file if current else None),
            language=language,
            snippets=[s.content for s in snippets],
            temperature=self.temperature,
            active_app=current.current_app if current else None,
        )

        try:
            response = await self.llm_provider.complete(request)
        except (TimeoutError, RuntimeError) as e:
            logger.error(f"Error generating suggestions: {e}")
            return []

        if not response:
            return []

        return parse_bullet_points(response, limit=MAX_SUGGESTIONS)

    def _current_context(self) -> Optional[DeveloperContext]:
        try:
            return self.store.get_current_context()
        except SQLAlchemyError as e:
            logger.warning(f"Could not load developer context: {e}")
            return None

    def _recent_snippets(self, language: Optional[str]) -> List[CodeSnippet]:
        try:
            return self.store.get_snippets(language=language, limit=CONTEXT_SNIPPETS)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load recent snippets: {e}")
            return []
