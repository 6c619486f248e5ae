"""
Snippet Matcher - recalls stored snippets relevant to on-screen code.

Exact substring search runs first and short-circuits; only when it finds
nothing are all snippets for the language ranked by the configured Scorer.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from devassist.database import CodeSnippet
from devassist.pipeline.similarity import RandomScorer, Scorer
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)

MAX_MATCHES = 2

# Leading characters of the input used as the substring search term
SEARCH_TERM_LENGTH = 50


class SnippetMatcher:
    """Finds up to two snippets related to a piece of code."""

    def __init__(self, store: CodeStore, scorer: Optional[Scorer] = None):
        self.store = store
        self.scorer = scorer or RandomScorer()

    async def find(self, code: str, language: Optional[str] = None) -> Optional[List[CodeSnippet]]:
        """
        Find relevant snippets.

        Args:
            code: Code text from the screen
            language: Language tag, if known

        Returns:
            At most two snippets, or None for blank input, no matches or
            a storage failure
        """
        query = code.strip()
        if not query:
            return None

        try:
            exact = self.store.get_snippets(
                language=language,
                search_term=query[:SEARCH_TERM_LENGTH],
                limit=MAX_MATCHES,
            )
            if exact:
                return exact

            candidates = self.store.get_snippets(language=language)
        except SQLAlchemyError as e:
            logger.error(f"Error finding snippets: {e}")
            return None

        if not candidates:
            return None

        return self.rank(query, candidates)[:MAX_MATCHES]

    def rank(self, query: str, candidates: List[CodeSnippet]) -> List[CodeSnippet]:
        """Order candidates by descending similarity to the query."""
        scored = [(self.scorer.similarity(query, s.content), s) for s in candidates]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [snippet for _, snippet in scored]
