"""
Error Detector - spots error messages in screen text and finds solutions

Pipeline per candidate:
1. Regex signatures produce candidate error strings
2. Known solutions are looked up in the error-pattern cache
3. On a miss the completion API is asked once
4. New answers are written back to the cache (single upsert)

OCR noise makes false positives common, so completion and cache failures
never reach the caller; the candidate simply yields nothing.
"""

import logging
import re
from typing import List, Optional, Pattern

from sqlalchemy.exc import SQLAlchemyError

from devassist.llm.prompts import build_error_solution_request
from devassist.llm.provider import LLMProvider
from devassist.pipeline.models import ErrorSolution
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)


# Applied in order; each contributes at most its first match
ERROR_SIGNATURES: List[Pattern[str]] = [
    # Generic "error:" prefix
    re.compile(r"error\s*:\s*(.*)", re.IGNORECASE),
    # Typed exceptions
    re.compile(r"(SyntaxError|TypeError|ReferenceError):\s*(.*)"),
    # Numbered compiler errors (E0308: ...)
    re.compile(r"(E\d+):\s*(.*)"),
    # Generic exception / unhandled phrases
    re.compile(r"(exception|unhandled)\s*(.*)", re.IGNORECASE),
]


def find_error_candidates(text: str) -> List[str]:
    """
    Run every signature against the text.

    Overlapping matches are kept: two signatures matching the same substring
    produce two candidates.

    Returns:
        Full-match strings in signature order
    """
    candidates = []
    for signature in ERROR_SIGNATURES:
        match = signature.search(text)
        if match:
            candidates.append(match.group(0))
    return candidates


class ErrorDetector:
    """
    Detects errors in screen text and attaches solutions.

    Example:
        detector = ErrorDetector(store, provider)
        errors = await detector.detect("TypeError: x is undefined", language="javascript")
    """

    def __init__(self, store: CodeStore, llm_provider: LLMProvider, temperature: float = 0.7):
        """
        Initialize error detector.

        Args:
            store: Code store holding the error-pattern cache
            llm_provider: Completion provider used on cache misses
            temperature: Sampling temperature for solution requests
        """
        self.store = store
        self.llm_provider = llm_provider
        self.temperature = temperature

    async def detect(
        self, text: str, language: Optional[str] = None
    ) -> Optional[List[ErrorSolution]]:
        """
        Find errors in text and resolve a solution for each.

        Args:
            text: Raw screen text
            language: Language tag; without one the cache is bypassed

        Returns:
            Error/solution pairs, or None when nothing was found
        """
        found: List[ErrorSolution] = []

        for error_text in find_error_candidates(text):
            cached = self._cached_solutions(error_text, language)
            if cached:
                logger.debug(f"Cache hit for error ({len(cached)} solutions): {error_text[:60]}")
                found.extend(ErrorSolution(error=error_text, solution=s) for s in cached)
                continue

            solution = await self._generate_solution(error_text, language)
            if not solution:
                continue

            found.append(ErrorSolution(error=error_text, solution=solution))
            self._remember(error_text, solution, language)

        return found or None

    def _cached_solutions(self, error_text: str, language: Optional[str]) -> List[str]:
        if not language:
            return []

        try:
            patterns = self.store.get_error_solutions(error_text, language)
        except SQLAlchemyError as e:
            logger.error(f"Error-pattern lookup failed, treating as miss: {e}")
            return []

        return [p.solution for p in patterns]

    async def _generate_solution(self, error_text: str, language: Optional[str]) -> Optional[str]:
        request = build_error_solution_request(error_text, language, self.temperature)
        try:
            response = await self.llm_provider.complete(request)
        except (TimeoutError, RuntimeError) as e:
            logger.error(f"Error generating solution: {e}")
            return None

        return response.strip() or None

    def _remember(self, error_text: str, solution: str, language: Optional[str]) -> None:
        if not language:
            return

        try:
            self.store.record_error(error_text=error_text, solution=solution, language=language)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record error pattern: {e}")
