"""
Suggestion Pipeline - End-to-End Orchestration

Coordinates one analysis of captured screen text:
1. Developer context update (awaited first; analysis happens "at" it)
2. Error detection, suggestion generation and snippet matching, concurrently
3. Merge into a single PipelineResult

Each concurrent stage handles its own failures, so the orchestrator adds no
error handling of its own. Only a context-update storage failure reaches the
caller.
"""

import asyncio
import logging
from typing import Optional

from devassist.config import Settings
from devassist.llm.provider import LLMProvider
from devassist.pipeline.context_updater import ContextUpdater
from devassist.pipeline.error_detector import ErrorDetector
from devassist.pipeline.models import PipelineContext, PipelineResult
from devassist.pipeline.similarity import Scorer, get_scorer
from devassist.pipeline.snippet_matcher import SnippetMatcher
from devassist.pipeline.suggestion_generator import SuggestionGenerator
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)


class SuggestionPipeline:
    """
    Runs the analysis stages for one piece of screen text.

    Example:
        pipeline = SuggestionPipeline(store, provider)
        result = await pipeline.process(text, PipelineContext(source_app="vscode"))
    """

    def __init__(
        self,
        store: CodeStore,
        llm_provider: LLMProvider,
        scorer: Optional[Scorer] = None,
        temperature: float = 0.7,
    ):
        """
        Initialize the pipeline and its stages.

        Args:
            store: Initialized code store
            llm_provider: Completion provider shared by the stages
            scorer: Similarity scorer for snippet fallback (placeholder when None)
            temperature: Sampling temperature for error and suggestion prompts
        """
        self.store = store
        self.llm_provider = llm_provider
        self.context_updater = ContextUpdater(store)
        self.error_detector = ErrorDetector(store, llm_provider, temperature=temperature)
        self.suggestion_generator = SuggestionGenerator(store, llm_provider, temperature=temperature)
        self.snippet_matcher = SnippetMatcher(store, scorer=scorer)

    @classmethod
    def from_settings(
        cls, store: CodeStore, llm_provider: LLMProvider, config: Settings
    ) -> "SuggestionPipeline":
        return cls(
            store,
            llm_provider,
            scorer=get_scorer(config.similarity_backend),
            temperature=config.llm_temperature,
        )

    async def process(self, text: str, context: PipelineContext) -> PipelineResult:
        """
        Analyse screen text.

        Args:
            text: Captured text
            context: Source application, and file path / language when known

        Returns:
            Merged suggestions, errors and snippets
        """
        await self.context_updater.update(
            current_app=context.source_app,
            active_file=context.file_path,
        )

        errors, suggestions, snippets = await asyncio.gather(
            self.error_detector.detect(text, context.language),
            self.suggestion_generator.generate(
                text, file_path=context.file_path, language=context.language
            ),
            self.snippet_matcher.find(text, context.language),
        )

        logger.debug(
            f"Processed text from {context.source_app}: "
            f"{len(suggestions)} suggestions, {len(errors or [])} errors, "
            f"{len(snippets or [])} snippets"
        )

        return PipelineResult(suggestions=suggestions, errors=errors, snippets=snippets)
