"""
Suggestion Pipeline Module

Error detection, suggestion generation and snippet matching over captured
screen text.
"""

from devassist.pipeline.models import ErrorSolution, PipelineContext, PipelineResult
from devassist.pipeline.context_updater import ContextUpdater
from devassist.pipeline.error_detector import ErrorDetector, find_error_candidates
from devassist.pipeline.suggestion_generator import SuggestionGenerator
from devassist.pipeline.snippet_matcher import SnippetMatcher
from devassist.pipeline.enhancer import SnippetEnhancer
from devassist.pipeline.orchestrator import SuggestionPipeline

__all__ = [
    "ErrorSolution",
    "PipelineContext",
    "PipelineResult",
    "ContextUpdater",
    "ErrorDetector",
    "find_error_candidates",
    "SuggestionGenerator",
    "SnippetMatcher",
    "SnippetEnhancer",
    "SuggestionPipeline",
]
