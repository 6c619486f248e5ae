"""
Snippet Enhancer - saves snippets with AI-generated metadata.

The completion API proposes a language and a handful of tags. Malformed or
missing output degrades to no tags; saving never fails because of the model.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from devassist.database import CodeSnippet
from devassist.llm.prompts import build_snippet_metadata_request
from devassist.llm.provider import LLMProvider
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE = "unknown"

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass
class SnippetMetadata:
    """Model-proposed metadata for a snippet."""

    tags: List[str] = field(default_factory=list)
    language: Optional[str] = None


def parse_snippet_metadata(response: str) -> SnippetMetadata:
    """
    Parse the metadata JSON returned by the model.

    Markdown code fences are tolerated. Anything that is not an object with
    a list of tags yields empty metadata.
    """
    cleaned = _CODE_FENCE.sub("", response.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"Failed to parse snippet metadata as JSON: {response[:100]}")
        return SnippetMetadata()

    if not isinstance(data, dict):
        return SnippetMetadata()

    raw_tags = data.get("tags")
    tags = [str(t) for t in raw_tags if str(t).strip()] if isinstance(raw_tags, list) else []

    language = data.get("language")
    if not isinstance(language, str) or not language.strip():
        language = None

    return SnippetMetadata(tags=tags, language=language)


def project_context_from_path(file_path: Optional[str]) -> Optional[str]:
    """
    Name of the directory containing the file, used as a project hint.

    Both / and \\ separators are accepted.

    Returns:
        Parent directory name, or None when the path has no parent component
    """
    if not file_path:
        return None

    parts = [p for p in re.split(r"[\\/]", file_path) if p]
    return parts[-2] if len(parts) > 1 else None


class SnippetEnhancer:
    """Creates snippets enriched with model-generated tags and language."""

    def __init__(self, store: CodeStore, llm_provider: LLMProvider):
        self.store = store
        self.llm_provider = llm_provider

    async def enhance_metadata(self, code: str) -> SnippetMetadata:
        try:
            response = await self.llm_provider.complete(build_snippet_metadata_request(code))
        except (TimeoutError, RuntimeError) as e:
            logger.error(f"Error enhancing snippet: {e}")
            return SnippetMetadata()

        if not response:
            return SnippetMetadata()

        return parse_snippet_metadata(response)

    async def create_enhanced_snippet(
        self,
        code: str,
        source_app: str,
        language: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> CodeSnippet:
        """
        Save a snippet with generated tags.

        Language precedence: explicit argument, then the model's guess,
        then "unknown".
        """
        metadata = await self.enhance_metadata(code)

        return self.store.save_snippet(
            content=code,
            language=language or metadata.language or UNKNOWN_LANGUAGE,
            tags=metadata.tags,
            file_path=file_path,
            project_context=project_context_from_path(file_path),
            source_app=source_app,
        )
