"""
Prompt templates and request builders for the assistant.

Each builder returns a ready CompletionRequest so callers only choose the
sampling temperature.
"""

import re
from typing import List, Optional, Sequence

from devassist.llm.provider import ChatMessage, CompletionRequest


ERROR_SOLUTION_SYSTEM = (
    "You are an expert programming assistant. "
    "Provide clear, concise solutions to errors."
)

ERROR_SOLUTION_PROMPT = """Provide a concise solution for this {language} error:
Error: {error}

Solution:"""

SUGGESTION_SYSTEM = (
    "You are a pair programming assistant. "
    "Provide helpful, concise coding suggestions."
)

SUGGESTION_PROMPT = """Based on this code context:
File: {file_path}
Language: {language}
{active_app}Current code:
{code}
{snippets}
Provide 3 concise suggestions to improve or continue this code. Format as bullet points."""

SNIPPET_METADATA_SYSTEM = (
    "You are a code analysis assistant. "
    "Provide accurate metadata about code snippets."
)

SNIPPET_METADATA_PROMPT = """Analyze this code snippet:
{code}

Provide:
1. The programming language (if not specified)
2. 3-5 tags that describe its functionality

Format as JSON: {{ "language": string (optional), "tags": [string] }}
Only return valid JSON, no additional text."""

# Token budgets per request type
ERROR_SOLUTION_MAX_TOKENS = 200
SUGGESTION_MAX_TOKENS = 300
SNIPPET_METADATA_MAX_TOKENS = 200

# Metadata extraction wants consistent output
SNIPPET_METADATA_TEMPERATURE = 0.3


def build_error_solution_request(
    error: str, language: Optional[str], temperature: float
) -> CompletionRequest:
    prompt = ERROR_SOLUTION_PROMPT.format(
        language=language or "programming",
        error=error,
    )
    return CompletionRequest(
        messages=[
            ChatMessage(role="system", content=ERROR_SOLUTION_SYSTEM),
            ChatMessage(role="user", content=prompt),
        ],
        temperature=temperature,
        max_tokens=ERROR_SOLUTION_MAX_TOKENS,
    )


def build_suggestion_request(
    code: str,
    file_path: Optional[str],
    language: Optional[str],
    snippets: Sequence[str],
    temperature: float,
    active_app: Optional[str] = None,
) -> CompletionRequest:
    """
    Build the freeform suggestion request.

    Args:
        code: Code currently on screen
        file_path: File being edited, if known
        language: Language tag, if known
        snippets: Contents of related snippets from the store
        temperature: Sampling temperature
        active_app: Application the developer is working in, if known
    """
    snippet_block = ""
    if snippets:
        snippet_block = "\nRelevant snippets:\n" + "\n---\n".join(snippets) + "\n"

    prompt = SUGGESTION_PROMPT.format(
        file_path=file_path or "unknown",
        language=language or "unknown",
        active_app=f"Application: {active_app}\n" if active_app else "",
        code=code,
        snippets=snippet_block,
    )
    return CompletionRequest(
        messages=[
            ChatMessage(role="system", content=SUGGESTION_SYSTEM),
            ChatMessage(role="user", content=prompt),
        ],
        temperature=temperature,
        max_tokens=SUGGESTION_MAX_TOKENS,
    )


def build_snippet_metadata_request(code: str) -> CompletionRequest:
    return CompletionRequest(
        messages=[
            ChatMessage(role="system", content=SNIPPET_METADATA_SYSTEM),
            ChatMessage(role="user", content=SNIPPET_METADATA_PROMPT.format(code=code)),
        ],
        temperature=SNIPPET_METADATA_TEMPERATURE,
        max_tokens=SNIPPET_METADATA_MAX_TOKENS,
    )


# "-" (not a "---" rule), "•", or "*" followed by whitespace (not **bold**)
BULLET_PATTERN = re.compile(r"^(?:-(?!-)|•|\*(?=\s))\s*")


def parse_bullet_points(text: str, limit: int = 3) -> List[str]:
    """
    Extract bullet-point lines from model output.

    Only lines starting with a bullet marker survive; the marker and
    surrounding whitespace are stripped and empty items dropped.

    Args:
        text: Raw model output
        limit: Maximum number of items to return

    Returns:
        At most ``limit`` bullet texts, in order
    """
    items = []
    for line in text.splitlines():
        line = line.strip()
        match = BULLET_PATTERN.match(line)
        if not match:
            continue

        item = line[match.end():].strip()
        if item:
            items.append(item)

        if len(items) >= limit:
            break

    return items
