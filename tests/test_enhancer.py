"""
Tests for the snippet enhancer.
"""

import pytest

from conftest import FakeProvider
from devassist.pipeline.enhancer import (
    SnippetEnhancer,
    parse_snippet_metadata,
    project_context_from_path,
)


class TestParseSnippetMetadata:
    """Tests for parse_snippet_metadata()."""

    def test_plain_json(self):
        metadata = parse_snippet_metadata('{"language": "python", "tags": ["io", "files"]}')
        assert metadata.language == "python"
        assert metadata.tags == ["io", "files"]

    def test_fenced_json(self):
        metadata = parse_snippet_metadata('```json\n{"tags": ["http"]}\n```')
        assert metadata.tags == ["http"]
        assert metadata.language is None

    @pytest.mark.parametrize(
        "response",
        ["not json at all", "[1, 2, 3]", '{"tags": "io"}', '{"language": 5}'],
    )
    def test_malformed_yields_empty_tags(self, response):
        metadata = parse_snippet_metadata(response)
        assert metadata.tags == []
        assert metadata.language is None

    def test_blank_tags_dropped(self):
        assert parse_snippet_metadata('{"tags": ["ok", " ", ""]}').tags == ["ok"]


class TestProjectContextFromPath:
    """Tests for project_context_from_path()."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/home/dev/calc/ops.py", "calc"),
            ("C:\\work\\billing\\invoice.ts", "billing"),
            ("ops.py", None),
            (None, None),
            ("", None),
        ],
    )
    def test_parent_directory(self, path, expected):
        assert project_context_from_path(path) == expected


class TestSnippetEnhancer:
    """Tests for SnippetEnhancer."""

    @pytest.mark.asyncio
    async def test_create_enhanced_snippet(self, store):
        provider = FakeProvider(reply='{"language": "python", "tags": ["math", "pure"]}')
        enhancer = SnippetEnhancer(store, provider)

        snippet = await enhancer.create_enhanced_snippet(
            "def add(a, b): return a + b",
            source_app="vscode",
            file_path="/home/dev/calc/ops.py",
        )

        assert snippet.language == "python"
        assert snippet.tags == ["math", "pure"]
        assert snippet.project_context == "calc"
        assert snippet.source_app == "vscode"
        assert store.get_snippet(snippet.id) is not None
        assert provider.requests[0].temperature == 0.3

    @pytest.mark.asyncio
    async def test_explicit_language_wins(self, store):
        enhancer = SnippetEnhancer(store, FakeProvider(reply='{"language": "python", "tags": []}'))

        snippet = await enhancer.create_enhanced_snippet("x", source_app="vim", language="ruby")

        assert snippet.language == "ruby"

    @pytest.mark.asyncio
    async def test_provider_failure_still_saves(self, store):
        enhancer = SnippetEnhancer(store, FakeProvider(error=TimeoutError("slow")))

        snippet = await enhancer.create_enhanced_snippet("x", source_app="vim")

        assert snippet.language == "unknown"
        assert snippet.tags == []
        assert [s.id for s in store.get_snippets()] == [snippet.id]

    @pytest.mark.asyncio
    async def test_garbage_response_still_saves(self, store):
        enhancer = SnippetEnhancer(store, FakeProvider(reply="I think this is Python."))

        snippet = await enhancer.create_enhanced_snippet("x", source_app="vim")

        assert snippet.tags == []
