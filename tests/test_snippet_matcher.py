"""
Tests for snippet matching and the similarity backends.
"""

import random

import pytest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from devassist.pipeline.similarity import (
    EmbeddingScorer,
    Embedder,
    PlaceholderEmbedder,
    RandomScorer,
    Scorer,
    SequenceScorer,
    cosine_similarity,
    get_scorer,
)
from devassist.pipeline.snippet_matcher import SnippetMatcher


class RecordingScorer(Scorer):
    """Scores by a fixed table and remembers every call."""

    def __init__(self, scores=None):
        self.scores = scores or {}
        self.calls = []

    def similarity(self, query, candidate_text):
        self.calls.append((query, candidate_text))
        return self.scores.get(candidate_text, 0.0)


class KeywordEmbedder(Embedder):
    """Two-dimensional bag of words over 'sql' and 'http'."""

    def embed(self, text):
        return [float(text.count("sql")), float(text.count("http"))]


# ============================================================================
# Similarity Backends
# ============================================================================


class TestSimilarity:
    """Tests for the scorer implementations."""

    def test_random_scorer_in_unit_interval(self):
        scorer = RandomScorer(rng=random.Random(42))
        scores = [scorer.similarity("a", "b") for _ in range(20)]
        assert all(0.0 <= s < 1.0 for s in scores)

    def test_random_scorer_seeded_is_repeatable(self):
        first = RandomScorer(rng=random.Random(7)).similarity("a", "b")
        second = RandomScorer(rng=random.Random(7)).similarity("a", "b")
        assert first == second

    def test_sequence_scorer(self):
        scorer = SequenceScorer()
        assert scorer.similarity("Hello", "hello") == 1.0
        assert scorer.similarity("abc", "xyz") == 0.0

    def test_cosine_similarity(self):
        assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([1.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_embedding_scorer(self):
        scorer = EmbeddingScorer(KeywordEmbedder())
        assert scorer.similarity("sql sql", "sql") == pytest.approx(1.0)
        assert scorer.similarity("sql", "http") == pytest.approx(0.0)

    def test_placeholder_embedder_scores_zero(self):
        assert EmbeddingScorer(PlaceholderEmbedder()).similarity("a", "a") == 0.0

    def test_get_scorer(self):
        assert isinstance(get_scorer("random"), RandomScorer)
        assert isinstance(get_scorer("sequence"), SequenceScorer)
        with pytest.raises(ValueError, match="Unknown similarity backend"):
            get_scorer("faiss")


# ============================================================================
# Snippet Matcher
# ============================================================================


class TestSnippetMatcher:
    """Tests for SnippetMatcher.find()."""

    @pytest.mark.asyncio
    async def test_blank_input_returns_none(self, store):
        store.save_snippet(content="x = 1", language="python", source_app="vim")
        matcher = SnippetMatcher(store)

        assert await matcher.find("   ", "python") is None

    @pytest.mark.asyncio
    async def test_exact_match_short_circuits_scoring(self, store):
        store.save_snippet(
            content="def parse_config(path):\n    return load(path)",
            language="python",
            source_app="vim",
        )
        store.save_snippet(content="print('unrelated')", language="python", source_app="vim")
        scorer = RecordingScorer()
        matcher = SnippetMatcher(store, scorer=scorer)

        result = await matcher.find("parse_config", "python")

        assert [s.content for s in result] == ["def parse_config(path):\n    return load(path)"]
        assert scorer.calls == []

    @pytest.mark.asyncio
    async def test_exact_match_limited_to_two(self, store):
        for i in range(4):
            store.save_snippet(content=f"retry_request({i})", language="python", source_app="vim")
        matcher = SnippetMatcher(store, scorer=RecordingScorer())

        result = await matcher.find("retry_request", "python")

        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_exact_search_uses_first_50_chars(self, store):
        head = "a" * 50
        store.save_snippet(content=head + " stored tail", language="text", source_app="vim")
        scorer = RecordingScorer()
        matcher = SnippetMatcher(store, scorer=scorer)

        result = await matcher.find(head + " different tail", "text")

        assert len(result) == 1
        assert scorer.calls == []

    @pytest.mark.asyncio
    async def test_fallback_ranks_by_similarity(self, store):
        for content in ("abcdef", "abcxyz", "zzzzzz"):
            store.save_snippet(content=content, language="text", source_app="vim")
        matcher = SnippetMatcher(store, scorer=SequenceScorer())

        result = await matcher.find("abcdeg", "text")

        assert [s.content for s in result] == ["abcdef", "abcxyz"]

    @pytest.mark.asyncio
    async def test_fallback_restricted_to_language(self, store):
        store.save_snippet(content="SELECT 1", language="sql", source_app="vim")
        store.save_snippet(content="print(1)", language="python", source_app="vim")
        scorer = RecordingScorer({"print(1)": 0.9})
        matcher = SnippetMatcher(store, scorer=scorer)

        result = await matcher.find("no substring hit", "python")

        assert [s.content for s in result] == ["print(1)"]
        assert [candidate for _, candidate in scorer.calls] == ["print(1)"]

    @pytest.mark.asyncio
    async def test_no_candidates_returns_none(self, store):
        store.save_snippet(content="SELECT 1", language="sql", source_app="vim")
        matcher = SnippetMatcher(store)

        assert await matcher.find("fn main() {}", "rust") is None

    @pytest.mark.asyncio
    async def test_storage_failure_returns_none(self, store):
        matcher = SnippetMatcher(store)
        failure = OperationalError("SELECT", {}, Exception("db locked"))

        with patch.object(store, "get_snippets", side_effect=failure):
            assert await matcher.find("x = 1", "python") is None

    def test_rank_orders_descending(self, store):
        a = store.save_snippet(content="a", language="text", source_app="vim")
        b = store.save_snippet(content="b", language="text", source_app="vim")
        c = store.save_snippet(content="c", language="text", source_app="vim")
        matcher = SnippetMatcher(store, scorer=RecordingScorer({"a": 0.1, "b": 0.9, "c": 0.5}))

        assert [s.content for s in matcher.rank("q", [a, b, c])] == ["b", "c", "a"]
