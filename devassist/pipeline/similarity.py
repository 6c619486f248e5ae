"""
Similarity backends for snippet matching.

The snippet matcher only depends on the Scorer interface, so a real vector
backend can replace the placeholder without touching its control flow.

Shipped implementations:
- RandomScorer: placeholder, random score (not semantically meaningful)
- SequenceScorer: difflib ratio over the raw text
- EmbeddingScorer: cosine similarity over any Embedder
"""

import math
import random
from abc import ABC, abstractmethod
from difflib import SequenceMatcher
from typing import List, Optional, Sequence


class Embedder(ABC):
    """Turns text into a vector."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        pass


class Scorer(ABC):
    """Scores how relevant a candidate text is to a query, in [0, 1]."""

    @abstractmethod
    def similarity(self, query: str, candidate_text: str) -> float:
        pass


class PlaceholderEmbedder(Embedder):
    """Stand-in until an embedding API is wired in; always returns []."""

    def embed(self, text: str) -> List[float]:
        return []


class RandomScorer(Scorer):
    """Placeholder scorer returning a random value."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def similarity(self, query: str, candidate_text: str) -> float:
        return self.rng.random()


class SequenceScorer(Scorer):
    """Character-level similarity using difflib."""

    def similarity(self, query: str, candidate_text: str) -> float:
        return SequenceMatcher(None, query.lower(), candidate_text.lower()).ratio()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity clamped to [0, 1]; 0.0 for empty or mismatched vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return max(0.0, min(1.0, dot / (norm_a * norm_b)))


class EmbeddingScorer(Scorer):
    """Cosine similarity between embeddings of the query and the candidate."""

    def __init__(self, embedder: Embedder):
        self.embedder = embedder

    def similarity(self, query: str, candidate_text: str) -> float:
        return cosine_similarity(self.embedder.embed(query), self.embedder.embed(candidate_text))


def get_scorer(backend: str) -> Scorer:
    """
    Create a scorer by configuration name.

    Raises:
        ValueError: If the backend name is unknown
    """
    if backend == "random":
        return RandomScorer()
    elif backend == "sequence":
        return SequenceScorer()
    else:
        raise ValueError(f"Unknown similarity backend: {backend}")
