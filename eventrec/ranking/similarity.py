# eventrec/ranking/similarity.py
"""
Query ↔ event text similarity.

Two interchangeable strategies behind one interface; exactly one is
active per ranking call:

  lexical   Jaccard(expanded query tokens, event name+tag tokens)
            + 0.15 substring bonus, capped at 1.0. Needs a synonym table.
  semantic  dot(query unit vector, event unit vector). Needs an embedder
            or a pre-computed query embedding. Not clamped.

prepare() runs once per call (query-side work), score() once per event.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Type

import numpy as np

from ..embeddings import Embedder, cosine, event_text, query_text, to_unit_vector
from ..models import Event, Query
from .synonyms import DEFAULT_SYNONYMS
from .terms import jaccard, query_token_set, tokenize

SUBSTRING_BONUS = 0.15
SUBSTRING_MIN_LEN = 3


class MissingQueryEmbedding(ValueError):
    """Semantic strategy has neither a query embedding nor an embedder."""


class TextSimilarity(ABC):
    name: str = "text"

    @abstractmethod
    def prepare(self, query: Query) -> Any:
        """Per-call query representation handed back to score()."""

    @abstractmethod
    def score(self, prepared: Any, event: Event) -> float:
        """Similarity of one event to the prepared query."""


# ---------------------------------------------------------------------------
# Lexical
# ---------------------------------------------------------------------------

def _has_substring_hit(query_tokens: frozenset[str], event_tokens: set[str]) -> bool:
    for q in query_tokens:
        if len(q) < SUBSTRING_MIN_LEN:
            continue
        for t in event_tokens:
            if q in t or t in q:
                return True
    return False


def lexical_score(query_tokens: frozenset[str], event_tokens: set[str]) -> float:
    """Jaccard in [0, 1] plus the substring bonus, never above 1.0."""
    score = jaccard(query_tokens, event_tokens)
    if _has_substring_hit(query_tokens, event_tokens):
        score = min(1.0, score + SUBSTRING_BONUS)
    return score


def event_tokens(event: Event) -> set[str]:
    words = tokenize(event.name)
    for tag in event.tags:
        words.extend(tokenize(tag))
    return set(words)


class LexicalSimilarity(TextSimilarity):
    name = "lexical"

    def __init__(self, synonyms: Optional[Mapping[str, Any]] = None):
        self.synonyms = DEFAULT_SYNONYMS if synonyms is None else synonyms

    def prepare(self, query: Query) -> frozenset[str]:
        return query_token_set(query.terms, self.synonyms)

    def score(self, prepared: frozenset[str], event: Event) -> float:
        return lexical_score(prepared, event_tokens(event))


# ---------------------------------------------------------------------------
# Semantic
# ---------------------------------------------------------------------------

class SemanticSimilarity(TextSimilarity):
    name = "semantic"

    def __init__(self, embedder: Optional[Embedder] = None):
        self.embedder = embedder

    def can_prepare(self, query: Query) -> bool:
        return query.embedding is not None or self.embedder is not None

    def prepare(self, query: Query) -> np.ndarray:
        if query.embedding is not None:
            return to_unit_vector(query.embedding)
        if self.embedder is None:
            raise MissingQueryEmbedding(
                "semantic strategy needs query.embedding or an embedder"
            )
        return to_unit_vector(self.embedder(query_text(query.terms)))

    def score(self, prepared: np.ndarray, event: Event) -> float:
        # Store-side similarity (recommend_raw RPC) wins over recomputing.
        if event.embed_sim is not None:
            return float(event.embed_sim)
        if event.embedding is not None:
            return cosine(prepared, to_unit_vector(event.embedding))
        if self.embedder is None:
            return 0.0
        return cosine(prepared, to_unit_vector(self.embedder(event_text(event))))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

STRATEGIES: Dict[str, Type[TextSimilarity]] = {
    "lexical": LexicalSimilarity,
    "semantic": SemanticSimilarity,
}


def get_similarity(
    name: str,
    *,
    synonyms: Optional[Mapping[str, Any]] = None,
    embedder: Optional[Embedder] = None,
) -> TextSimilarity:
    if name not in STRATEGIES:
        raise ValueError(f"Unknown similarity strategy {name!r}; expected one of {sorted(STRATEGIES)}")
    if name == "lexical":
        return LexicalSimilarity(synonyms)
    return SemanticSimilarity(embedder)
