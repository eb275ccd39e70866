# eventrec/embeddings.py
"""
Text → unit vector helpers for the semantic ranking strategy.

The ranker only needs "given text, return a unit vector"; any callable
with that shape satisfies `Embedder`. HashingEmbedder is the built-in,
dependency-free provider: signed feature hashing of normalized word
tokens into a fixed number of buckets, then L2-normalized. Identical
text always yields the identical vector.
"""
from __future__ import annotations

from hashlib import sha256
from typing import Iterable, Protocol, Sequence

import numpy as np

from .models import Event
from .ranking.terms import tokenize

EMBEDDING_DIM = 384


class Embedder(Protocol):
    def __call__(self, text: str) -> np.ndarray: ...


def to_unit_vector(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """float64 copy scaled to unit length. A zero vector stays zero."""
    v = np.asarray(values, dtype=np.float64)
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return v
    return v / norm


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine of two unit vectors, i.e. their dot product."""
    if a.shape != b.shape:
        raise ValueError(f"Embedding dimension mismatch: {a.shape} vs {b.shape}")
    return float(np.dot(a, b))


class HashingEmbedder:
    def __init__(self, dim: int = EMBEDDING_DIM):
        if dim < 1:
            raise ValueError("dim must be >= 1")
        self.dim = dim

    def _bucket(self, token: str) -> tuple[int, float]:
        digest = sha256(token.encode("utf-8")).digest()
        idx = int.from_bytes(digest[:8], "big") % self.dim
        sign = 1.0 if digest[8] & 1 else -1.0
        return idx, sign

    def __call__(self, text: str) -> np.ndarray:
        v = np.zeros(self.dim, dtype=np.float64)
        for tok in tokenize(text):
            idx, sign = self._bucket(tok)
            v[idx] += sign
        return to_unit_vector(v)


def query_text(terms: Iterable[str]) -> str:
    """Sentence the query vector is built from."""
    return f"Interested in: {', '.join(terms)}."


def event_text(event: Event) -> str:
    """Descriptive text an event vector is built from (name + tags)."""
    if event.tags:
        return f"{event.name}. Tags: {', '.join(event.tags)}."
    return f"{event.name}."
