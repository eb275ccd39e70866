# eventrec/ranking/diversify.py
"""
Greedy Maximal Marginal Relevance (MMR) selection.

    value(e) = λ * composite(e) - (1 - λ) * max_{x ∈ chosen} tag_jaccard(e, x)

Redundancy is 0 while nothing is chosen, so the first pick is the top
composite score. Ties on value go to the EARLIEST pool position: the
scan runs in pool order and only a strictly greater value replaces the
current best.

Greedy and order-dependent on purpose — do not swap in an optimal
subset search; results must reproduce exactly.
"""
from __future__ import annotations

from typing import Sequence

from .scoring import ScoredCandidate
from .terms import jaccard, normalized_tag_set

DEFAULT_LAMBDA = 0.7
DEFAULT_POOL_CAP = 30


def tag_jaccard(a: ScoredCandidate, b: ScoredCandidate) -> float:
    return jaccard(normalized_tag_set(a.event.tags), normalized_tag_set(b.event.tags))


def mmr_select(
    pool: Sequence[ScoredCandidate],
    k: int,
    *,
    mmr_lambda: float = DEFAULT_LAMBDA,
    pool_cap: int = DEFAULT_POOL_CAP,
) -> list[ScoredCandidate]:
    """
    Pick min(k, |pool|) items from a pool already sorted by composite desc.

    Only the first `pool_cap` items are considered (bounds O(N² · k)).
    The input sequence is not mutated.
    """
    remaining = list(pool[:pool_cap])
    tag_sets = {id(c): normalized_tag_set(c.event.tags) for c in remaining}
    chosen: list[ScoredCandidate] = []

    while remaining and len(chosen) < k:
        best_idx = 0
        best_val = float("-inf")
        for i, cand in enumerate(remaining):
            redundancy = 0.0
            if chosen:
                mine = tag_sets[id(cand)]
                redundancy = max(jaccard(mine, tag_sets[id(x)]) for x in chosen)
            value = mmr_lambda * cand.composite - (1.0 - mmr_lambda) * redundancy
            if value > best_val:
                best_val = value
                best_idx = i
        chosen.append(remaining.pop(best_idx))

    return chosen
