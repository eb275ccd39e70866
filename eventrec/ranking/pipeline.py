# eventrec/ranking/pipeline.py
"""
Ranking pipeline: query + candidate events → ordered, diversified suggestions.

  validate → filter (time fit) → score → stable sort desc
           → truncate to pool cap → MMR → Suggestion

Pure and synchronous: no I/O, no state kept between calls. Candidate
retrieval and embedding happen upstream, before rank() is called.

Outcomes are returned, not raised:
  status="ok"             1..k suggestions
  status="no_overlap"     nothing survived the time-fit filter (not an error)
  status="invalid_query"  rejected before scoring; see reasons
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ..config import RankingConfig
from ..embeddings import Embedder
from ..models import Event, Query, Suggestion, epoch_seconds
from .diversify import mmr_select
from .filtering import filter_candidates
from .scoring import ScoredCandidate, score_candidate
from .similarity import SemanticSimilarity, TextSimilarity, get_similarity
from .terms import normalize
from .time_fit import get_time_fit

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NO_OVERLAP = "no_overlap"
STATUS_INVALID_QUERY = "invalid_query"


class InvalidQueryError(ValueError):
    def __init__(self, reasons: Sequence[str]):
        self.reasons = list(reasons)
        super().__init__(f"invalid query: {', '.join(self.reasons)}")


@dataclass(frozen=True)
class RankResult:
    status: str
    suggestions: list[Suggestion] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != STATUS_INVALID_QUERY

    def raise_for_status(self) -> "RankResult":
        if self.status == STATUS_INVALID_QUERY:
            raise InvalidQueryError(self.reasons)
        return self

    def to_payload(self) -> dict:
        return {
            "status": self.status,
            "reasons": list(self.reasons),
            "suggestions": [s.to_payload() for s in self.suggestions],
        }


def validate_query(query: Query, similarity: TextSimilarity) -> list[str]:
    """Explicit reasons why `query` cannot be ranked; [] means valid."""
    reasons: list[str] = []

    if epoch_seconds(query.window_end) <= epoch_seconds(query.window_start):
        reasons.append("window_end_not_after_start")

    if not any(normalize(t) for t in query.terms):
        reasons.append("missing_terms")

    if query.k < 1:
        reasons.append("k_below_one")

    if isinstance(similarity, SemanticSimilarity) and not similarity.can_prepare(query):
        reasons.append("missing_query_embedding")

    return reasons


def to_suggestion(c: ScoredCandidate) -> Suggestion:
    ev = c.event
    return Suggestion(
        id=ev.id,
        name=ev.name,
        start=ev.start_at,
        end=ev.end_at,
        tags=list(ev.tags),
        attendees_count=ev.attendees_count,
        score=round(c.composite, 3),
        reason=c.reason,
    )


def rank(
    query: Query,
    candidates: Sequence[Event],
    config: Optional[RankingConfig] = None,
    *,
    similarity: Optional[TextSimilarity] = None,
    synonyms: Optional[Mapping[str, Any]] = None,
    embedder: Optional[Embedder] = None,
) -> RankResult:
    config = config or RankingConfig()
    if similarity is None:
        similarity = get_similarity(config.strategy, synonyms=synonyms, embedder=embedder)

    reasons = validate_query(query, similarity)
    if reasons:
        logger.info("[rank] REJECT invalid query: %s", ", ".join(reasons))
        return RankResult(status=STATUS_INVALID_QUERY, reasons=reasons)

    window = query.window
    time_fit = get_time_fit(config.time_fit_policy)

    # 1) Filter
    survivors = filter_candidates(candidates, window, time_fit, config.time_fit_threshold)
    if not survivors:
        logger.info(
            "[rank] no_overlap: candidates=%d policy=%s threshold=%.3f",
            len(candidates), config.time_fit_policy, config.time_fit_threshold,
        )
        return RankResult(status=STATUS_NO_OVERLAP, reasons=["no_overlap"])

    # 2) Score
    prepared = similarity.prepare(query)
    scored = [
        score_candidate(
            f.event,
            position=f.position,
            text_score=similarity.score(prepared, f.event),
            time_fit=f.time_fit,
            w_text=config.w_text,
            w_time=config.w_time,
            w_pop=config.w_pop,
            strategy=similarity.name,
        )
        for f in survivors
    ]

    # 3) Sort desc by composite; equal scores keep candidate order
    scored.sort(key=lambda c: (-c.composite, c.position))

    # 4) Truncate + diversify
    picked = mmr_select(
        scored[: config.pool_cap],
        query.k,
        mmr_lambda=config.mmr_lambda,
        pool_cap=config.pool_cap,
    )

    logger.info(
        "[rank] ok: candidates=%d filtered=%d pool=%d picked=%d strategy=%s policy=%s",
        len(candidates), len(survivors), min(len(scored), config.pool_cap),
        len(picked), similarity.name, config.time_fit_policy,
    )
    return RankResult(status=STATUS_OK, suggestions=[to_suggestion(c) for c in picked])
