# eventrec/ranking/scoring.py
"""
Per-candidate feature scores and the composite ranking score.

Pure utility — no DB access, no side effects.

Formula:
  popularity = ln(1 + attendees_count)          # 0 for nobody, unbounded
  composite  = w_text * text_score
             + w_time * time_fit
             + w_pop  * popularity

composite is NOT bounded to [0, 1]; it only has to order candidates.
The reason string is display text and carries no ranking meaning.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from ..models import Event


@dataclass(frozen=True)
class ScoredCandidate:
    event: Event
    position: int  # index in the caller's candidate list (stable tie-break)
    text_score: float
    time_fit: float
    popularity: float
    composite: float
    reason: str


def popularity(attendees_count: int) -> float:
    return math.log1p(max(0, attendees_count))


def composite_score(
    text_score: float,
    time_fit: float,
    pop: float,
    *,
    w_text: float,
    w_time: float,
    w_pop: float,
) -> float:
    return w_text * text_score + w_time * time_fit + w_pop * pop


def _match_phrase(text_score: float, strategy: str) -> str:
    if text_score >= 0.5:
        return f"Strong {strategy} match"
    if text_score >= 0.2:
        return f"{strategy.capitalize()} match"
    if text_score > 0:
        return f"Weak {strategy} match"
    return f"No {strategy} match"


def _time_phrase(time_fit: float) -> str:
    if time_fit >= 0.8:
        return "great time fit"
    if time_fit >= 0.5:
        return "good time fit"
    return "partial time fit"


def explain(text_score: float, time_fit: float, attendees_count: int, strategy: str) -> str:
    """
    Human-readable summary, e.g. "Strong lexical match; good time fit; 10 attending".
    """
    return "; ".join([
        _match_phrase(text_score, strategy),
        _time_phrase(time_fit),
        f"{attendees_count} attending",
    ])


def score_candidate(
    event: Event,
    *,
    position: int,
    text_score: float,
    time_fit: float,
    w_text: float,
    w_time: float,
    w_pop: float,
    strategy: str,
) -> ScoredCandidate:
    pop = popularity(event.attendees_count)
    return ScoredCandidate(
        event=event,
        position=position,
        text_score=text_score,
        time_fit=time_fit,
        popularity=pop,
        composite=composite_score(
            text_score, time_fit, pop, w_text=w_text, w_time=w_time, w_pop=w_pop,
        ),
        reason=explain(text_score, time_fit, event.attendees_count, strategy),
    )
