# eventrec/ranking/filtering.py
"""
Candidate gate: runs before scoring to bound downstream cost.

Keeps an event only if
  - end_at > start_at (re-checked; the store should already guarantee it)
  - time_fit(window, event) > threshold   (strictly above)

Order of survivors = order of input. Each survivor keeps its original
input position so later sorting can break ties on it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..models import AvailabilityWindow, Event, epoch_seconds
from .time_fit import TimeFitFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilteredCandidate:
    event: Event
    position: int
    time_fit: float


def has_valid_span(event: Event) -> bool:
    return epoch_seconds(event.end_at) > epoch_seconds(event.start_at)


def filter_candidates(
    candidates: Sequence[Event],
    window: AvailabilityWindow,
    time_fit: TimeFitFn,
    threshold: float,
) -> list[FilteredCandidate]:
    kept: list[FilteredCandidate] = []
    bad_span = 0
    below = 0

    for position, event in enumerate(candidates):
        if not has_valid_span(event):
            bad_span += 1
            logger.info("[filter] DROP invalid span: id=%s start=%s end=%s",
                        event.id, event.start_at, event.end_at)
            continue
        fit = time_fit(window, event)
        if fit <= threshold:
            below += 1
            continue
        kept.append(FilteredCandidate(event=event, position=position, time_fit=fit))

    logger.debug(
        "[filter] seen=%d kept=%d below_threshold=%d invalid_span=%d threshold=%.3f",
        len(candidates), len(kept), below, bad_span, threshold,
    )
    return kept
