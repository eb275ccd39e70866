# eventrec/ranking/time_fit.py
"""
How well an event's time span sits in the user's availability window.

Two named, mutually exclusive policies (pick one per ranking call):

  containment   leftover = max(0, (A1 - e) + (s - A0))
                fit      = max(0, 1 - leftover / span),  span = max(1, A1 - A0)
                Events sharing no time with the window score 0.

  overlap       overlap    = max(0, min(A1, e) - max(A0, s))
                event_span = max(1, e - s)
                fit        = clamp(overlap / event_span, 0, 1)
                i.e. the share of the EVENT that falls inside the window.

All arithmetic is in seconds. Both return a float in [0, 1].
"""
from __future__ import annotations

from typing import Callable, Dict

from ..models import AvailabilityWindow, Event, epoch_seconds

TimeFitFn = Callable[[AvailabilityWindow, Event], float]

CONTAINMENT = "containment"
OVERLAP = "overlap"


def _overlap_seconds(a0: float, a1: float, s: float, e: float) -> float:
    return max(0.0, min(a1, e) - max(a0, s))


def containment_leftover(window: AvailabilityWindow, event: Event) -> float:
    a0, a1 = window.start_s, window.end_s
    s, e = epoch_seconds(event.start_at), epoch_seconds(event.end_at)
    if _overlap_seconds(a0, a1, s, e) <= 0.0:
        return 0.0
    leftover = max(0.0, (a1 - e) + (s - a0))
    return max(0.0, 1.0 - leftover / window.span_seconds)


def overlap_fraction(window: AvailabilityWindow, event: Event) -> float:
    a0, a1 = window.start_s, window.end_s
    s, e = epoch_seconds(event.start_at), epoch_seconds(event.end_at)
    event_span = max(1.0, e - s)
    frac = _overlap_seconds(a0, a1, s, e) / event_span
    return min(1.0, max(0.0, frac))


TIME_FIT_POLICIES: Dict[str, TimeFitFn] = {
    CONTAINMENT: containment_leftover,
    OVERLAP: overlap_fraction,
}

# Filter threshold per policy: keep fit strictly above this.
DEFAULT_MIN_TIME_FIT: Dict[str, float] = {
    CONTAINMENT: 0.0,
    OVERLAP: 0.2,
}


def get_time_fit(policy: str) -> TimeFitFn:
    if policy not in TIME_FIT_POLICIES:
        raise ValueError(
            f"Unknown time-fit policy {policy!r}; expected one of {sorted(TIME_FIT_POLICIES)}"
        )
    return TIME_FIT_POLICIES[policy]
