# tests/test_scoring.py
"""Composite scoring + popularity + reason string (pure, no DB)."""
from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from eventrec.models import Event
from eventrec.ranking.scoring import composite_score, explain, popularity, score_candidate


class TestPopularity:

    def test_zero_attendees_is_zero(self):
        assert popularity(0) == 0.0

    def test_log1p(self):
        assert popularity(10) == pytest.approx(math.log(11))

    @pytest.mark.parametrize("a,b", [(0, 1), (1, 2), (2, 10), (10, 1000)])
    def test_strictly_increasing(self, a, b):
        assert popularity(a) < popularity(b)

    def test_negative_clamped(self):
        assert popularity(-3) == 0.0


class TestCompositeScore:

    def test_weighted_sum(self):
        score = composite_score(0.4, 0.5, 2.0, w_text=0.5, w_time=0.3, w_pop=0.2)
        assert score == pytest.approx(0.2 + 0.15 + 0.4)

    def test_not_bounded_to_unit_interval(self):
        score = composite_score(1.0, 1.0, math.log1p(500), w_text=0.5, w_time=0.3, w_pop=0.2)
        assert score > 1.0


class TestExplain:

    def test_strong_match(self):
        assert explain(0.7, 0.9, 10, "lexical") == "Strong lexical match; great time fit; 10 attending"

    def test_plain_match(self):
        assert explain(0.3, 0.5, 2, "semantic") == "Semantic match; good time fit; 2 attending"

    def test_weak_and_partial(self):
        assert explain(0.05, 0.1, 0, "lexical") == "Weak lexical match; partial time fit; 0 attending"

    def test_no_match(self):
        assert explain(0.0, 1.0, 1, "lexical").startswith("No lexical match")


class TestScoreCandidate:

    def test_fields(self):
        ev = Event(
            id="a",
            name="Catan Night",
            tags=["board game"],
            start_at=datetime(2025, 1, 2, 19, tzinfo=timezone.utc),
            end_at=datetime(2025, 1, 2, 21, tzinfo=timezone.utc),
            attendees_count=10,
        )
        c = score_candidate(
            ev, position=4, text_score=0.5, time_fit=0.5,
            w_text=0.5, w_time=0.3, w_pop=0.2, strategy="lexical",
        )
        assert c.event is ev
        assert c.position == 4
        assert c.popularity == pytest.approx(math.log(11))
        assert c.composite == pytest.approx(0.25 + 0.15 + 0.2 * math.log(11))
        assert c.reason == "Strong lexical match; good time fit; 10 attending"
