# eventrec/ranking/synonyms.py
"""
Synonym table for lexical query expansion.

Static, read-only configuration: loaded once at process start and passed
into the ranker. Keys are stored in normalize() form, values as cleaned
text that is normalized once at lookup time.

Pairs must be listed in BOTH directions to match symmetrically; the
expander does not infer the reverse edge.
"""
from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from .terms import clean_text, normalize


# ---------------------------------------------------------------------------
# Vocabulary (starter set)
# ---------------------------------------------------------------------------

_DEFAULT_TABLE: dict[str, list[str]] = {
    "movie": ["film", "cinema"],
    "film": ["movie", "cinema"],
    "cinema": ["movie", "film"],
    "board game": ["tabletop"],
    "tabletop": ["board game"],
    "trivia": ["quiz"],
    "quiz": ["trivia"],
    "concert": ["music", "gig"],
    "music": ["concert"],
    "gig": ["concert"],
    "hike": ["hiking", "trail"],
    "hiking": ["hike", "trail"],
    "trail": ["hike", "hiking"],
    "soccer": ["football"],
    "football": ["soccer"],
    "run": ["running", "jog"],
    "running": ["run", "jog"],
    "jog": ["run", "running"],
    "coding": ["programming", "hackathon"],
    "programming": ["coding"],
    "hackathon": ["coding"],
    "meetup": ["social", "mixer"],
    "social": ["meetup", "mixer"],
    "mixer": ["meetup", "social"],
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_synonym_table(raw: Mapping[str, Iterable[str]]) -> Mapping[str, tuple[str, ...]]:
    """
    Normalize keys, clean values and freeze the result.

    Values keep their cleaned text form (no singular rule) so consumers
    normalize them exactly once. Entries whose key normalizes to nothing
    are skipped; values with the same normalized form collapse (first
    occurrence wins, order kept).
    """
    table: dict[str, tuple[str, ...]] = {}
    for key, values in raw.items():
        k = normalize(key)
        if not k:
            continue
        kept: list[str] = list(table.get(k, ()))
        seen = {normalize(v) for v in kept}
        for v in values or ():
            c = clean_text(v)
            n = normalize(c)
            if n and n not in seen:
                seen.add(n)
                kept.append(c)
        table[k] = tuple(kept)
    return MappingProxyType(table)


def load_synonyms(path: str | Path) -> Mapping[str, tuple[str, ...]]:
    """Load a {term: [synonym, ...]} JSON file into a frozen table."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Synonym file {path} must contain a JSON object")
    return build_synonym_table(raw)


DEFAULT_SYNONYMS: Mapping[str, tuple[str, ...]] = build_synonym_table(_DEFAULT_TABLE)
