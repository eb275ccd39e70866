# eventrec/ranking/terms.py
"""
Term normalization, tokenization and synonym expansion.

Pure utility — deterministic, no DB access, no side effects.

normalize() rules (applied in order):
  1. lower-case
  2. drop every character outside [a-z0-9 ]
  3. collapse + trim whitespace; empty → None (caller drops it)
  4. naive singular: strip ONE trailing 's' if what remains is longer
     than 3 chars ("movies" → "movie", "games" → "game", "bus" stays,
     "class" → "clas"). Not linguistics, just cheap recall.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional

_DISALLOWED_RE = re.compile(r"[^a-z0-9 ]")
_WS_RE = re.compile(r"\s+")


def clean_text(text: Optional[str]) -> str:
    if not text:
        return ""
    s = _WS_RE.sub(" ", text.lower())
    s = _DISALLOWED_RE.sub("", s)
    return _WS_RE.sub(" ", s).strip()


def normalize(token: Optional[str]) -> Optional[str]:
    """Canonical form of a tag / term, or None when nothing survives cleaning."""
    s = clean_text(token)
    if not s:
        return None
    if s.endswith("s") and len(s) - 1 > 3:
        s = s[:-1]
    return s


def tokenize(text: Optional[str]) -> list[str]:
    """Split free text into normalized word tokens (order kept, dupes kept)."""
    out: list[str] = []
    for word in clean_text(text).split(" "):
        tok = normalize(word)
        if tok:
            out.append(tok)
    return out


def expand(tokens: Iterable[str], synonyms: Mapping[str, Iterable[str]]) -> set[str]:
    """
    Token set plus the synonyms of every token that is a table key.

    `tokens` are already normalized; synonym values are raw or cleaned
    text and get normalized here, once. The table is NOT symmetrised:
    "movie" → "film" does not imply "film" → "movie".
    """
    out: set[str] = set()
    for tok in tokens:
        if not tok:
            continue
        out.add(tok)
        for alt in synonyms.get(tok, ()):
            n = normalize(alt)
            if n:
                out.add(n)
    return out


def query_token_set(
    terms: Iterable[str],
    synonyms: Mapping[str, Iterable[str]],
) -> frozenset[str]:
    """
    Expanded word-token set for a list of raw interest terms.

    Both the whole phrase ("board game") and its words ("board", "game")
    are looked up in the synonym table. Word tokens always come from
    tokenize() on the raw term or raw synonym text, the same single pass
    event text gets, so "fitness" matches "fitness".
    """
    terms = [t for t in terms if t]
    words = [w for t in terms for w in tokenize(t)]
    keys = [p for p in (normalize(t) for t in terms) if p] + words

    out: set[str] = set(words)
    for key in keys:
        for alt in synonyms.get(key, ()):
            out.update(tokenize(alt))
    return frozenset(out)


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B| in [0, 1]. Two empty sets → 0.0 (never NaN)."""
    sa = set(a)
    sb = set(b)
    union = sa | sb
    if not union:
        return 0.0
    return len(sa & sb) / len(union)


def normalized_tag_set(tags: Iterable[str] | None) -> frozenset[str]:
    """Raw event tags → set of normalized tags (tag phrases stay whole)."""
    return frozenset(n for n in (normalize(t) for t in (tags or [])) if n)


def parse_tag_list(text: Optional[str]) -> list[str]:
    """
    Comma-separated user input → trimmed, lower-cased, non-empty tags.

    "Board Game,  volleyball ," → ["board game", "volleyball"]
    """
    if not text:
        return []
    return [s.strip().lower() for s in text.split(",") if s.strip()]
