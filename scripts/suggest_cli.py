#!/usr/bin/env python3
# scripts/suggest_cli.py
"""
Get event suggestions for an availability window + interests.

Candidates come from Supabase by default, or from a local JSON file of
`events` rows (--events-json) for offline runs.

Usage:
  python -m scripts.suggest_cli \
      --start 2025-01-02T18:00:00Z --end 2025-01-02T22:00:00Z \
      --tags "board game, volleyball" -k 5

  # Semantic strategy (query vector sent to recommend_raw)
  python -m scripts.suggest_cli --start ... --end ... --tags ... --strategy semantic

Exit codes: 0 ok / no overlap, 1 upstream failure, 2 invalid query or config.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError


def _parse_dt(value: str) -> datetime:
    try:
        return TypeAdapter(datetime).validate_python(value)
    except ValidationError:
        raise argparse.ArgumentTypeError(f"not an ISO timestamp: {value!r}") from None


def _load_rows(path: str) -> list[dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("events") or []
    return list(data)


def _print_result(result: Any) -> None:
    print(f"\n=== suggestions ({result.status}) ===")
    if result.reasons:
        print(f"reasons: {', '.join(result.reasons)}")
    for i, s in enumerate(result.suggestions, 1):
        print(f"{i}. {s.name}  [{s.score:.3f}]")
        print(f"   {s.start.isoformat()} → {s.end.isoformat()}")
        print(f"   tags: {', '.join(s.tags)} | attendees: {s.attendees_count}")
        print(f"   {s.reason}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Suggest events for a free-time window.")
    parser.add_argument("--start", required=True, type=_parse_dt, help="Availability start (ISO).")
    parser.add_argument("--end", required=True, type=_parse_dt, help="Availability end (ISO).")
    parser.add_argument("--tags", required=True, help="Interests, comma-separated.")
    parser.add_argument("-k", type=int, default=5, help="Number of suggestions (default 5).")
    parser.add_argument("--strategy", choices=["lexical", "semantic"], default=None,
                        help="Override RANK_STRATEGY (RANK_W_* still apply).")
    parser.add_argument("--time-fit-policy", choices=["containment", "overlap"], default=None,
                        help="Override RANK_TIME_FIT_POLICY.")
    parser.add_argument("--events-json", default=None,
                        help="Read candidate rows from a JSON file instead of Supabase.")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON payload.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details.")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    # Import here so --help works without the runtime deps configured
    from eventrec import config as app_config
    from eventrec.embeddings import HashingEmbedder, query_text
    from eventrec.models import Query
    from eventrec.ranking.pipeline import STATUS_INVALID_QUERY, rank
    from eventrec.ranking.synonyms import DEFAULT_SYNONYMS, load_synonyms
    from eventrec.ranking.terms import parse_tag_list
    from eventrec.store import events_from_rows, fetch_candidates

    # Flags override RANK_* but keep any other RANK_* values (weights included)
    env = dict(os.environ)
    if args.strategy:
        env["RANK_STRATEGY"] = args.strategy
    if args.time_fit_policy:
        env["RANK_TIME_FIT_POLICY"] = args.time_fit_policy

    try:
        cfg = app_config.load_ranking_config(env)
        if app_config.SYNONYMS_PATH:
            synonyms = load_synonyms(app_config.SYNONYMS_PATH)
        else:
            synonyms = DEFAULT_SYNONYMS
    except (OSError, ValueError) as e:
        print(f"[suggest] CONFIG_ERROR {e}")
        return 2

    embedder = HashingEmbedder(app_config.EMBEDDING_DIM)

    terms = parse_tag_list(args.tags)
    query = Query(window_start=args.start, window_end=args.end, terms=terms, k=args.k)
    if cfg.strategy == "semantic" and terms:
        query = query.model_copy(update={"embedding": embedder(query_text(terms)).tolist()})

    print(f"[suggest] strategy={cfg.strategy} policy={cfg.time_fit_policy} k={args.k} terms={terms}")

    try:
        if args.events_json:
            candidates = events_from_rows(_load_rows(args.events_json))
        else:
            from eventrec.db.supabase_client import get_supabase_client

            supabase = get_supabase_client()
            candidates = fetch_candidates(supabase, args.start, args.end, query.embedding)
    except Exception as e:
        print(f"[suggest] UPSTREAM_ERROR {type(e).__name__}: {e}")
        return 1

    print(f"[suggest] candidates={len(candidates)}")

    result = rank(query, candidates, cfg, synonyms=synonyms, embedder=embedder)

    if args.json:
        print(json.dumps(result.to_payload(), indent=2))
    else:
        _print_result(result)

    return 2 if result.status == STATUS_INVALID_QUERY else 0


if __name__ == "__main__":
    raise SystemExit(main())
