#!/usr/bin/env python3
# scripts/add_event.py
"""
Admin helper: add one event to the `events` table.

Dry run by default — validates and prints the row that would be
inserted. Pass --write to insert.

Usage:
  python -m scripts.add_event --name "Catan Night" --tags "board game, social" \
      --start 2025-01-02T19:00:00Z --end 2025-01-02T21:00:00Z [--write]
"""
from __future__ import annotations

import argparse
from typing import Optional

from scripts.suggest_cli import _parse_dt


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Add an event (dry run unless --write).")
    parser.add_argument("--name", required=True, help="Event name.")
    parser.add_argument("--tags", default="", help="Tags, comma-separated.")
    parser.add_argument("--start", required=True, type=_parse_dt, help="Start (ISO).")
    parser.add_argument("--end", required=True, type=_parse_dt, help="End (ISO).")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Insert into the DB. Default is dry-run.",
    )
    args = parser.parse_args(argv)

    from eventrec.store import build_event_row, create_event

    try:
        row = build_event_row(args.name, args.tags, args.start, args.end)
    except ValueError as e:
        print(f"[add_event] INVALID {e}")
        return 2

    if not args.write:
        print(f"[DRY_RUN] INSERT events: {row}")
        return 0

    from eventrec.db.supabase_client import get_supabase_client

    try:
        created = create_event(get_supabase_client(), args.name, args.tags, args.start, args.end)
    except Exception as e:
        print(f"[add_event] INSERT_ERROR {type(e).__name__}: {e}")
        return 1

    print(f"[add_event] saved id={created.get('id')} name={created.get('name')!r}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
