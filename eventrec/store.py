from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from .models import Event, as_utc
from .ranking.terms import parse_tag_list

logger = logging.getLogger(__name__)

EVENTS_TABLE = "events"
EVENT_COLUMNS = "id,name,start_ts,end_ts,tags,attendees"
CANDIDATE_RPC = "recommend_raw"
DEFAULT_CANDIDATE_LIMIT = 200


# -----------------------------------------------------------------------------
# Small utilities
# -----------------------------------------------------------------------------

def _dt_iso(dt: datetime) -> str:
    return as_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat()


def _attendee_count(attendees: Any) -> int:
    """Length of the attendee list; NULL / missing → 0."""
    if not attendees:
        return 0
    if isinstance(attendees, (list, tuple)):
        return len(attendees)
    return 0


def event_from_row(row: Mapping[str, Any]) -> Optional[Event]:
    """
    Map an `events` row (or recommend_raw row) to an Event.

    Malformed rows are skipped (None) rather than failing the whole batch.
    """
    try:
        return Event(
            id=str(row["id"]),
            name=row.get("name") or "",
            tags=list(row.get("tags") or []),
            start_at=row["start_ts"],
            end_at=row["end_ts"],
            attendees_count=_attendee_count(row.get("attendees")),
            embed_sim=row.get("embed_sim"),
        )
    except (KeyError, TypeError, ValidationError) as e:
        logger.info("[store] SKIP malformed row id=%r: %s", row.get("id"), e)
        return None


def events_from_rows(rows: Sequence[Mapping[str, Any]]) -> list[Event]:
    out: list[Event] = []
    for row in rows:
        ev = event_from_row(row)
        if ev is not None:
            out.append(ev)
    return out


# -----------------------------------------------------------------------------
# Candidate retrieval
# -----------------------------------------------------------------------------

def fetch_candidates(
    supabase: Any,
    window_start: datetime,
    window_end: datetime,
    query_vector: Optional[Sequence[float]] = None,
    *,
    limit: int = DEFAULT_CANDIDATE_LIMIT,
) -> list[Event]:
    """
    Windowed candidate query against the event store.

    With a query vector → RPC recommend_raw(p_a_start, p_a_end, p_qvec);
    rows come back with `embed_sim` already computed.
    Without → plain select of events overlapping the window
    (start_ts < window_end AND end_ts > window_start), earliest first.

    The store may return more than needed; ranking/filtering is the
    pipeline's job. Errors propagate to the caller.
    """
    a_start = _dt_iso(window_start)
    a_end = _dt_iso(window_end)

    if query_vector is not None:
        resp = supabase.rpc(
            CANDIDATE_RPC,
            {"p_a_start": a_start, "p_a_end": a_end, "p_qvec": [float(x) for x in query_vector]},
        ).execute()
    else:
        resp = (
            supabase.table(EVENTS_TABLE)
            .select(EVENT_COLUMNS)
            .lt("start_ts", a_end)
            .gt("end_ts", a_start)
            .order("start_ts")
            .limit(limit)
            .execute()
        )

    rows = resp.data or []
    events = events_from_rows(rows)
    logger.info(
        "[store] candidates rows=%d events=%d via=%s",
        len(rows), len(events), CANDIDATE_RPC if query_vector is not None else EVENTS_TABLE,
    )
    return events


# -----------------------------------------------------------------------------
# Event creation (admin)
# -----------------------------------------------------------------------------

def build_event_row(
    name: str,
    tags: Sequence[str] | str,
    start: datetime,
    end: datetime,
) -> dict[str, Any]:
    """
    Validated insert payload for `events`.

    Raises ValueError if name is blank or end is not after start.
    Tags may be a list or comma-separated text; both are trimmed and
    lower-cased.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Name required")
    if as_utc(end) <= as_utc(start):
        raise ValueError("End must be after start")

    if isinstance(tags, str):
        tag_list = parse_tag_list(tags)
    else:
        tag_list = parse_tag_list(",".join(tags))

    return {
        "name": name,
        "tags": tag_list,
        "start_ts": _dt_iso(start),
        "end_ts": _dt_iso(end),
    }


def create_event(
    supabase: Any,
    name: str,
    tags: Sequence[str] | str,
    start: datetime,
    end: datetime,
) -> dict[str, Any]:
    row = build_event_row(name, tags, start, end)
    resp = supabase.table(EVENTS_TABLE).insert(row).execute()
    data = resp.data or []
    created = data[0] if data else row
    logger.info("[store] INSERT event name=%r id=%s", row["name"], created.get("id"))
    return created
