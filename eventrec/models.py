from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def epoch_seconds(dt: datetime) -> float:
    return as_utc(dt).timestamp()


class Event(BaseModel):
    id: str
    name: str
    tags: list[str] = Field(default_factory=list)
    start_at: datetime
    end_at: datetime
    attendees_count: int = Field(default=0, ge=0)

    # Optional semantic inputs: a stored unit vector, or a similarity the
    # event store already computed against the query vector (recommend_raw).
    embedding: Optional[list[float]] = None
    embed_sim: Optional[float] = None


class AvailabilityWindow(BaseModel):
    start: datetime
    end: datetime

    @property
    def start_s(self) -> float:
        return epoch_seconds(self.start)

    @property
    def end_s(self) -> float:
        return epoch_seconds(self.end)

    @property
    def span_seconds(self) -> float:
        """end - start in seconds, clamped to >= 1."""
        return max(1.0, self.end_s - self.start_s)


class Query(BaseModel):
    window_start: datetime
    window_end: datetime
    terms: list[str] = Field(default_factory=list)
    k: int = 5
    embedding: Optional[list[float]] = None

    @property
    def window(self) -> AvailabilityWindow:
        return AvailabilityWindow(start=self.window_start, end=self.window_end)


class Suggestion(BaseModel):
    id: str
    name: str
    start: datetime
    end: datetime
    tags: list[str]
    attendees_count: int = Field(serialization_alias="attendeesCount")
    score: float
    reason: str

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
