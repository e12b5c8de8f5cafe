from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MAX_SPOTS = 6


def parse_event_date(value: Any) -> Optional[dt.date]:
    """ISO date (or datetime) string -> date. Anything unparsable -> None."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    try:
        return dt.date.fromisoformat(s[:10])
    except ValueError:
        return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(f):
        return None
    return f


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


class UserProfile(BaseModel):
    id: str
    location: Optional[str] = None
    interests: list[str] = Field(default_factory=list)
    is_pro: bool = False

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v: Any) -> Optional[str]:
        return _as_text(v)

    @field_validator("interests", mode="before")
    @classmethod
    def _interests(cls, v: Any) -> list[str]:
        if not isinstance(v, (list, tuple)):
            return []
        return [s.strip() for s in v if isinstance(s, str) and s.strip()]

    @field_validator("is_pro", mode="before")
    @classmethod
    def _is_pro(cls, v: Any) -> bool:
        return v is True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserProfile":
        """Build from a `users` row (snake_case) or a public user shape (isPro)."""
        is_pro = row.get("is_pro")
        if is_pro is None:
            is_pro = row.get("isPro")
        return cls(
            id=str(row.get("id") or ""),
            location=row.get("location"),
            interests=row.get("interests"),
            is_pro=is_pro,
        )


class CandidateEvent(BaseModel):
    """
    Scoring view of an `events` row.

    Every field is optional/untrusted: bad values degrade to None (or the
    default) so that the scorer can simply skip the affected component.
    """

    id: str = ""
    category: Optional[str] = None
    location: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    date: Optional[dt.date] = None
    price: Optional[float] = None
    max_spots: int = DEFAULT_MAX_SPOTS
    is_micro_meet: bool = False

    @field_validator("category", "location", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return _as_text(v)

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coordinate(cls, v: Any) -> Optional[float]:
        return _as_float(v)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[dt.date]:
        return parse_event_date(v)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Optional[float]:
        f = _as_float(v)
        if f is None or f < 0:
            return None
        return f

    @field_validator("max_spots", mode="before")
    @classmethod
    def _max_spots(cls, v: Any) -> int:
        f = _as_float(v)
        if f is None or f <= 0:
            return DEFAULT_MAX_SPOTS
        return int(f)

    @field_validator("is_micro_meet", mode="before")
    @classmethod
    def _is_micro_meet(cls, v: Any) -> bool:
        return v is True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CandidateEvent":
        return cls(
            id=str(row.get("id") or ""),
            category=row.get("category"),
            location=row.get("location"),
            lat=row.get("lat"),
            lng=row.get("lng"),
            date=row.get("date"),
            price=row.get("price"),
            max_spots=row.get("max_spots"),
            is_micro_meet=row.get("is_micro_meet"),
        )


@dataclass(frozen=True)
class MatchResult:
    score: int
    tags: tuple[str, ...] = ()

    def as_fields(self) -> dict[str, Any]:
        """Transport keys attached to a micro-meet record."""
        return {"matchScore": self.score, "matchTags": list(self.tags)}
