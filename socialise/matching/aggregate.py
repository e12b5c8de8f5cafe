# socialise/matching/aggregate.py
"""
Apply the compatibility scorer across a list of event rows.

Rows are plain dicts as returned by the store (or already enriched view
models). Match data is attached as `matchScore` / `matchTags`; rows that are
not micro-meets never receive those keys.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from socialise.matching.scoring import calculate_match_score
from socialise.models import CandidateEvent, UserProfile

MIN_MATCH_SCORE = 30


def _is_micro_meet(row: Mapping[str, Any]) -> bool:
    return row.get("is_micro_meet") is True


def _with_match(
    row: Mapping[str, Any], user: UserProfile, today: Optional[date]
) -> dict[str, Any]:
    result = calculate_match_score(user, CandidateEvent.from_row(row), today=today)
    return {**row, **result.as_fields()}


def matched_micro_meets(
    user: UserProfile,
    events: Sequence[Mapping[str, Any]],
    *,
    today: date | None = None,
) -> list[dict[str, Any]]:
    """
    Micro-meets worth recommending to *user*, best first.

    Drops regular events and anything scoring below MIN_MATCH_SCORE.
    Equal scores keep their input order.
    """
    scored = [_with_match(row, user, today) for row in events if _is_micro_meet(row)]
    kept = [row for row in scored if row["matchScore"] >= MIN_MATCH_SCORE]
    return sorted(kept, key=lambda row: row["matchScore"], reverse=True)


def attach_matches(
    events: list[dict[str, Any]],
    user: Optional[UserProfile],
    *,
    today: date | None = None,
) -> list[dict[str, Any]]:
    """
    Attach matchScore/matchTags to every micro-meet, keeping list order.

    No user -> the very same list object, untouched. Regular events are passed
    through as the same objects, with no match keys at all.
    """
    if user is None:
        return events
    return [
        _with_match(row, user, today) if _is_micro_meet(row) else row
        for row in events
    ]
