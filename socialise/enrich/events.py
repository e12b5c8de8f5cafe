# socialise/enrich/events.py
"""
Event view models: attendee counts, actor RSVP/save flags and, for
micro-meets, the actor's compatibility score.

Two-phase batching:
  1) collect every event id in the batch
  2) one query per relation (RSVPs, actor RSVPs, actor saves) plus one
     profile lookup — at most 4 store calls, whatever the batch size
  3) fold into in-memory maps, then a single synchronous merge pass

Without an acting user the actor-specific queries are skipped entirely and
the flags default to False. Any failed lookup fails the whole call.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from supabase import Client

from socialise.db.relations import (
    fetch_actor_rsvp_event_ids,
    fetch_actor_saved_event_ids,
    fetch_rsvp_rows,
    fetch_user_profile,
)
from socialise.matching.aggregate import attach_matches
from socialise.models import UserProfile

logger = logging.getLogger(__name__)


def _event_view(
    row: Mapping[str, Any],
    attendees: Counter,
    joined: set[str],
    saved: set[str],
) -> dict[str, Any]:
    event_id = row.get("id")
    return {
        **row,
        "attendees": attendees.get(event_id, 0),
        "spots": row.get("max_spots"),
        "image": row.get("image_url"),
        "host": row.get("host_name"),
        "isJoined": event_id in joined,
        "isSaved": event_id in saved,
    }


def resolve_profile(supabase: Client, user_id: Optional[str]) -> Optional[UserProfile]:
    """Load the acting user's scoring profile once per request."""
    if not user_id:
        return None
    row = fetch_user_profile(supabase, user_id)
    if row is None:
        logger.info("[enrich_events] no profile for user_id=%s, skipping matches", user_id)
        return None
    return UserProfile.from_row(row)


def enrich_events(
    supabase: Client,
    events: Sequence[Mapping[str, Any]],
    user_id: Optional[str],
    *,
    today: date | None = None,
) -> list[dict[str, Any]]:
    if not events:
        return []

    event_ids = [e["id"] for e in events]

    rsvps = fetch_rsvp_rows(supabase, event_ids)
    if user_id:
        joined = fetch_actor_rsvp_event_ids(supabase, event_ids, user_id)
        saved = fetch_actor_saved_event_ids(supabase, event_ids, user_id)
    else:
        joined, saved = set(), set()
    profile = resolve_profile(supabase, user_id)

    attendees = Counter(r.get("event_id") for r in rsvps)

    enriched = [_event_view(e, attendees, joined, saved) for e in events]

    logger.debug(
        "[enrich_events] events=%d rsvps=%d joined=%d saved=%d profile=%s",
        len(enriched), len(rsvps), len(joined), len(saved), profile is not None,
    )

    if profile is not None:
        enriched = attach_matches(enriched, profile, today=today)
    return enriched
