# socialise/db/relations.py
"""
Batched relation lookups used by the enrichment pipeline.

Every helper issues exactly ONE query keyed by the full id set
(`... WHERE <fk> IN (...)`), never one query per primary record.

Failures are not swallowed: any PostgREST or transport error becomes a
RelationLookupError so the caller can fail the whole enrichment instead of
returning records with silently missing fields.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from socialise.db.supabase_client import execute_with_retry

logger = logging.getLogger(__name__)

RSVPS_TABLE = "event_rsvps"
SAVED_EVENTS_TABLE = "saved_events"
REACTIONS_TABLE = "post_reactions"
MEMBERS_TABLE = "community_members"
USERS_TABLE = "users"

PROFILE_COLUMNS = "id,location,interests,is_pro"


class RelationLookupError(RuntimeError):
    """A batched relation lookup failed; enrichment for the batch is void."""

    def __init__(self, relation: str, cause: Exception) -> None:
        super().__init__(f"{relation} lookup failed: {type(cause).__name__}: {cause}")
        self.relation = relation


def _rows(relation: str, rb) -> list[dict[str, Any]]:
    try:
        resp = execute_with_retry(rb)
    except (APIError, httpx.HTTPError) as e:
        logger.error("[relations] %s lookup FAILED: %r", relation, e)
        raise RelationLookupError(relation, e) from e
    return list(getattr(resp, "data", None) or [])


def fetch_rsvp_rows(supabase: Client, event_ids: Sequence[str]) -> list[dict[str, Any]]:
    """All RSVP rows (event_id only) for the batch."""
    rb = supabase.table(RSVPS_TABLE).select("event_id").in_("event_id", list(event_ids))
    return _rows(RSVPS_TABLE, rb)


def fetch_actor_rsvp_event_ids(
    supabase: Client, event_ids: Sequence[str], user_id: str
) -> set[str]:
    rb = (
        supabase.table(RSVPS_TABLE)
        .select("event_id")
        .in_("event_id", list(event_ids))
        .eq("user_id", user_id)
    )
    return {r["event_id"] for r in _rows(RSVPS_TABLE, rb) if r.get("event_id") is not None}


def fetch_actor_saved_event_ids(
    supabase: Client, event_ids: Sequence[str], user_id: str
) -> set[str]:
    rb = (
        supabase.table(SAVED_EVENTS_TABLE)
        .select("event_id")
        .in_("event_id", list(event_ids))
        .eq("user_id", user_id)
    )
    return {r["event_id"] for r in _rows(SAVED_EVENTS_TABLE, rb) if r.get("event_id") is not None}


def fetch_reaction_rows(supabase: Client, post_ids: Sequence[str]) -> list[dict[str, Any]]:
    """Every reaction on the batch; grouping happens client-side."""
    rb = (
        supabase.table(REACTIONS_TABLE)
        .select("post_id,emoji,user_id")
        .in_("post_id", list(post_ids))
    )
    return _rows(REACTIONS_TABLE, rb)


def fetch_actor_community_ids(
    supabase: Client, community_ids: Sequence[str], user_id: str
) -> set[str]:
    rb = (
        supabase.table(MEMBERS_TABLE)
        .select("community_id")
        .in_("community_id", list(community_ids))
        .eq("user_id", user_id)
    )
    return {
        r["community_id"] for r in _rows(MEMBERS_TABLE, rb)
        if r.get("community_id") is not None
    }


def fetch_user_profile(supabase: Client, user_id: str) -> Optional[dict[str, Any]]:
    """The actor's `users` row (scoring columns only), or None if unknown."""
    rb = supabase.table(USERS_TABLE).select(PROFILE_COLUMNS).eq("id", user_id).limit(1)
    rows = _rows(USERS_TABLE, rb)
    return rows[0] if rows else None
