# socialise/listing.py
"""
Read-side listings: fetch primary rows, then hand them to the enrichment
pipeline. Filters mirror the public list endpoints; no writes happen here.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from socialise.db.supabase_client import execute_with_retry
from socialise.enrich.communities import enrich_communities
from socialise.enrich.events import enrich_events
from socialise.enrich.feed import enrich_posts

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
SIZE_MICRO = "micro"
SIZE_LARGE = "large"
ALL_CATEGORIES = "All"


class ListingError(RuntimeError):
    """The primary query for a listing failed."""


def fetch_rows(what: str, rb) -> list[dict[str, Any]]:
    try:
        resp = execute_with_retry(rb)
    except (APIError, httpx.HTTPError) as e:
        logger.error("[listing] %s query FAILED: %r", what, e)
        raise ListingError(f"Failed to fetch {what}") from e
    return list(getattr(resp, "data", None) or [])


def _page(rb, limit: int, offset: int):
    return rb.range(offset, offset + limit - 1)


def list_events(
    supabase: Client,
    *,
    user_id: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    size: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """Active events, newest first, enriched for *user_id*."""
    rb = (
        supabase.table("events")
        .select("*")
        .eq("status", STATUS_ACTIVE)
        .order("created_at", desc=True)
    )
    if category and category != ALL_CATEGORIES:
        rb = rb.eq("category", category)
    if search:
        rb = rb.ilike("title", f"%{search}%")
    if size == SIZE_MICRO:
        rb = rb.eq("is_micro_meet", True)
    elif size == SIZE_LARGE:
        rb = rb.eq("is_micro_meet", False)

    rows = fetch_rows("events", _page(rb, limit, offset))
    return enrich_events(supabase, rows, user_id)


def get_event(
    supabase: Client, event_id: str, *, user_id: Optional[str] = None
) -> Optional[dict[str, Any]]:
    """A single enriched event, or None when it does not exist."""
    rb = supabase.table("events").select("*").eq("id", event_id).limit(1)
    rows = fetch_rows("event", rb)
    if not rows:
        return None
    return enrich_events(supabase, rows[:1], user_id)[0]


def list_feed(
    supabase: Client,
    *,
    user_id: Optional[str] = None,
    community_id: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> list[dict[str, Any]]:
    rb = supabase.table("feed_posts").select("*").order("created_at", desc=True)
    if community_id:
        rb = rb.eq("community_id", community_id)
    rows = fetch_rows("feed", _page(rb, limit, offset))
    return enrich_posts(supabase, rows, user_id)


def list_communities(
    supabase: Client,
    *,
    user_id: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 30,
    offset: int = 0,
) -> list[dict[str, Any]]:
    rb = supabase.table("communities").select("*").order("member_count", desc=True)
    if category:
        rb = rb.eq("category", category)
    if search:
        rb = rb.ilike("name", f"%{search}%")
    rows = fetch_rows("communities", _page(rb, limit, offset))
    return enrich_communities(supabase, rows, user_id)
