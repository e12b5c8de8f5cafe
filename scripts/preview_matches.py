#!/usr/bin/env python3
# scripts/preview_matches.py
"""
Preview how active micro-meets rank for one user.

Read-only: loads the user's profile and the active micro-meets, scores them
with the production scorer and prints the ranking with tags.

Usage:
  python -m scripts.preview_matches --user-id <uuid>
  python -m scripts.preview_matches --user-id <uuid> --all --limit 200
"""
from __future__ import annotations

import argparse
import logging
from typing import Any, Optional


def preview(
    supabase: Any, user_id: str, *, limit: int = 100, include_all: bool = False
) -> Optional[list[dict[str, Any]]]:
    """
    Ranked micro-meets for *user_id*, or None if the user does not exist.

    include_all=True also returns micro-meets below the recommendation
    threshold (ranked by score, unfiltered).
    """
    from socialise.db.relations import fetch_user_profile
    from socialise.listing import fetch_rows
    from socialise.matching.aggregate import attach_matches, matched_micro_meets
    from socialise.models import UserProfile

    row = fetch_user_profile(supabase, user_id)
    if row is None:
        return None
    profile = UserProfile.from_row(row)

    rb = (
        supabase.table("events")
        .select("*")
        .eq("status", "active")
        .eq("is_micro_meet", True)
        .order("date", desc=False)
        .limit(limit)
    )
    events = fetch_rows("micro-meets", rb)

    if include_all:
        scored = attach_matches(events, profile)
        return sorted(scored, key=lambda e: e.get("matchScore", 0), reverse=True)
    return matched_micro_meets(profile, events)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Preview micro-meet matches for a user (read-only).")
    parser.add_argument("--user-id", required=True, help="users.id to score against.")
    parser.add_argument("--limit", type=int, default=100, help="Max micro-meets to load (default 100).")
    parser.add_argument(
        "--all",
        action="store_true",
        help="Include micro-meets below the recommendation threshold.",
    )
    args = parser.parse_args(argv)

    from socialise.config import LOG_LEVEL, require_supabase_env
    from socialise.db.supabase_client import get_supabase

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")
    require_supabase_env()
    supabase = get_supabase()

    ranked = preview(supabase, args.user_id, limit=args.limit, include_all=args.all)
    if ranked is None:
        print(f"[preview_matches] unknown user_id={args.user_id}")
        return 2

    print(f"\n=== micro-meet matches for {args.user_id} ===")
    if not ranked:
        print("(no matches)")
    for ev in ranked:
        tags = " | ".join(ev.get("matchTags") or [])
        print(f"{ev.get('matchScore', 0):>3}  {ev.get('date') or '----------'}  {ev.get('title')!r}  [{tags}]")
    print(f"\ntotal: {len(ranked)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
