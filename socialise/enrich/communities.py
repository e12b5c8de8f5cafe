# socialise/enrich/communities.py
"""Community view models: actor membership flag and member count alias."""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from supabase import Client

from socialise.db.relations import fetch_actor_community_ids


def enrich_communities(
    supabase: Client,
    communities: Sequence[Mapping[str, Any]],
    user_id: Optional[str],
) -> list[dict[str, Any]]:
    """
    Attach `isJoined` (one membership query for the batch, none without an
    acting user) and `members` (the denormalised member_count).
    """
    if not communities:
        return []

    joined: set[str] = set()
    if user_id:
        joined = fetch_actor_community_ids(
            supabase, [c["id"] for c in communities], user_id
        )

    return [
        {
            **c,
            "isJoined": c.get("id") in joined,
            "members": c.get("member_count") or 0,
        }
        for c in communities
    ]
