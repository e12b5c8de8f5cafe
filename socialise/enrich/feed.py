# socialise/enrich/feed.py
"""
Feed post view models: per-emoji reaction counts and the actor's own reactions.

Reaction rows without a usable emoji (missing, blank or non-string) are
skipped: they cannot be a key of the `reactions` mapping and the react
route never writes them.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Mapping, Optional, Sequence

from supabase import Client

from socialise.db.relations import fetch_reaction_rows

logger = logging.getLogger(__name__)


def enrich_posts(
    supabase: Client,
    posts: Sequence[Mapping[str, Any]],
    user_id: Optional[str],
) -> list[dict[str, Any]]:
    """
    One `post_reactions` query for the whole batch, grouped client-side.

    Every post gets a `reactions` mapping (empty when nobody reacted) and a
    `myReactions` list (empty without an acting user).
    """
    if not posts:
        return []

    post_ids = [p["id"] for p in posts]
    rows = fetch_reaction_rows(supabase, post_ids)

    counts: dict[Any, dict[str, int]] = defaultdict(dict)
    # dict-as-ordered-set: first reaction order is kept
    mine: dict[Any, dict[str, None]] = defaultdict(dict)

    for r in rows:
        emoji = r.get("emoji")
        if not isinstance(emoji, str) or not emoji:
            continue
        post_id = r.get("post_id")
        counts[post_id][emoji] = counts[post_id].get(emoji, 0) + 1
        if user_id and r.get("user_id") == user_id:
            mine[post_id][emoji] = None

    logger.debug("[enrich_posts] posts=%d reactions=%d", len(posts), len(rows))

    return [
        {
            **p,
            "reactions": dict(counts.get(p["id"], {})),
            "myReactions": list(mine.get(p["id"], {})) if user_id else [],
        }
        for p in posts
    ]
