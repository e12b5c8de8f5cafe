# socialise/matching/scoring.py
"""
Micro-meet compatibility score (v1).

Pure utility — deterministic given `today`, no DB access, no side effects.

Formula (each component capped, total clamped to [0, 100], rounded half-up):

  interests   <= 40   15 per matched interest; +5 if interests exist but none match
  location    <= 30   location_similarity * 30 (needs both locations + lat/lng)
  group size  <= 15   max_spots <= 8: 15 with an intimacy interest, else 8
  price       <= 15   free +10 | <= 20 +8 | pro user on a pricier event +12
  timing      <=  5   event date within [today, today + 7 days]

Tags are collected in component order, the first two are kept, and
"Check it out" is used when no component produced one.

Regular (non micro-meet) events always score 0 with no tags.

Weights are fixed; nothing here learns from feedback.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from socialise.config import TZ
from socialise.matching.location import location_similarity
from socialise.models import CandidateEvent, MatchResult, UserProfile


# ---------------------------------------------------------------------------
# Scoring tables (v1)
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "Food & Drinks": ("Food", "Cooking", "Wine", "Dining"),
    "Outdoors": ("Nature", "Hiking", "Fitness", "Sports"),
    "Tech": ("Tech", "Programming", "Innovation", "AI"),
    "Arts": ("Art", "Design", "Music", "Creative"),
    "Games": ("Games", "Gaming", "Strategy", "Fun"),
    "Entertainment": ("Music", "Entertainment", "Nightlife", "Party"),
    "Nightlife": ("Music", "Nightlife", "Party", "Entertainment"),
    "Networking": ("Tech", "Business", "Entrepreneurship", "Networking"),
})

INTIMACY_KEYWORDS: tuple[str, ...] = ("Intimate", "Community", "Connection", "Deep")

INTEREST_CAP = 40
INTEREST_PER_MATCH = 15
INTEREST_EXPLORER_BONUS = 5

LOCATION_CAP = 30
NEAR_THRESHOLD = 0.7
AREA_THRESHOLD = 0.3

SMALL_GROUP_MAX_SPOTS = 8
INTIMACY_BONUS = 15
SMALL_GROUP_BONUS = 8

FREE_BONUS = 10
GOOD_VALUE_MAX_PRICE = 20
GOOD_VALUE_BONUS = 8
PRO_PREMIUM_BONUS = 12

SOON_WINDOW_DAYS = 7
SOON_BONUS = 5

MAX_TAGS = 2

TAG_EXPLORE = "Could expand your horizons"
TAG_NEAR = "Near you"
TAG_AREA = "In your area"
TAG_MEANINGFUL = "Perfect for meaningful connections"
TAG_FREE = "Free event"
TAG_VALUE = "Great value"
TAG_SOON = "Coming up soon"
TAG_FALLBACK = "Check it out"


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def local_today() -> date:
    """Calendar date in the configured TIMEZONE."""
    return datetime.now(TZ).date()


def _keywords_for(category: Optional[str]) -> tuple[str, ...]:
    if not category:
        return ()
    return CATEGORY_KEYWORDS.get(category, (category,))


def _overlaps(interest: str, keyword: str) -> bool:
    """Case-insensitive containment in either direction."""
    i = interest.lower()
    k = keyword.lower()
    return k in i or i in k


def _interest_component(
    user: UserProfile, event: CandidateEvent, tags: list[str]
) -> float:
    keywords = _keywords_for(event.category)
    matches = [
        interest for interest in user.interests
        if any(_overlaps(interest, kw) for kw in keywords)
    ]

    if matches:
        tags.append(f"Matches your {' & '.join(matches[:2])} interests")
        return min(INTEREST_CAP, len(matches) * INTEREST_PER_MATCH)

    if user.interests:
        tags.append(TAG_EXPLORE)
        return INTEREST_EXPLORER_BONUS
    return 0


def _location_component(
    user: UserProfile, event: CandidateEvent, tags: list[str]
) -> float:
    if not (user.location and event.location):
        return 0
    if event.lat is None or event.lng is None:
        return 0

    similarity = location_similarity(user.location, event.location)
    if similarity > NEAR_THRESHOLD:
        tags.append(TAG_NEAR)
    elif similarity > AREA_THRESHOLD:
        tags.append(TAG_AREA)
    return min(LOCATION_CAP, similarity * LOCATION_CAP)


def _group_size_component(
    user: UserProfile, event: CandidateEvent, tags: list[str]
) -> float:
    if event.max_spots > SMALL_GROUP_MAX_SPOTS:
        return 0

    wants_intimacy = any(
        kw.lower() in interest.lower()
        for interest in user.interests
        for kw in INTIMACY_KEYWORDS
    )
    if wants_intimacy:
        tags.append(TAG_MEANINGFUL)
        return INTIMACY_BONUS
    return SMALL_GROUP_BONUS


def _price_component(
    user: UserProfile, event: CandidateEvent, tags: list[str]
) -> float:
    if event.price is None:
        return 0
    if event.price == 0:
        tags.append(TAG_FREE)
        return FREE_BONUS
    if event.price <= GOOD_VALUE_MAX_PRICE:
        tags.append(TAG_VALUE)
        return GOOD_VALUE_BONUS
    if user.is_pro:
        return PRO_PREMIUM_BONUS
    return 0


def _timing_component(event: CandidateEvent, today: date, tags: list[str]) -> float:
    if event.date is None:
        return 0
    if today <= event.date <= today + timedelta(days=SOON_WINDOW_DAYS):
        tags.append(TAG_SOON)
        return SOON_BONUS
    return 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_match_score(
    user: UserProfile,
    event: CandidateEvent,
    *,
    today: date | None = None,
) -> MatchResult:
    """
    Compatibility between *user* and a candidate micro-meet.

    Returns MatchResult(score 0–100, 1–2 tags) for micro-meets and
    MatchResult(0, ()) for regular events. Never raises on missing data.
    """
    if not event.is_micro_meet:
        return MatchResult(score=0, tags=())

    if today is None:
        today = local_today()

    tags: list[str] = []
    score = 0.0
    score += _interest_component(user, event, tags)
    score += _location_component(user, event, tags)
    score += _group_size_component(user, event, tags)
    score += _price_component(user, event, tags)
    score += _timing_component(event, today, tags)

    score = max(0.0, min(100.0, score))

    if not tags:
        tags.append(TAG_FALLBACK)

    return MatchResult(score=_round_half_up(score), tags=tuple(tags[:MAX_TAGS]))
