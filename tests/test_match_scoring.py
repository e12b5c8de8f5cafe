# tests/test_match_scoring.py
"""
Micro-meet compatibility score:

  Part 1: Regular events short-circuit to (0, [])
  Part 2: Each weighted component in isolation
  Part 3: Tag ordering, truncation and fallback
  Part 4: Clamp / rounding / integer invariants
  Part 5: Malformed input never raises
"""
from __future__ import annotations

from datetime import date, timedelta

import pytest

from socialise.matching.scoring import (
    CATEGORY_KEYWORDS,
    TAG_FALLBACK,
    calculate_match_score,
)
from socialise.models import CandidateEvent, UserProfile

TODAY = date(2026, 3, 10)


def _user(**overrides) -> UserProfile:
    defaults = {
        "id": "user-1",
        "location": "London, UK",
        "interests": ["Food", "Tech", "Travel"],
        "is_pro": False,
    }
    defaults.update(overrides)
    return UserProfile(**defaults)


def _neutral_user(**overrides) -> UserProfile:
    """No interests, no location: only price/size/timing can score."""
    fields = {"location": None, "interests": []}
    fields.update(overrides)
    return _user(**fields)


def _event(**overrides) -> CandidateEvent:
    defaults = {
        "id": "event-1",
        "category": "Tech",
        "location": "London, UK",
        "lat": 51.5074,
        "lng": -0.1278,
        "date": (TODAY + timedelta(days=30)).isoformat(),
        "price": 15,
        "max_spots": 6,
        "is_micro_meet": True,
    }
    defaults.update(overrides)
    return CandidateEvent(**defaults)


def _score(user, event):
    return calculate_match_score(user, event, today=TODAY)


# ===========================================================================
# Part 1: Regular events
# ===========================================================================

def test_regular_event_scores_zero_without_tags():
    result = _score(_user(), _event(is_micro_meet=False))
    assert result.score == 0
    assert result.tags == ()


def test_regular_event_ignores_otherwise_perfect_inputs():
    event = _event(is_micro_meet=False, price=0, date=TODAY.isoformat())
    assert _score(_user(), event).score == 0


# ===========================================================================
# Part 2: Components
# ===========================================================================

class TestInterestComponent:

    def test_single_match_gets_15(self):
        user = _user(location=None, interests=["Tech"])
        event = _event(max_spots=20, price=None, date=None)
        result = _score(user, event)
        assert result.score == 15
        assert result.tags == ("Matches your Tech interests",)

    def test_two_matches_named_in_tag(self):
        user = _user(location=None, interests=["Tech", "AI"])
        event = _event(max_spots=20, price=None, date=None)
        result = _score(user, event)
        assert result.score == 30
        assert result.tags[0] == "Matches your Tech & AI interests"

    def test_capped_at_40(self):
        user = _user(location=None, interests=["Tech", "AI", "Programming", "Innovation"])
        event = _event(max_spots=20, price=None, date=None)
        result = _score(user, event)
        assert result.score == 40
        # only the first two matched interests are named
        assert result.tags[0] == "Matches your Tech & AI interests"

    def test_containment_in_either_direction(self):
        # interest contains keyword ("Outdoor Hiking" / "Hiking", "Street Art" / "Art")
        user = _user(location=None, interests=["Outdoor Hiking"])
        assert _score(user, _event(category="Outdoors", max_spots=20, price=None, date=None)).score == 15
        user = _user(location=None, interests=["Street Art"])
        assert _score(user, _event(category="Arts", max_spots=20, price=None, date=None)).score == 15

    def test_case_insensitive(self):
        user = _user(location=None, interests=["wine tasting"])
        result = _score(user, _event(category="Food & Drinks", max_spots=20, price=None, date=None))
        assert result.score == 15

    def test_unmapped_category_falls_back_to_itself(self):
        assert "Book Club" not in CATEGORY_KEYWORDS
        user = _user(location=None, interests=["Book Club"])
        result = _score(user, _event(category="Book Club", max_spots=20, price=None, date=None))
        assert result.score == 15

    def test_no_match_with_interests_gets_explorer_bonus(self):
        user = _user(location=None, interests=["Knitting"])
        result = _score(user, _event(max_spots=20, price=None, date=None))
        assert result.score == 5
        assert result.tags == ("Could expand your horizons",)

    def test_no_interests_gets_nothing(self):
        result = _score(_neutral_user(), _event(max_spots=20, price=None, date=None))
        assert result.score == 0
        assert result.tags == (TAG_FALLBACK,)


class TestLocationComponent:

    def test_same_city_gets_30_and_near_you(self):
        user = _neutral_user(location="London, UK")
        result = _score(user, _event(max_spots=20, price=None, date=None))
        assert result.score == 30
        assert result.tags == ("Near you",)

    def test_partial_city_gets_in_your_area(self):
        user = _neutral_user(location="Manchester")
        event = _event(location="Manchester Piccadilly", max_spots=20, price=None, date=None)
        result = _score(user, event)
        assert result.score == 15
        assert result.tags == ("In your area",)

    def test_requires_coordinates(self):
        user = _neutral_user(location="London")
        event = _event(lat=None, max_spots=20, price=None, date=None)
        assert _score(user, event).score == 0

    def test_zero_coordinates_count_as_present(self):
        user = _neutral_user(location="Accra")
        event = _event(location="Accra", lat=0.0, lng=0.0, max_spots=20, price=None, date=None)
        assert _score(user, event).score == 30

    def test_requires_user_location(self):
        result = _score(_neutral_user(), _event(max_spots=20, price=None, date=None))
        assert result.score == 0


class TestGroupSizeComponent:

    def test_small_group_without_intimacy_gets_8_no_tag(self):
        result = _score(_neutral_user(), _event(max_spots=6, price=None, date=None))
        assert result.score == 8
        assert result.tags == (TAG_FALLBACK,)

    def test_intimacy_interest_gets_15_and_tag(self):
        user = _neutral_user(interests=["Deep Conversations"])
        result = _score(user, _event(category="Games", max_spots=6, price=None, date=None))
        # +5 explorer bonus, +15 intimacy
        assert result.score == 20
        assert result.tags == (
            "Could expand your horizons",
            "Perfect for meaningful connections",
        )

    def test_missing_max_spots_defaults_to_six(self):
        event = CandidateEvent.from_row({"id": "e", "is_micro_meet": True})
        assert event.max_spots == 6
        assert _score(_neutral_user(), event).score == 8

    def test_large_group_gets_nothing(self):
        assert _score(_neutral_user(), _event(max_spots=9, price=None, date=None)).score == 0

    def test_boundary_eight_is_small(self):
        assert _score(_neutral_user(), _event(max_spots=8, price=None, date=None)).score == 8


class TestPriceComponent:

    def test_free_event(self):
        result = _score(_neutral_user(), _event(max_spots=20, price=0, date=None))
        assert result.score == 10
        assert any("Free" in t for t in result.tags)
        assert not any("Great value" in t for t in result.tags)

    def test_great_value(self):
        result = _score(_neutral_user(), _event(max_spots=20, price=10, date=None))
        assert result.score == 8
        assert any("Great value" in t for t in result.tags)
        assert not any("Free" in t for t in result.tags)

    def test_boundary_twenty_is_great_value(self):
        result = _score(_neutral_user(), _event(max_spots=20, price=20, date=None))
        assert result.score == 8

    def test_premium_event_for_pro_user(self):
        result = _score(_neutral_user(is_pro=True), _event(max_spots=20, price=45, date=None))
        assert result.score == 12
        assert result.tags == (TAG_FALLBACK,)

    def test_premium_event_for_regular_user(self):
        assert _score(_neutral_user(), _event(max_spots=20, price=45, date=None)).score == 0

    def test_missing_price_disables_component(self):
        assert _score(_neutral_user(is_pro=True), _event(max_spots=20, price=None, date=None)).score == 0


class TestTimingComponent:

    def _timed(self, days: int):
        event = _event(max_spots=20, price=None, date=(TODAY + timedelta(days=days)).isoformat())
        return _score(_neutral_user(), event)

    def test_today_is_soon(self):
        result = self._timed(0)
        assert result.score == 5
        assert result.tags == ("Coming up soon",)

    def test_tomorrow_is_soon(self):
        assert any("Coming up" in t for t in self._timed(1).tags)

    def test_seven_days_inclusive(self):
        assert self._timed(7).score == 5

    def test_eight_days_is_not_soon(self):
        assert self._timed(8).score == 0

    def test_past_week_is_not_soon(self):
        result = self._timed(-7)
        assert result.score == 0
        assert not any("Coming up" in t for t in result.tags)

    def test_yesterday_is_not_soon(self):
        assert self._timed(-1).score == 0

    def test_datetime_string_uses_its_date(self):
        event = _event(max_spots=20, price=None, date=f"{TODAY.isoformat()}T19:30:00+00:00")
        assert _score(_neutral_user(), event).score == 5

    def test_defaults_to_local_today(self):
        from socialise.matching.scoring import local_today

        event = _event(max_spots=20, price=None, date=local_today().isoformat())
        assert calculate_match_score(_neutral_user(), event).score == 5


# ===========================================================================
# Part 3: Tags
# ===========================================================================

class TestTags:

    def test_tags_follow_component_order_and_truncate_to_two(self):
        user = _user(interests=["Tech"])
        event = _event(price=0, date=TODAY.isoformat())
        result = _score(user, event)
        # interest, location, (size: no tag), price, timing -> first two kept
        assert result.tags == ("Matches your Tech interests", "Near you")

    def test_fallback_tag_when_nothing_applies(self):
        result = _score(_neutral_user(), _event(max_spots=50, price=100, date=None))
        assert result.tags == (TAG_FALLBACK,)

    def test_micro_meet_always_has_one_or_two_tags(self):
        users = [_user(), _neutral_user(), _user(interests=["Community"]), _neutral_user(is_pro=True)]
        events = [
            _event(),
            _event(price=0, date=TODAY.isoformat()),
            _event(location=None, max_spots=30, price=99, date="not-a-date"),
            _event(category=None),
        ]
        for u in users:
            for e in events:
                assert 1 <= len(_score(u, e).tags) <= 2

    def test_free_and_great_value_never_co_occur(self):
        for price in (0, 5, 10, 20):
            tags = _score(_neutral_user(), _event(max_spots=20, price=price, date=None)).tags
            assert not (any("Free" in t for t in tags) and any("Great value" in t for t in tags))


# ===========================================================================
# Part 4: Score invariants
# ===========================================================================

class TestScoreInvariants:

    def test_realistic_high_match(self):
        user = _user(interests=["Tech", "AI"], location="London, UK")
        event = _event(
            category="Tech", location="London, UK", lat=51.5, lng=-0.1,
            price=0, max_spots=6, date=TODAY.isoformat(),
        )
        result = _score(user, event)
        # 30 (two interests) + 30 + 8 + 10 + 5
        assert result.score == 83
        assert any("Free" in t or "interests" in t for t in result.tags)

    def test_clamped_to_100(self):
        user = _user(
            interests=["Community", "Community Building", "Deep Community"],
            location="Leeds",
            is_pro=True,
        )
        event = _event(category="Community", location="Leeds", price=50, date=TODAY.isoformat())
        # 40 + 30 + 15 + 12 + 5 = 102
        assert _score(user, event).score == 100

    def test_rounds_half_up(self):
        user = _neutral_user(location="New York City Centre")
        event = _event(location="York", max_spots=20, price=None, date=None)
        # similarity 1/4 -> 7.5 points
        result = _score(user, event)
        assert result.score == 8
        assert isinstance(result.score, int)

    def test_score_is_integer_in_range(self):
        locations = ["London, UK", "San Francisco", "San Francisco Bay", None, "York"]
        for loc in locations:
            for price in (None, 0, 12, 99):
                result = _score(_user(location=loc, is_pro=True), _event(location=loc, price=price))
                assert isinstance(result.score, int)
                assert 0 <= result.score <= 100


# ===========================================================================
# Part 5: Malformed input
# ===========================================================================

class TestMalformedInput:

    @pytest.mark.parametrize("row", [
        {"is_micro_meet": True},
        {"is_micro_meet": True, "date": "next tuesday"},
        {"is_micro_meet": True, "date": 20260310},
        {"is_micro_meet": True, "price": "free"},
        {"is_micro_meet": True, "price": -5},
        {"is_micro_meet": True, "max_spots": "lots"},
        {"is_micro_meet": True, "max_spots": 0},
        {"is_micro_meet": True, "lat": "north", "lng": None, "location": 42},
        {"is_micro_meet": True, "category": None},
        {"is_micro_meet": "yes"},
        {"is_micro_meet": True, "max_spots": "inf"},
        {"is_micro_meet": True, "max_spots": float("inf")},
        {"is_micro_meet": True, "lat": 10**400, "lng": 0.5},
        {"is_micro_meet": True, "price": float("nan")},
        {"is_micro_meet": True, "price": "-inf"},
    ])
    def test_bad_event_rows_never_raise(self, row):
        result = _score(_user(), CandidateEvent.from_row(row))
        assert 0 <= result.score <= 100

    def test_unparsable_date_same_as_missing(self):
        a = _score(_neutral_user(), _event(date="31/12/2026"))
        b = _score(_neutral_user(), _event(date=None))
        assert a == b

    def test_bad_user_row_never_raises(self):
        user = UserProfile.from_row({"id": "u", "interests": "Tech", "location": ["x"], "is_pro": None})
        assert user.interests == []
        assert user.location is None
        assert user.is_pro is False
        assert _score(user, _event()).score >= 0

    def test_blank_interests_are_dropped(self):
        user = UserProfile.from_row({"id": "u", "interests": ["", "  ", None, "Tech"]})
        assert user.interests == ["Tech"]

    def test_public_user_shape_is_accepted(self):
        user = UserProfile.from_row({"id": "u", "isPro": True})
        assert user.is_pro is True

    def test_string_price_from_numeric_column(self):
        event = CandidateEvent.from_row({"is_micro_meet": True, "price": "0.00"})
        assert event.price == 0.0
        assert _score(_neutral_user(), event).tags[0] == "Free event"

    def test_non_finite_numbers_degrade_to_defaults(self):
        event = CandidateEvent.from_row({
            "is_micro_meet": True, "max_spots": "inf", "lat": 10**400, "price": float("nan"),
        })
        assert event.max_spots == 6
        assert event.lat is None
        assert event.price is None

    def test_overflowing_row_does_not_fail_the_batch(self):
        from socialise.matching.aggregate import attach_matches

        rows = [
            {"id": "bad", "is_micro_meet": True, "max_spots": "inf", "lat": 10**400},
            {"id": "ok", "is_micro_meet": True, "price": 0},
        ]
        result = attach_matches(rows, _neutral_user(), today=TODAY)
        assert [r["id"] for r in result] == ["bad", "ok"]
        assert all(0 <= r["matchScore"] <= 100 for r in result)
