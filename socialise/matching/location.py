# socialise/matching/location.py
"""
Free-text location similarity for micro-meet matching.

Pure utility — no geocoding, no DB access.

Only the "city" segment is compared: everything before the first comma,
lowercased and trimmed ("London, UK" -> "london").

  exact city match            -> 1.0
  otherwise                   -> matched_words / max(len(a_words), len(b_words))

A word in `a` counts as matched when it contains, or is contained in, at
least one word of `b` ("francisco" ~ "francisco", "san" ~ "sant").
Duplicate words in `a` are each counted, so the ratio is not guaranteed to be
symmetric for inputs with repeated words. Downstream tag thresholds
(0.3 / 0.7) are tuned against exactly this definition.
"""
from __future__ import annotations

from typing import Optional


def city_segment(location: Optional[str]) -> str:
    """Lowercased, trimmed text before the first comma. '' for empty input."""
    if not location:
        return ""
    return location.lower().split(",", 1)[0].strip()


def _words_related(a: str, b: str) -> bool:
    return a in b or b in a


def location_similarity(a: Optional[str], b: Optional[str]) -> float:
    """Returns 0.0–1.0. Either side missing/empty -> 0.0."""
    city_a = city_segment(a)
    city_b = city_segment(b)
    if not city_a or not city_b:
        return 0.0

    if city_a == city_b:
        return 1.0

    words_a = city_a.split()
    words_b = city_b.split()

    matched = sum(
        1 for wa in words_a
        if any(_words_related(wa, wb) for wb in words_b)
    )
    similarity = matched / max(len(words_a), len(words_b))

    # clamp
    if similarity < 0.0:
        return 0.0
    if similarity > 1.0:
        return 1.0
    return float(similarity)
