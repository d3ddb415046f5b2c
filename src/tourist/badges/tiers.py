"""Location badge tiers and progress math.

A location badge is earned by visiting a percentage of the attractions under
a city, country or continent. Thresholds are inclusive.
"""

from __future__ import annotations

LOCATION_TYPES: tuple[str, ...] = ("city", "country", "continent")

TIER_ORDER: tuple[str, ...] = ("bronze", "silver", "gold", "platinum")

TIER_THRESHOLDS: dict[str, int] = {
    "bronze": 25,
    "silver": 50,
    "gold": 75,
    "platinum": 100,
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def compute_progress_percent(visited: int, total: int) -> float:
    """Share of a location's attractions visited, 0-100. Empty locations are 0."""
    if total <= 0:
        return 0.0
    return _clamp(visited / total * 100)


def tier_for_progress(progress_percent: float) -> str | None:
    """Highest tier whose threshold is reached, or None below bronze."""
    current = None
    for tier in TIER_ORDER:
        if progress_percent >= TIER_THRESHOLDS[tier]:
            current = tier
    return current


def next_tier(tier: str | None) -> str | None:
    """Tier after ``tier``; bronze when nothing is earned yet, None after platinum."""
    if tier is None:
        return TIER_ORDER[0]
    index = TIER_ORDER.index(tier)
    if index >= len(TIER_ORDER) - 1:
        return None
    return TIER_ORDER[index + 1]


def progress_to_next_tier(progress_percent: float, tier: str | None) -> float:
    """How far (0-100) the user is between the current and the next threshold.

    Platinum has no next tier and reports 100.
    """
    upcoming = next_tier(tier)
    if upcoming is None:
        return 100.0
    lower = TIER_THRESHOLDS[tier] if tier is not None else 0
    upper = TIER_THRESHOLDS[upcoming]
    return _clamp((progress_percent - lower) / (upper - lower) * 100)


def visits_needed_for_tier(tier: str, total: int) -> int:
    """Smallest number of visited attractions that reaches ``tier`` in a location of ``total``."""
    needed = -(-total * TIER_THRESHOLDS[tier] // 100)
    return max(1, needed)
