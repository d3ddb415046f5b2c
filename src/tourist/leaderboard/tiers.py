"""Rank-based leaderboard badges.

These values MUST match the mobile clients' badge artwork ids.
"""

from __future__ import annotations

# (highest rank that still earns the badge, badge id), best first
RANK_BADGE_THRESHOLDS: list[tuple[int, str]] = [
    (1, "gold_champion"),
    (2, "silver_explorer"),
    (3, "bronze_voyager"),
    (10, "elite_traveler"),
    (100, "rising_star"),
]

LEADERBOARD_BADGES: list[dict] = [
    {
        "id": "gold_champion",
        "name": "Gold Champion",
        "emoji": "\U0001f947",
        "description": "Ranked #1 on the global leaderboard",
        "position": "1",
    },
    {
        "id": "silver_explorer",
        "name": "Silver Explorer",
        "emoji": "\U0001f948",
        "description": "Ranked #2 on the global leaderboard",
        "position": "2",
    },
    {
        "id": "bronze_voyager",
        "name": "Bronze Voyager",
        "emoji": "\U0001f949",
        "description": "Ranked #3 on the global leaderboard",
        "position": "3",
    },
    {
        "id": "elite_traveler",
        "name": "Elite Traveler",
        "emoji": "\U0001f3c6",
        "description": "Ranked in the top 10 globally",
        "position": "4-10",
    },
    {
        "id": "rising_star",
        "name": "Rising Star",
        "emoji": "⭐",
        "description": "Ranked in the top 100 globally",
        "position": "11-100",
    },
]


def tier_for_rank(rank: int | None) -> str | None:
    """Badge for a leaderboard position, or None outside the top 100."""
    if rank is None or rank < 1:
        return None
    for max_rank, badge in RANK_BADGE_THRESHOLDS:
        if rank <= max_rank:
            return badge
    return None


def get_display_name(name: str | None, email: str) -> str:
    """Privacy-preserving display name: first name plus last initial.

    Falls back to the email local part when the user has no name.
    """
    parts = (name or "").split()
    if not parts:
        return email.split("@", 1)[0]
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0]} {parts[-1][0]}."
