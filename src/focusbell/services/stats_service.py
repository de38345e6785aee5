"""Stats service - in-memory focus statistics per user."""

from __future__ import annotations

from focusbell.models.stats import UserStats


class StatsService:
    """Keeps aggregate counters for each user for the life of the process."""

    def __init__(self) -> None:
        self._stats: dict[str, UserStats] = {}

    def get(self, user_id: str) -> UserStats:
        """Return the user's stats, zeroed if nothing was recorded yet."""
        return self._stats.get(user_id) or UserStats()

    def record_work(self, user_id: str, minutes: int) -> UserStats:
        stats = self._stats.setdefault(user_id, UserStats())
        stats.record_work(minutes)
        return stats

    def record_completion(self, user_id: str) -> UserStats:
        stats = self._stats.setdefault(user_id, UserStats())
        stats.record_completion()
        return stats
