"""Per-user focus statistics."""

from dataclasses import dataclass


@dataclass
class UserStats:
    """Aggregate counters for one user. In-memory only."""

    work_sessions: int = 0
    completed_sessions: int = 0
    focus_minutes: int = 0

    def record_work(self, minutes: int) -> None:
        self.work_sessions += 1
        self.focus_minutes += minutes

    def record_completion(self) -> None:
        self.completed_sessions += 1
