"""Session timer engine."""

from .scheduler import AsyncioScheduler, PhaseTimer, Scheduler
from .store import SessionStore
from .timer_engine import SessionTimerEngine

__all__ = [
    "AsyncioScheduler",
    "PhaseTimer",
    "Scheduler",
    "SessionStore",
    "SessionTimerEngine",
]
