"""Domain models for focusbell."""

from .presets import Preset
from .session import (
    PhaseEvent,
    Session,
    SessionConfig,
    SessionSnapshot,
)
from .stats import UserStats

__all__ = [
    "Preset",
    "PhaseEvent",
    "Session",
    "SessionConfig",
    "SessionSnapshot",
    "UserStats",
]
