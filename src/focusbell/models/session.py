"""Focus session state and configuration."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from focusbell.errors import InvalidConfig

if TYPE_CHECKING:
    from focusbell.engine.scheduler import PhaseTimer

Phase = Literal["working", "resting"]
RunState = Literal["active", "paused"]
PhaseEventKind = Literal["work_ended", "break_ended", "session_completed"]

MINUTE_MS = 60 * 1000

MAX_WORK_MINUTES = 180
MAX_BREAK_MINUTES = 60
MAX_CYCLES = 20


class SessionConfig(BaseModel):
    """Validated work/break/cycle settings for a new session."""

    model_config = ConfigDict(frozen=True, strict=True)

    work_minutes: int = Field(gt=0, le=MAX_WORK_MINUTES)
    break_minutes: int = Field(gt=0, le=MAX_BREAK_MINUTES)
    cycles: int = Field(gt=0, le=MAX_CYCLES)

    @classmethod
    def create(cls, work_minutes, break_minutes, cycles) -> "SessionConfig":
        """Build a config, raising InvalidConfig on any bad value."""
        try:
            return cls(
                work_minutes=work_minutes,
                break_minutes=break_minutes,
                cycles=cycles,
            )
        except ValidationError as e:
            raise InvalidConfig() from e

    @classmethod
    def parse(cls, work: str, brk: str, cycles: str) -> "SessionConfig":
        """Build a config from command tokens."""
        try:
            values = int(work), int(brk), int(cycles)
        except ValueError as e:
            raise InvalidConfig() from e
        return cls.create(*values)

    @property
    def work_ms(self) -> int:
        return self.work_minutes * MINUTE_MS

    @property
    def break_ms(self) -> int:
        return self.break_minutes * MINUTE_MS

    def describe(self) -> str:
        return (
            f"{self.work_minutes} min work / {self.break_minutes} min break / "
            f"{self.cycles} cycles"
        )


@dataclass(eq=False)
class Session:
    """One user's running work/break cycle.

    ``remaining_ms`` is authoritative only while paused. While active the
    engine derives it from ``phase_deadline``.
    """

    user_id: str
    scope_id: str
    channel_id: str
    work_ms: int
    break_ms: int
    total_cycles: int
    notifications_enabled: bool = False
    current_cycle: int = 1
    phase: Phase = "working"
    run_state: RunState = "active"
    phase_deadline: float | None = None
    remaining_ms: float = 0
    timer: PhaseTimer | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = field(
        default_factory=lambda: datetime.now().astimezone()
    )

    @classmethod
    def from_config(
        cls,
        user_id: str,
        scope_id: str,
        channel_id: str,
        config: SessionConfig,
        notifications_enabled: bool = False,
    ) -> "Session":
        return cls(
            user_id=user_id,
            scope_id=scope_id,
            channel_id=channel_id,
            work_ms=config.work_ms,
            break_ms=config.break_ms,
            total_cycles=config.cycles,
            notifications_enabled=notifications_enabled,
            remaining_ms=config.work_ms,
        )

    @property
    def is_paused(self) -> bool:
        return self.run_state == "paused"

    @property
    def is_working(self) -> bool:
        return self.phase == "working"

    def describe(self) -> str:
        return (
            f"{self.work_ms // MINUTE_MS} min work / {self.break_ms // MINUTE_MS} "
            f"min break / {self.total_cycles} cycles"
        )


@dataclass(frozen=True)
class PhaseEvent:
    """Emitted by the timer engine when a phase deadline is reached."""

    kind: PhaseEventKind
    session: Session
    cycle: int
    total_cycles: int

    @property
    def progress(self) -> str:
        return f"{self.cycle}/{self.total_cycles}"


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view of a session for display."""

    user_id: str
    phase: Phase
    paused: bool
    remaining_seconds: int
    cycle: int
    total_cycles: int
    notifications_enabled: bool

    @classmethod
    def capture(cls, session: Session, remaining_ms: float) -> "SessionSnapshot":
        return cls(
            user_id=session.user_id,
            phase=session.phase,
            paused=session.is_paused,
            remaining_seconds=max(0, int(remaining_ms // 1000)),
            cycle=session.current_cycle,
            total_cycles=session.total_cycles,
            notifications_enabled=session.notifications_enabled,
        )

    @property
    def phase_label(self) -> str:
        if self.paused:
            return "Paused"
        return "Working" if self.phase == "working" else "Resting"

    @property
    def remaining_label(self) -> str:
        mins, secs = divmod(self.remaining_seconds, 60)
        return f"{mins}:{secs:02d}"

    @property
    def cycle_label(self) -> str:
        return f"{self.cycle}/{self.total_cycles}"

    @property
    def next_phase_label(self) -> str:
        if self.phase == "working":
            return "break"
        return "work" if self.cycle < self.total_cycles else "complete"
