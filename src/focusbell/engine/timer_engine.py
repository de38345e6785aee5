"""Phase state machine for focus sessions.

Each stored session is always either counting down (exactly one pending
``PhaseTimer``) or paused (no timer). Expiry callbacks run on the event
loop, so they never interleave with pause, resume or stop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from focusbell.engine.scheduler import PhaseTimer, Scheduler
from focusbell.engine.store import SessionStore
from focusbell.errors import AlreadyActive, NotPaused, NotRunning
from focusbell.models.session import PhaseEvent, PhaseEventKind, Session, SessionConfig

PhaseListener = Callable[[PhaseEvent], None]

# Resuming with zero remaining still schedules a real timer.
MIN_RESUME_DELAY_MS = 1

logger = logging.getLogger(__name__)


class SessionTimerEngine:
    """Starts, pauses, resumes and advances sessions held in a SessionStore."""

    def __init__(self, store: SessionStore, scheduler: Scheduler):
        self.store = store
        self.scheduler = scheduler
        self._listeners: list[PhaseListener] = []

    def add_listener(self, listener: PhaseListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_session(
        self,
        user_id: str,
        scope_id: str,
        channel_id: str,
        config: SessionConfig,
        notifications_enabled: bool = False,
    ) -> Session:
        """Create and store a session, then start its first work phase."""
        if self.store.has(user_id):
            raise AlreadyActive()

        session = Session.from_config(
            user_id, scope_id, channel_id, config, notifications_enabled
        )
        self.store.add(session)
        self._start_phase(session, session.work_ms)
        logger.info(
            "Session %s started for user %s (%s, notified=%s)",
            session.session_id,
            user_id,
            config.describe(),
            notifications_enabled,
        )
        return session

    def pause(self, session: Session) -> None:
        if session.is_paused:
            raise NotRunning()

        timer = session.timer
        if timer is not None and not timer.cancel():
            # The deadline already fired; the session now reflects the next
            # phase and that phase's timer is the one to cancel.
            timer = session.timer
            if timer is not None:
                timer.cancel()
        session.timer = None
        session.remaining_ms = self.remaining_ms(session)
        session.phase_deadline = None
        session.run_state = "paused"
        logger.debug(
            "Session %s paused with %.0f ms left", session.session_id, session.remaining_ms
        )

    def resume(self, session: Session) -> None:
        if not session.is_paused:
            raise NotPaused()

        session.run_state = "active"
        self._schedule(session, max(session.remaining_ms, MIN_RESUME_DELAY_MS))
        logger.debug("Session %s resumed", session.session_id)

    def stop(self, session: Session) -> bool:
        """Cancel the session's timer and drop it. Safe to call repeatedly."""
        if session.timer is not None:
            session.timer.cancel()
            session.timer = None
        removed = self.store.remove(session)
        if removed:
            logger.info("Session %s stopped", session.session_id)
        return removed

    def stop_user(self, user_id: str) -> bool:
        session = self.store.get(user_id)
        if session is None:
            return False
        return self.stop(session)

    def stop_scope(self, scope_id: str, notified_only: bool = True) -> list[Session]:
        """Stop sessions in a scope, by default only the notified ones."""
        stopped = []
        for session in self.store.in_scope(scope_id):
            if notified_only and not session.notifications_enabled:
                continue
            self.stop(session)
            stopped.append(session)
        return stopped

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def remaining_ms(self, session: Session) -> float:
        if session.is_paused or session.phase_deadline is None:
            return max(0, session.remaining_ms)
        return max(0, session.phase_deadline - self.scheduler.now_ms())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Drop stored sessions that are neither counting down nor paused."""
        removed = 0
        for session in self.store:
            orphaned = not session.is_paused and (
                session.timer is None or not session.timer.pending
            )
            if orphaned:
                logger.warning("Sweeping orphaned session %s", session.session_id)
                self.stop(session)
                removed += 1
        return removed

    def shutdown(self) -> int:
        """Cancel every timer and empty the store."""
        sessions = self.store.clear()
        for session in sessions:
            if session.timer is not None:
                session.timer.cancel()
                session.timer = None
        logger.info("Engine shut down, %d session(s) discarded", len(sessions))
        return len(sessions)

    # ------------------------------------------------------------------
    # Phase machinery
    # ------------------------------------------------------------------

    def _start_phase(self, session: Session, duration_ms: float) -> None:
        session.remaining_ms = duration_ms
        session.run_state = "active"
        self._schedule(session, duration_ms)

    def _schedule(self, session: Session, delay_ms: float) -> None:
        timer = PhaseTimer(self.scheduler, delay_ms, self._make_expiry(session))
        session.timer = timer
        session.phase_deadline = timer.deadline

    def _make_expiry(self, session: Session) -> Callable[[PhaseTimer], None]:
        def on_expiry(timer: PhaseTimer) -> None:
            self._on_phase_expired(session, timer)

        return on_expiry

    def _on_phase_expired(self, session: Session, timer: PhaseTimer) -> None:
        if session.timer is not timer or not self.store.contains(session):
            logger.debug("Ignoring stale timer for session %s", session.session_id)
            return

        session.timer = None
        session.phase_deadline = None

        # Listeners run after the next phase is scheduled and may pause or
        # stop it.
        if session.is_working:
            session.phase = "resting"
            self._start_phase(session, session.break_ms)
            self._emit("work_ended", session)
            return

        session.current_cycle += 1
        if session.current_cycle > session.total_cycles:
            # Report the last real cycle, never the overflowed counter.
            session.current_cycle = session.total_cycles
            self.store.remove(session)
            session.remaining_ms = 0
            logger.info("Session %s completed", session.session_id)
            self._emit("session_completed", session)
            return

        session.phase = "working"
        self._start_phase(session, session.work_ms)
        self._emit("break_ended", session)

    def _emit(self, kind: PhaseEventKind, session: Session) -> None:
        event = PhaseEvent(
            kind=kind,
            session=session,
            cycle=session.current_cycle,
            total_cycles=session.total_cycles,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Phase listener failed for %s event", kind)
