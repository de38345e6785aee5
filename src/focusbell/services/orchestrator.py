"""Session orchestrator - wires timer events to stats and notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from focusbell.engine.timer_engine import SessionTimerEngine
from focusbell.errors import NoActiveSession, NotJoined, VoiceUnavailable
from focusbell.models.session import MINUTE_MS, PhaseEvent, Session, SessionSnapshot
from focusbell.services.preset_service import PresetService
from focusbell.services.stats_service import StatsService
from focusbell.voice import sounds
from focusbell.voice.notifier import NotificationService
from focusbell.voice.registry import ConnectionRecord
from focusbell.voice.transport import VoiceTarget

PhaseObserver = Callable[[PhaseEvent], None]

logger = logging.getLogger(__name__)

_EVENT_SOUNDS = {
    "work_ended": sounds.WORK_END,
    "break_ended": sounds.BREAK_END,
    "session_completed": sounds.COMPLETE,
}


@dataclass(frozen=True)
class CommandContext:
    """Who issued a command and where."""

    user_id: str
    scope_id: str
    channel_id: str
    voice_target: VoiceTarget | None = None


class SessionOrchestrator:
    """Entry point for session commands.

    Notification playback is always launched as a detached task; timer
    transitions never wait for it.
    """

    def __init__(
        self,
        engine: SessionTimerEngine,
        notifier: NotificationService,
        stats: StatsService,
        presets: PresetService,
    ):
        self.engine = engine
        self.notifier = notifier
        self.stats = stats
        self.presets = presets
        self._observers: list[PhaseObserver] = []
        self._pending: set[asyncio.Task] = set()
        engine.add_listener(self._on_phase_event)

    def add_observer(self, observer: PhaseObserver) -> None:
        self._observers.append(observer)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def start_session(
        self, ctx: CommandContext, args: Sequence[str] = (), notified: bool = False
    ) -> Session:
        """Start a session for the caller.

        Arguments are resolved and validated before anything is stored.
        """
        config = self.presets.resolve(ctx.user_id, args)
        if notified:
            if not self.notifier.available:
                raise VoiceUnavailable()
            if not self.notifier.is_joined(ctx.scope_id):
                raise NotJoined()

        session = self.engine.start_session(
            ctx.user_id,
            ctx.scope_id,
            ctx.channel_id,
            config,
            notifications_enabled=notified,
        )
        if notified:
            self.notify(session.scope_id, sounds.START)
        return session

    def session_for(self, user_id: str) -> Session:
        session = self.engine.store.get(user_id)
        if session is None:
            raise NoActiveSession()
        return session

    def pause(self, user_id: str) -> Session:
        session = self.session_for(user_id)
        self.engine.pause(session)
        return session

    def resume(self, user_id: str) -> Session:
        session = self.session_for(user_id)
        self.engine.resume(session)
        return session

    def stop(self, user_id: str) -> Session:
        session = self.session_for(user_id)
        self.engine.stop(session)
        return session

    def snapshot(self, user_id: str) -> SessionSnapshot:
        session = self.session_for(user_id)
        return SessionSnapshot.capture(session, self.engine.remaining_ms(session))

    # ------------------------------------------------------------------
    # Audio
    # ------------------------------------------------------------------

    async def join_audio(self, scope_id: str, target: VoiceTarget | None) -> ConnectionRecord:
        return await self.notifier.join(scope_id, target)

    async def leave_audio(self, scope_id: str) -> list[Session]:
        """Leave the scope's channel and stop its notified sessions."""
        if not self.notifier.available:
            raise VoiceUnavailable()
        if not await self.notifier.leave(scope_id):
            raise NotJoined()
        stopped = self.engine.stop_scope(scope_id, notified_only=True)
        if stopped:
            logger.info(
                "Stopped %d notified session(s) after leaving scope %s",
                len(stopped),
                scope_id,
            )
        return stopped

    def notify(self, scope_id: str, sound_id: str) -> asyncio.Task[bool]:
        """Launch playback without waiting for it."""
        task = asyncio.get_running_loop().create_task(
            self.notifier.play(scope_id, sound_id),
            name=f"notify-{scope_id}-{sound_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._on_notify_done)
        return task

    def _on_notify_done(self, task: asyncio.Task[bool]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Notification %s failed; session continues",
                task.get_name(),
                exc_info=error,
            )
        elif not task.result():
            logger.info("Notification %s was not played; session continues", task.get_name())

    async def drain_notifications(self, cancel: bool = False) -> None:
        """Wait for (or cancel) in-flight notifications."""
        pending = list(self._pending)
        if cancel:
            for task in pending:
                task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Timer events
    # ------------------------------------------------------------------

    def _on_phase_event(self, event: PhaseEvent) -> None:
        session = event.session
        if event.kind == "work_ended":
            self.stats.record_work(session.user_id, session.work_ms // MINUTE_MS)
        elif event.kind == "session_completed":
            self.stats.record_completion(session.user_id)

        if session.notifications_enabled:
            self.notify(session.scope_id, _EVENT_SOUNDS[event.kind])

        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Phase observer failed for %s", event.kind)
