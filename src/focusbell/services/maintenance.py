"""Background sweeps and graceful shutdown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from focusbell.config import MaintenanceSettings
from focusbell.engine.timer_engine import SessionTimerEngine
from focusbell.services.orchestrator import SessionOrchestrator
from focusbell.voice.notifier import NotificationService
from focusbell.voice.transport import PlayerStatus

logger = logging.getLogger(__name__)


class MaintenanceRunner:
    """Runs the periodic session and voice-health sweeps."""

    def __init__(
        self,
        engine: SessionTimerEngine,
        notifier: NotificationService,
        orchestrator: SessionOrchestrator,
        settings: MaintenanceSettings | None = None,
    ):
        self.engine = engine
        self.notifier = notifier
        self.orchestrator = orchestrator
        self.settings = settings or MaintenanceSettings()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(
                self._every(self.settings.session_sweep_interval, self.sweep_sessions),
                name="session-sweep",
            )
        ]
        if self.notifier.available:
            self._tasks.append(
                loop.create_task(
                    self._every(self.settings.health_check_interval, self.notifier.health_sweep),
                    name="voice-health",
                )
            )

    def sweep_sessions(self) -> int:
        removed = self.engine.sweep()
        for record in self.notifier.registry:
            if record.player is not None and record.player.status == PlayerStatus.IDLE:
                record.replace_player(None)
        logger.info(
            "Memory sweep done: %d session(s) live, %d removed",
            len(self.engine.store),
            removed,
        )
        return removed

    async def _every(self, interval: float, job: Callable[[], object]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                job()
            except Exception:
                logger.exception("Maintenance job %s failed", getattr(job, "__name__", job))

    async def shutdown(self) -> None:
        """Stop sweeps, timers, notifications and voice connections."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        self.engine.shutdown()
        await self.orchestrator.drain_notifications(cancel=True)
        await self.notifier.shutdown()
        logger.info("Shutdown complete")
