"""Wiring of the engine, notifier and services into one application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from focusbell.config import AppConfig
from focusbell.engine.scheduler import AsyncioScheduler, Scheduler
from focusbell.engine.store import SessionStore
from focusbell.engine.timer_engine import SessionTimerEngine
from focusbell.services.commands import CommandDispatcher
from focusbell.services.maintenance import MaintenanceRunner
from focusbell.services.orchestrator import SessionOrchestrator
from focusbell.services.preset_service import PresetService
from focusbell.services.stats_service import StatsService
from focusbell.voice.notifier import NotificationService
from focusbell.voice.registry import ConnectionRegistry
from focusbell.voice.sounds import SoundLibrary
from focusbell.voice.transport import VoiceGateway

logger = logging.getLogger(__name__)


@dataclass
class FocusBellApp:
    engine: SessionTimerEngine
    notifier: NotificationService
    orchestrator: SessionOrchestrator
    dispatcher: CommandDispatcher
    maintenance: MaintenanceRunner

    async def shutdown(self) -> None:
        await self.maintenance.shutdown()


def default_sounds_dir() -> Path:
    return Path.cwd() / "sounds"


def build_app(
    config: AppConfig,
    gateway: VoiceGateway | None = None,
    scheduler: Scheduler | None = None,
) -> FocusBellApp:
    """Build the application. Without a gateway, audio notifications are off."""
    store = SessionStore()
    engine = SessionTimerEngine(store, scheduler or AsyncioScheduler())

    sounds_dir = Path(config.voice.sounds_dir) if config.voice.sounds_dir else default_sounds_dir()
    sounds = SoundLibrary(sounds_dir, config.voice.sound_extension)
    if gateway is not None:
        missing = sounds.missing()
        if missing:
            logger.warning("Sound files missing in %s: %s", sounds_dir, ", ".join(missing))
    notifier = NotificationService(ConnectionRegistry(), gateway, sounds, config.voice)

    orchestrator = SessionOrchestrator(
        engine, notifier, StatsService(), PresetService(config.timer)
    )
    return FocusBellApp(
        engine=engine,
        notifier=notifier,
        orchestrator=orchestrator,
        dispatcher=CommandDispatcher(orchestrator),
        maintenance=MaintenanceRunner(engine, notifier, orchestrator, config.maintenance),
    )
