"""Shared test fixtures and configuration.

Provides a manually-driven scheduler for the timer engine and in-memory
fakes of the voice transport, so tests never touch real time or sockets.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from focusbell.config import VoiceSettings
from focusbell.engine.store import SessionStore
from focusbell.engine.timer_engine import SessionTimerEngine
from focusbell.models.session import MINUTE_MS
from focusbell.services.commands import CommandDispatcher
from focusbell.services.orchestrator import CommandContext, SessionOrchestrator
from focusbell.services.preset_service import PresetService
from focusbell.services.stats_service import StatsService
from focusbell.voice.notifier import NotificationService
from focusbell.voice.registry import ConnectionRegistry
from focusbell.voice.sounds import SOUND_IDS, SoundLibrary
from focusbell.voice.transport import (
    AudioPlayer,
    ConnectionStatus,
    PlayerStatus,
    VoiceConnection,
    VoiceGateway,
    VoiceTarget,
)
from focusbell.utils import logger as logger_mod


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_log_dir(tmp_path_factory):
    """Keep the rotating log file out of the real user log directory.

    Also undoes what the CLI does to the "focusbell" logger, so caplog
    keeps seeing records in later tests.
    """
    log_dir = str(tmp_path_factory.mktemp("logs"))
    with patch("focusbell.utils.logger.user_log_dir", return_value=log_dir):
        yield

    logger_mod._logger = None
    app_logger = logging.getLogger("focusbell")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Manual scheduler
# ---------------------------------------------------------------------------


class _Handle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when ``advance`` is called."""

    def __init__(self, start_ms: float = 0.0):
        self.now = start_ms
        self._queue: list[tuple[float, int, _Handle]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self.now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self.now + delay_ms, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def pending(self) -> list[_Handle]:
        return [h for _, _, h in self._queue if not h.cancelled]

    def advance(self, ms: float) -> None:
        """Move the clock forward, firing due callbacks in deadline order."""
        target = self.now + ms
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = when
            handle.callback()
        self.now = target

    def advance_minutes(self, minutes: float) -> None:
        self.advance(minutes * MINUTE_MS)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler(start_ms=1_000_000.0)


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture()
def engine(store, scheduler) -> SessionTimerEngine:
    return SessionTimerEngine(store, scheduler)


# ---------------------------------------------------------------------------
# Fake voice transport
# ---------------------------------------------------------------------------


class FakeSubscription:
    def __init__(self, connection: "FakeConnection", player: "FakePlayer"):
        self.connection = connection
        self.player = player
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakePlayer(AudioPlayer):
    """Player that goes idle on the next loop iteration unless told otherwise."""

    def __init__(self, behaviour: str = "finish"):
        super().__init__()
        self.behaviour = behaviour
        self.played: list[Path] = []
        self.volume: float | None = None
        self.stopped = False

    def play(self, source: Path, volume: float) -> None:
        self.played.append(source)
        self.volume = volume
        self.set_status(PlayerStatus.PLAYING)
        loop = asyncio.get_running_loop()
        if self.behaviour == "finish":
            loop.call_soon(self.set_status, PlayerStatus.IDLE)
        elif self.behaviour == "error":
            loop.call_soon(self.emit, "error", RuntimeError("decoder crashed"))
        elif self.behaviour == "raise":
            raise RuntimeError("cannot open audio resource")
        # "hang": never leaves the playing state

    def stop(self) -> None:
        self.stopped = True
        self.set_status(PlayerStatus.IDLE)


class FakeConnection(VoiceConnection):
    def __init__(self, target: VoiceTarget):
        super().__init__(ConnectionStatus.SIGNALLING)
        self.target = target
        self.subscriptions: list[FakeSubscription] = []
        self.destroyed = False

    def subscribe(self, player: AudioPlayer) -> FakeSubscription:
        sub = FakeSubscription(self, player)
        self.subscriptions.append(sub)
        return sub

    def destroy(self) -> None:
        self.destroyed = True
        self.set_status(ConnectionStatus.DESTROYED)


class FakeGateway(VoiceGateway):
    """Gateway whose connections become ready on the next loop iteration.

    Set ``ready_on_connect = False`` to leave connections signalling,
    ``fail_connect`` to make ``connect`` raise, or ``hang_connect`` to make
    it never return.
    """

    def __init__(self):
        self.connections: list[FakeConnection] = []
        self.players: list[FakePlayer] = []
        self.ready_on_connect = True
        self.fail_connect = False
        self.hang_connect = False
        self.player_behaviour = "finish"

    async def connect(self, target: VoiceTarget) -> FakeConnection:
        if self.fail_connect:
            raise ConnectionError("gateway refused voice connection")
        if self.hang_connect:
            await asyncio.Event().wait()
        connection = FakeConnection(target)
        self.connections.append(connection)
        if self.ready_on_connect:
            asyncio.get_running_loop().call_soon(connection.set_status, ConnectionStatus.READY)
        return connection

    def create_player(self) -> FakePlayer:
        player = FakePlayer(self.player_behaviour)
        self.players.append(player)
        return player


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def make_connection(target):
    """Factory for standalone fake connections, for registry-level tests."""

    def factory(status: ConnectionStatus = ConnectionStatus.READY) -> FakeConnection:
        connection = FakeConnection(target)
        connection.set_status(status)
        return connection

    return factory


@pytest.fixture()
def sounds_dir(tmp_path) -> Path:
    directory = tmp_path / "sounds"
    directory.mkdir()
    for sound_id in SOUND_IDS:
        (directory / f"{sound_id}.mp3").write_bytes(b"ID3")
    return directory


@pytest.fixture()
def voice_settings() -> VoiceSettings:
    """Short timeouts so timeout paths finish quickly."""
    return VoiceSettings(
        join_timeout=0.2,
        ready_recovery_timeout=0.1,
        playback_timeout=0.1,
        reconnect_timeout=0.1,
    )


@pytest.fixture()
def notifier(gateway, sounds_dir, voice_settings) -> NotificationService:
    return NotificationService(
        ConnectionRegistry(), gateway, SoundLibrary(sounds_dir), voice_settings
    )


@pytest.fixture()
def target() -> VoiceTarget:
    return VoiceTarget(scope_id="guild-1", channel_id="voice-1", name="Focus Room")


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def orchestrator(engine, notifier) -> SessionOrchestrator:
    return SessionOrchestrator(engine, notifier, StatsService(), PresetService())


@pytest.fixture()
def dispatcher(orchestrator) -> CommandDispatcher:
    return CommandDispatcher(orchestrator)


@pytest.fixture()
def ctx(target) -> CommandContext:
    """Caller sitting in the ``target`` voice channel."""
    return CommandContext(
        user_id="u1", scope_id=target.scope_id, channel_id="text-1", voice_target=target
    )
