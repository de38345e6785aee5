"""Audio transport interfaces.

A chat-platform adapter implements ``VoiceGateway``, ``VoiceConnection`` and
``AudioPlayer``. Both transport objects expose their lifecycle as a status
plus named events: every status change emits ``"state_change"`` with
``(old, new)`` and then an event named after the new status value. Errors
are emitted as ``"error"`` with the exception.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

Listener = Callable[..., Any]

logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"


class PlayerStatus(str, Enum):
    IDLE = "idle"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class VoiceTarget:
    """The voice channel a scope should join."""

    scope_id: str
    channel_id: str
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.channel_id


class StatusEmitter:
    """Minimal event emitter with a tracked status."""

    def __init__(self, status: Enum):
        self._status = status
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    @property
    def status(self) -> Enum:
        return self._status

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners[event].append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, ()))
        return sum(len(v) for v in self._listeners.values())

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %r raised", event)

    def set_status(self, status: Enum) -> None:
        old = self._status
        if old == status:
            return
        self._status = status
        self.emit("state_change", old, status)
        self.emit(status.value)


async def wait_for_status(emitter: StatusEmitter, *statuses: Enum, timeout: float) -> Enum:
    """Wait until *emitter* reaches one of *statuses*.

    Returns immediately if it is already there. Raises
    ``asyncio.TimeoutError`` after *timeout* seconds.
    """
    if emitter.status in statuses:
        return emitter.status

    future: asyncio.Future[Enum] = asyncio.get_running_loop().create_future()

    def on_change(_old: Enum, new: Enum) -> None:
        if new in statuses and not future.done():
            future.set_result(new)

    emitter.on("state_change", on_change)
    try:
        return await asyncio.wait_for(future, timeout)
    finally:
        emitter.off("state_change", on_change)


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class AudioPlayer(StatusEmitter, ABC):
    """Single-use playback handle."""

    def __init__(self) -> None:
        super().__init__(PlayerStatus.IDLE)

    @abstractmethod
    def play(self, source: Path, volume: float) -> None:
        """Start playing *source*; status moves away from idle."""

    @abstractmethod
    def stop(self) -> None:
        """Stop playback immediately."""


class VoiceConnection(StatusEmitter, ABC):
    """One live audio connection into a voice channel."""

    def __init__(self, status: ConnectionStatus = ConnectionStatus.SIGNALLING):
        super().__init__(status)

    @abstractmethod
    def subscribe(self, player: AudioPlayer) -> Subscription | None:
        """Route *player*'s output into this connection."""

    @abstractmethod
    def destroy(self) -> None:
        """Close the connection; status becomes destroyed."""


class VoiceGateway(ABC):
    """Factory for connections and players, provided by the chat adapter."""

    @abstractmethod
    async def connect(self, target: VoiceTarget) -> VoiceConnection:
        """Open a connection to *target*. It need not be ready yet."""

    @abstractmethod
    def create_player(self) -> AudioPlayer:
        """Create a fresh player."""
