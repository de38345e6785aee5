"""Per-scope registry of audio connections and their current players."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from focusbell.voice.transport import (
    AudioPlayer,
    ConnectionStatus,
    Listener,
    VoiceConnection,
    VoiceTarget,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ConnectionRecord:
    """Managed wrapper around one scope's voice connection."""

    scope_id: str
    connection: VoiceConnection
    target: VoiceTarget
    player: AudioPlayer | None = None
    listeners: list[tuple[str, Listener]] = field(default_factory=list)
    torn_down: bool = False

    @property
    def status(self) -> ConnectionStatus:
        return self.connection.status

    @property
    def is_stale(self) -> bool:
        return self.status in (ConnectionStatus.DISCONNECTED, ConnectionStatus.DESTROYED)

    def listen(self, event: str, listener: Listener) -> None:
        self.connection.on(event, listener)
        self.listeners.append((event, listener))

    def replace_player(self, player: AudioPlayer | None) -> None:
        """Install *player*, stopping and detaching the previous one."""
        old, self.player = self.player, player
        if old is not None and old is not player:
            _release_player(old, self.scope_id)

    def teardown(self) -> None:
        """Detach every listener, stop the player and destroy the connection."""
        if self.torn_down:
            return
        self.torn_down = True
        self.replace_player(None)

        for event, listener in self.listeners:
            self.connection.off(event, listener)
        self.listeners.clear()
        try:
            self.connection.remove_all_listeners()
            if self.connection.status != ConnectionStatus.DESTROYED:
                self.connection.destroy()
        except Exception:
            logger.exception("Failed to destroy connection for scope %s", self.scope_id)


def _release_player(player: AudioPlayer, scope_id: str) -> None:
    try:
        player.remove_all_listeners()
        player.stop()
    except Exception:
        logger.exception("Failed to stop player for scope %s", scope_id)


class ConnectionRegistry:
    """Maps scope IDs to at most one ConnectionRecord each."""

    def __init__(self) -> None:
        self._records: dict[str, ConnectionRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, scope_id: str) -> asyncio.Lock:
        """Lock serialising join/leave for one scope."""
        lock = self._locks.get(scope_id)
        if lock is None:
            lock = self._locks[scope_id] = asyncio.Lock()
        return lock

    def get(self, scope_id: str) -> ConnectionRecord | None:
        return self._records.get(scope_id)

    def put(self, record: ConnectionRecord) -> None:
        """Register *record*, tearing down any record it supersedes."""
        old = self._records.get(record.scope_id)
        if old is not None and old is not record:
            old.teardown()
        self._records[record.scope_id] = record

    def discard(self, scope_id: str, record: ConnectionRecord | None = None) -> ConnectionRecord | None:
        """Tear down and remove the scope's record.

        When *record* is given, only that exact record is removed; a newer
        record for the scope is left alone.
        """
        current = self._records.get(scope_id)
        if current is None or (record is not None and current is not record):
            if record is not None:
                record.teardown()
            return None
        del self._records[scope_id]
        current.teardown()
        logger.info("Released voice resources for scope %s", scope_id)
        return current

    def clear(self) -> list[ConnectionRecord]:
        records = list(self._records.values())
        self._records.clear()
        for record in records:
            record.teardown()
        return records

    def __contains__(self, scope_id: object) -> bool:
        return scope_id in self._records

    def __iter__(self) -> Iterator[ConnectionRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)
