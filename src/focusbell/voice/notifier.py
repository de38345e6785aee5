"""Best-effort audio notifications for focus sessions.

Nothing in this module lets an exception escape ``play``: every failure
degrades to "no sound played" so timer transitions are never disturbed.
"""

from __future__ import annotations

import asyncio
import logging

from focusbell.config import VoiceSettings
from focusbell.errors import JoinFailed, JoinTimeout, NoTarget, VoiceUnavailable
from focusbell.voice.registry import ConnectionRecord, ConnectionRegistry
from focusbell.voice.sounds import SoundLibrary
from focusbell.voice.transport import (
    AudioPlayer,
    ConnectionStatus,
    PlayerStatus,
    Subscription,
    VoiceGateway,
    VoiceTarget,
    wait_for_status,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Joins voice channels per scope and plays notification sounds."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        gateway: VoiceGateway | None,
        sounds: SoundLibrary,
        settings: VoiceSettings | None = None,
    ):
        self.registry = registry
        self.gateway = gateway
        self.sounds = sounds
        self.settings = settings or VoiceSettings()
        self._recoveries: set[asyncio.Task] = set()

    @property
    def available(self) -> bool:
        return self.gateway is not None

    def is_joined(self, scope_id: str) -> bool:
        return scope_id in self.registry

    # ------------------------------------------------------------------
    # Join / leave
    # ------------------------------------------------------------------

    async def join(self, scope_id: str, target: VoiceTarget | None) -> ConnectionRecord:
        """Connect *scope_id* to *target*, replacing any existing connection."""
        if self.gateway is None:
            raise VoiceUnavailable()
        if target is None:
            raise NoTarget()

        timeout = self.settings.join_timeout
        async with self.registry.lock(scope_id):
            if scope_id in self.registry:
                self.registry.discard(scope_id)

            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout
            try:
                connection = await asyncio.wait_for(self.gateway.connect(target), timeout)
            except asyncio.TimeoutError as e:
                logger.error(
                    "Connecting to %s in scope %s took longer than %.1fs",
                    target.label,
                    scope_id,
                    timeout,
                )
                raise JoinTimeout() from e
            except Exception as e:
                logger.exception("Joining %s in scope %s failed", target.label, scope_id)
                raise JoinFailed() from e

            record = ConnectionRecord(scope_id=scope_id, connection=connection, target=target)
            self._watch(record)
            self.registry.put(record)

            try:
                await wait_for_status(
                    connection,
                    ConnectionStatus.READY,
                    timeout=max(0.0, deadline - loop.time()),
                )
            except asyncio.TimeoutError as e:
                logger.error(
                    "Voice connection for scope %s not ready after %.1fs", scope_id, timeout
                )
                self.registry.discard(scope_id, record)
                raise JoinTimeout() from e

        logger.info("Voice connection ready: %s (scope %s)", target.label, scope_id)
        return record

    async def leave(self, scope_id: str) -> bool:
        """Tear down the scope's connection and player."""
        async with self.registry.lock(scope_id):
            return self.registry.discard(scope_id) is not None

    def _watch(self, record: ConnectionRecord) -> None:
        def on_disconnected() -> None:
            logger.warning("Voice connection for scope %s disconnected", record.scope_id)
            task = asyncio.get_running_loop().create_task(self._recover(record))
            self._recoveries.add(task)
            task.add_done_callback(self._recoveries.discard)

        def on_error(error: Exception) -> None:
            logger.error("Voice connection error in scope %s: %s", record.scope_id, error)
            self.registry.discard(record.scope_id, record)

        record.listen(ConnectionStatus.DISCONNECTED.value, on_disconnected)
        record.listen("error", on_error)

    async def _recover(self, record: ConnectionRecord) -> None:
        """Give a dropped connection a bounded chance to start reconnecting."""
        try:
            await wait_for_status(
                record.connection,
                ConnectionStatus.SIGNALLING,
                ConnectionStatus.CONNECTING,
                ConnectionStatus.READY,
                timeout=self.settings.reconnect_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Reconnect failed for scope %s, releasing connection", record.scope_id
            )
            self.registry.discard(record.scope_id, record)
        else:
            logger.info("Voice connection for scope %s is reconnecting", record.scope_id)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def play(self, scope_id: str, sound_id: str) -> bool:
        """Play *sound_id* in the scope's channel. Returns False on any failure."""
        if not self.available:
            return False

        record = self.registry.get(scope_id)
        if record is None:
            logger.debug("No voice connection for scope %s", scope_id)
            return False

        if record.status != ConnectionStatus.READY:
            logger.info(
                "Voice connection for scope %s is %s, waiting for ready",
                scope_id,
                record.status.value,
            )
            try:
                await wait_for_status(
                    record.connection,
                    ConnectionStatus.READY,
                    timeout=self.settings.ready_recovery_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("Voice connection for scope %s did not recover", scope_id)
                return False

        path = self.sounds.resolve(sound_id)
        if path is None:
            logger.warning("Sound file not found: %s", self.sounds.path_for(sound_id))
            return False

        player: AudioPlayer | None = None
        subscription: Subscription | None = None
        try:
            player = self.gateway.create_player()
            finished = self._watch_playback(player)
            subscription = record.connection.subscribe(player)
            record.replace_player(player)
            player.play(path, self.settings.volume)
        except Exception:
            logger.exception("Could not start playback of %s in scope %s", sound_id, scope_id)
            _detach(player, subscription)
            return False

        logger.info("Playing %s in scope %s", sound_id, scope_id)
        return await self._await_playback(player, finished, subscription, sound_id)

    def _watch_playback(self, player: AudioPlayer) -> asyncio.Future[bool]:
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def on_idle() -> None:
            if not future.done():
                future.set_result(True)

        def on_error(error: Exception) -> None:
            logger.error("Playback error: %s", error)
            if not future.done():
                future.set_result(False)

        player.once(PlayerStatus.IDLE.value, on_idle)
        player.once("error", on_error)
        return future

    async def _await_playback(
        self,
        player: AudioPlayer,
        finished: asyncio.Future[bool],
        subscription: Subscription | None,
        sound_id: str,
    ) -> bool:
        try:
            result = await asyncio.wait_for(finished, self.settings.playback_timeout)
        except asyncio.TimeoutError:
            logger.warning("Playback of %s timed out", sound_id)
            result = False
        finally:
            _detach(player, subscription)
        if result:
            logger.debug("Playback of %s finished", sound_id)
        return result

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def health_sweep(self) -> list[str]:
        """Log every connection's status and release dead ones."""
        removed = []
        for record in self.registry:
            logger.info("Scope %s voice status: %s", record.scope_id, record.status.value)
            if record.is_stale:
                logger.warning("Releasing stale voice connection for scope %s", record.scope_id)
                self.registry.discard(record.scope_id, record)
                removed.append(record.scope_id)
        return removed

    async def shutdown(self) -> None:
        for task in list(self._recoveries):
            task.cancel()
        if self._recoveries:
            await asyncio.gather(*self._recoveries, return_exceptions=True)
        released = self.registry.clear()
        logger.info("Released %d voice connection(s)", len(released))


def _detach(player: AudioPlayer | None, subscription: Subscription | None) -> None:
    """Common cleanup for every playback outcome."""
    if player is not None:
        player.remove_all_listeners()
    if subscription is not None:
        try:
            subscription.unsubscribe()
        except Exception:
            logger.exception("Unsubscribing player failed")
