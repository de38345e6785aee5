"""Text command dispatcher.

Turns whitespace-split command tokens from a chat adapter (or the console
runner) into orchestrator calls. This is the outermost error boundary:
domain errors become user-facing replies and anything unexpected is logged
and answered with a generic message.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from rich.console import RenderableType

from focusbell.errors import FocusBellError, InvalidConfig
from focusbell.models.session import SessionConfig
from focusbell.services.orchestrator import CommandContext, SessionOrchestrator
from focusbell.ui import formatters

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "❌ Something went wrong. Please try again in a moment."

CONTROLS = ("pause", "resume", "stop")


@dataclass(frozen=True)
class Reply:
    """Response to a command: a message, optionally with a rich renderable."""

    message: str = ""
    body: RenderableType | None = None
    ok: bool = True

    @classmethod
    def error(cls, message: str) -> "Reply":
        return cls(message=f"❌ {message}", ok=False)


Handler = Callable[[CommandContext, list[str]], Awaitable[Reply]]


class CommandDispatcher:
    """Routes command tokens to handlers."""

    def __init__(self, orchestrator: SessionOrchestrator):
        self.orchestrator = orchestrator
        self._handlers: dict[str, Handler] = {}
        self._help: list[tuple[str, str]] = []

        self._register(self._start, "start-session", "pomo", "pomodoro",
                       usage="start-session [work break cycles | preset]",
                       description="Start a session (default 25/5/4)")
        self._register(self._notified_start, "notified-start", "vpomo", "voice-pomo",
                       usage="notified-start [work break cycles | preset]",
                       description="Start a session with audio notifications")
        self._register(self._stop, "stop-session", "stop",
                       usage="stop-session", description="Stop your session")
        self._register(self._status, "status",
                       usage="status", description="Show your session")
        self._register(self._stats, "stats",
                       usage="stats", description="Show your statistics")
        self._register(self._join, "join-audio", "join",
                       usage="join-audio", description="Join your voice channel")
        self._register(self._leave, "leave-audio", "leave",
                       usage="leave-audio", description="Leave the voice channel")
        self._register(self._preset, "preset",
                       usage="preset save NAME W B C | list | delete NAME",
                       description="Manage presets")
        self._register(self._show_help, "help",
                       usage="help", description="Show this help")

    def _register(self, handler: Handler, *names: str, usage: str, description: str) -> None:
        for name in names:
            self._handlers[name] = handler
        self._help.append((usage, description))

    @staticmethod
    def parse(content: str) -> tuple[str, list[str]] | None:
        tokens = content.strip().split()
        if not tokens:
            return None
        return tokens[0].lower().lstrip("!"), tokens[1:]

    async def dispatch(self, ctx: CommandContext, content: str) -> Reply | None:
        """Run a text command. Returns None for unknown commands."""
        parsed = self.parse(content)
        if parsed is None:
            return None
        name, args = parsed
        handler = self._handlers.get(name)
        if handler is None:
            return None
        return await self._guard(name, ctx, handler(ctx, args))

    async def control(self, ctx: CommandContext, action: str) -> Reply:
        """Handle a pause/resume/stop control for the caller's session."""
        if action not in CONTROLS:
            return Reply.error(f"Unknown control: {action}")
        return await self._guard(action, ctx, self._control(ctx, action))

    async def _guard(self, name: str, ctx: CommandContext, pending: Awaitable[Reply]) -> Reply:
        try:
            return await pending
        except FocusBellError as e:
            return Reply.error(e.message)
        except Exception:
            logger.exception("Command %r from user %s failed", name, ctx.user_id)
            return Reply(message=GENERIC_FAILURE, ok=False)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _start(self, ctx: CommandContext, args: list[str], notified: bool = False) -> Reply:
        session = self.orchestrator.start_session(ctx, args, notified=notified)
        snapshot = self.orchestrator.snapshot(ctx.user_id)
        prefix = "🎵🍅" if notified else "🍅"
        return Reply(
            message=f"{prefix} Focus session started! {session.describe()}",
            body=formatters.format_snapshot(snapshot),
        )

    async def _notified_start(self, ctx: CommandContext, args: list[str]) -> Reply:
        return await self._start(ctx, args, notified=True)

    async def _stop(self, ctx: CommandContext, args: list[str]) -> Reply:
        self.orchestrator.stop(ctx.user_id)
        return Reply(message="🛑 Focus session stopped.")

    async def _status(self, ctx: CommandContext, args: list[str]) -> Reply:
        snapshot = self.orchestrator.snapshot(ctx.user_id)
        return Reply(body=formatters.format_snapshot(snapshot))

    async def _stats(self, ctx: CommandContext, args: list[str]) -> Reply:
        stats = self.orchestrator.stats.get(ctx.user_id)
        return Reply(body=formatters.format_stats(stats))

    async def _join(self, ctx: CommandContext, args: list[str]) -> Reply:
        record = await self.orchestrator.join_audio(ctx.scope_id, ctx.voice_target)
        return Reply(
            message=f'✅ Joined voice channel "{record.target.label}". '
            "Use notified-start for sessions with sound."
        )

    async def _leave(self, ctx: CommandContext, args: list[str]) -> Reply:
        stopped = await self.orchestrator.leave_audio(ctx.scope_id)
        message = "✅ Left the voice channel."
        if stopped:
            message += f" Stopped {len(stopped)} session(s) with audio notifications."
        return Reply(message=message)

    async def _preset(self, ctx: CommandContext, args: list[str]) -> Reply:
        presets = self.orchestrator.presets
        action = args[0].lower() if args else "list"

        if action == "list":
            return Reply(body=formatters.format_presets(presets.list_presets(ctx.user_id)))
        if action == "save" and len(args) == 5:
            preset = presets.save(ctx.user_id, args[1], SessionConfig.parse(*args[2:]))
            return Reply(message=f'✅ Saved preset "{preset.name}": {preset.config.describe()}')
        if action == "delete" and len(args) == 2:
            presets.delete(ctx.user_id, args[1])
            return Reply(message=f'🗑️ Deleted preset "{args[1].lower()}".')
        raise InvalidConfig("Usage: preset save NAME W B C | preset list | preset delete NAME")

    async def _show_help(self, ctx: CommandContext, args: list[str]) -> Reply:
        return Reply(
            body=formatters.format_help(self._help, self.orchestrator.notifier.available)
        )

    async def _control(self, ctx: CommandContext, action: str) -> Reply:
        if action == "stop":
            self.orchestrator.stop(ctx.user_id)
            return Reply(message="🛑 Focus session stopped.")
        if action == "pause":
            self.orchestrator.pause(ctx.user_id)
        else:
            self.orchestrator.resume(ctx.user_id)
        snapshot = self.orchestrator.snapshot(ctx.user_id)
        return Reply(body=formatters.format_snapshot(snapshot))
