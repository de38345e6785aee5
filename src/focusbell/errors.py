"""Exception hierarchy for focusbell.

Every error carries a message that is safe to show to the user who issued
the command.
"""

from __future__ import annotations


class FocusBellError(Exception):
    """Base class for user-facing focusbell errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------


class InvalidConfig(FocusBellError):
    default_message = (
        "Invalid values. Work time must be 1-180 minutes, break time 1-60 "
        "minutes and cycles 1-20."
    )


class PresetNotFound(FocusBellError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Preset "{name}" was not found.')


# ---------------------------------------------------------------------------
# Session state conflicts
# ---------------------------------------------------------------------------


class AlreadyActive(FocusBellError):
    default_message = (
        "A focus session is already running. Stop it before starting a new one."
    )


class NotRunning(FocusBellError):
    default_message = "The session is already paused."


class NotPaused(FocusBellError):
    default_message = "The session is not paused."


class NoActiveSession(FocusBellError):
    default_message = "You have no active session."


# ---------------------------------------------------------------------------
# Audio transport errors
# ---------------------------------------------------------------------------


class VoiceUnavailable(FocusBellError):
    default_message = "Audio notifications are not available on this bot."


class NotJoined(FocusBellError):
    default_message = "The bot is not in a voice channel. Use join-audio first."


class NoTarget(FocusBellError):
    default_message = "Join a voice channel first."


class JoinFailed(FocusBellError):
    default_message = "Failed to join the voice channel."


class JoinTimeout(FocusBellError):
    default_message = "Timed out while connecting to the voice channel. Try again."
