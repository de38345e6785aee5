"""Audio notification delivery."""

from .notifier import NotificationService
from .registry import ConnectionRecord, ConnectionRegistry
from .sounds import SoundLibrary
from .transport import (
    AudioPlayer,
    ConnectionStatus,
    PlayerStatus,
    VoiceConnection,
    VoiceGateway,
    VoiceTarget,
)

__all__ = [
    "AudioPlayer",
    "ConnectionRecord",
    "ConnectionRegistry",
    "ConnectionStatus",
    "NotificationService",
    "PlayerStatus",
    "SoundLibrary",
    "VoiceConnection",
    "VoiceGateway",
    "VoiceTarget",
]
