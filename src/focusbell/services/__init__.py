"""Services module for focusbell - orchestration and command handling."""

from .commands import CommandDispatcher, Reply
from .maintenance import MaintenanceRunner
from .orchestrator import CommandContext, SessionOrchestrator
from .preset_service import PresetService
from .stats_service import StatsService

__all__ = [
    "CommandContext",
    "CommandDispatcher",
    "MaintenanceRunner",
    "PresetService",
    "Reply",
    "SessionOrchestrator",
    "StatsService",
]
