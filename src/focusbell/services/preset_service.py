"""Preset service - named session configurations and argument resolution."""

from __future__ import annotations

from collections.abc import Sequence

from focusbell.config import TimerSettings
from focusbell.errors import InvalidConfig, PresetNotFound
from focusbell.models.presets import Preset
from focusbell.models.session import SessionConfig


class PresetService:
    """Stores per-user presets and turns command arguments into a config."""

    def __init__(self, defaults: TimerSettings | None = None):
        self.defaults = defaults or TimerSettings()
        self._presets: dict[str, dict[str, Preset]] = {}

    def save(self, user_id: str, name: str, config: SessionConfig) -> Preset:
        preset = Preset(name=name.lower(), config=config)
        self._presets.setdefault(user_id, {})[preset.name] = preset
        return preset

    def get(self, user_id: str, name: str) -> Preset:
        preset = self._presets.get(user_id, {}).get(name.lower())
        if preset is None:
            raise PresetNotFound(name)
        return preset

    def delete(self, user_id: str, name: str) -> None:
        presets = self._presets.get(user_id, {})
        if name.lower() not in presets:
            raise PresetNotFound(name)
        del presets[name.lower()]

    def list_presets(self, user_id: str) -> list[Preset]:
        return sorted(self._presets.get(user_id, {}).values(), key=lambda p: p.name)

    def default_config(self) -> SessionConfig:
        return SessionConfig.create(
            self.defaults.default_work_minutes,
            self.defaults.default_break_minutes,
            self.defaults.default_cycles,
        )

    def resolve(self, user_id: str, args: Sequence[str]) -> SessionConfig:
        """Resolve start arguments: none, a preset name, or work/break/cycles."""
        if not args:
            return self.default_config()
        if len(args) == 1:
            return self.get(user_id, args[0]).config
        if len(args) == 3:
            return SessionConfig.parse(*args)
        raise InvalidConfig()
