"""Lookup of notification sound files."""

from __future__ import annotations

from pathlib import Path

START = "start"
WORK_END = "work_end"
BREAK_END = "break_end"
COMPLETE = "complete"

SOUND_IDS = (START, WORK_END, BREAK_END, COMPLETE)


class SoundLibrary:
    """Resolves sound IDs such as ``work_end`` to files in a directory."""

    def __init__(self, sounds_dir: Path | None, extension: str = ".mp3"):
        self.sounds_dir = sounds_dir
        self.extension = extension if extension.startswith(".") else f".{extension}"

    def path_for(self, sound_id: str) -> Path | None:
        if self.sounds_dir is None:
            return None
        return self.sounds_dir / f"{sound_id}{self.extension}"

    def resolve(self, sound_id: str) -> Path | None:
        """Return the sound file for *sound_id*, or None if it is missing."""
        path = self.path_for(sound_id)
        if path is None or not path.is_file():
            return None
        return path

    def missing(self) -> list[str]:
        return [s for s in SOUND_IDS if self.resolve(s) is None]
