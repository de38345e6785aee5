"""Named per-user session presets."""

from __future__ import annotations

import re
from dataclasses import dataclass

from focusbell.errors import FocusBellError
from focusbell.models.session import SessionConfig

PRESET_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]{0,31}$")


class InvalidPresetName(FocusBellError):
    default_message = (
        "Preset names must start with a letter and use at most 32 letters, "
        "digits, '-' or '_'."
    )


@dataclass(frozen=True)
class Preset:
    name: str
    config: SessionConfig

    def __post_init__(self) -> None:
        if not PRESET_NAME_PATTERN.match(self.name):
            raise InvalidPresetName()
