"""focusbell - multi-user focus session timer with audio notifications."""

__version__ = "0.3.0"
