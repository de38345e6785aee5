"""Rich consoles shared by the focusbell CLI."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(stderr: bool = False) -> Console:
    """Replies go to stdout; startup failures go to stderr."""
    return Console(stderr=stderr, highlight=False)
