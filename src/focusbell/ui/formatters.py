"""Rich renderables for session state, stats and help."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from focusbell.models.presets import Preset
from focusbell.models.session import PhaseEvent, SessionSnapshot
from focusbell.models.stats import UserStats


def _phase_style(snapshot: SessionSnapshot) -> tuple[str, str]:
    if snapshot.paused:
        return "⏸️ ", "yellow"
    if snapshot.phase == "working":
        return "🍅", "magenta" if snapshot.notifications_enabled else "red"
    return "☕", "magenta" if snapshot.notifications_enabled else "green"


def format_snapshot(snapshot: SessionSnapshot) -> Panel:
    """Session status card: phase, time left, cycle and what comes next."""
    emoji, color = _phase_style(snapshot)
    title = f"{emoji} {snapshot.phase_label}"
    if snapshot.notifications_enabled:
        title += " 🎵"

    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Remaining", snapshot.remaining_label)
    table.add_row("Cycle", snapshot.cycle_label)
    table.add_row("Next", snapshot.next_phase_label)

    return Panel(table, title=title, border_style=color, expand=False)


def format_event(event: PhaseEvent) -> Text:
    """One-line announcement of a phase transition."""
    if event.kind == "work_ended":
        text = Text("✅ Work phase over, time for a break. ", style="bold green")
        text.append(f"{event.progress} cycles done", style="dim")
    elif event.kind == "break_ended":
        text = Text("⏰ Break is over, start the next work phase. ", style="bold red")
        text.append(f"cycle {event.progress}", style="dim")
    else:
        text = Text("🎉 Session complete! ", style="bold yellow")
        text.append(f"{event.total_cycles} cycles finished", style="dim")
    return text


def format_stats(stats: UserStats) -> Table:
    table = Table(title="📊 Focus stats", show_header=True, header_style="bold magenta")
    table.add_column("Completed sessions", justify="right")
    table.add_column("Work phases", justify="right")
    table.add_column("Focus minutes", justify="right")
    table.add_row(
        str(stats.completed_sessions),
        str(stats.work_sessions),
        str(stats.focus_minutes),
    )
    return table


def format_presets(presets: list[Preset]) -> Table | Text:
    if not presets:
        return Text("No presets saved yet", style="yellow")
    table = Table(title="Presets", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Work", justify="right")
    table.add_column("Break", justify="right")
    table.add_column("Cycles", justify="right")
    for preset in presets:
        cfg = preset.config
        table.add_row(
            preset.name,
            f"{cfg.work_minutes}m",
            f"{cfg.break_minutes}m",
            str(cfg.cycles),
        )
    return table


def format_help(commands: list[tuple[str, str]], voice_available: bool) -> Group:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()
    for usage, description in commands:
        table.add_row(Text(usage), description)
    mode = "🎵 audio notifications available" if voice_available else "📝 text only"
    return Group(Text(f"🍅 focusbell ({mode})", style="bold"), table)
