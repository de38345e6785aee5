"""Tests for the rich renderables in focusbell.ui.formatters."""

from __future__ import annotations

from rich.console import Console

from focusbell.models.presets import Preset
from focusbell.models.session import PhaseEvent, Session, SessionConfig, SessionSnapshot
from focusbell.models.stats import UserStats
from focusbell.ui import formatters


def _render(renderable) -> str:
    console = Console(record=True, width=100)
    console.print(renderable)
    return console.export_text()


def _session(notified=False) -> Session:
    return Session.from_config("u1", "g1", "c1", SessionConfig.create(25, 5, 4), notified)


class TestFormatSnapshot:
    def test_working(self):
        panel = formatters.format_snapshot(SessionSnapshot.capture(_session(), 90_000))
        text = _render(panel)
        assert "🍅 Working" in text
        assert "1:30" in text
        assert "break" in text
        assert panel.border_style == "red"

    def test_notified_session_is_marked(self):
        panel = formatters.format_snapshot(SessionSnapshot.capture(_session(True), 0))
        assert "🎵" in _render(panel)
        assert panel.border_style == "magenta"

    def test_paused(self):
        session = _session()
        session.run_state = "paused"
        panel = formatters.format_snapshot(SessionSnapshot.capture(session, 1000))
        assert "Paused" in _render(panel)
        assert panel.border_style == "yellow"


class TestFormatEvent:
    def _event(self, kind, cycle=1):
        return PhaseEvent(kind=kind, session=_session(), cycle=cycle, total_cycles=4)

    def test_work_ended(self):
        assert "1/4 cycles done" in formatters.format_event(self._event("work_ended")).plain

    def test_break_ended(self):
        assert "cycle 2/4" in formatters.format_event(self._event("break_ended", 2)).plain

    def test_completed(self):
        text = formatters.format_event(self._event("session_completed", 4)).plain
        assert "Session complete" in text
        assert "4 cycles finished" in text


def test_format_stats():
    stats = UserStats(work_sessions=3, completed_sessions=1, focus_minutes=75)
    text = _render(formatters.format_stats(stats))
    assert "75" in text
    assert "Completed sessions" in text


def test_format_presets():
    presets = [Preset("deep", SessionConfig.create(90, 15, 2))]
    text = _render(formatters.format_presets(presets))
    assert "deep" in text
    assert "90m" in text
    assert "No presets" in _render(formatters.format_presets([]))


def test_format_help_keeps_bracketed_usage():
    group = formatters.format_help(
        [("start-session [work break cycles | preset]", "Start a session")], False
    )
    text = _render(group)
    assert "[work break cycles | preset]" in text
    assert "text only" in text
