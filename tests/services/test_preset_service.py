"""Tests for PresetService."""

import pytest

from focusbell.config import TimerSettings
from focusbell.errors import InvalidConfig, PresetNotFound
from focusbell.models.presets import InvalidPresetName
from focusbell.models.session import SessionConfig
from focusbell.services.preset_service import PresetService


@pytest.fixture()
def presets() -> PresetService:
    return PresetService()


def test_save_and_get_is_case_insensitive(presets):
    presets.save("u1", "Deep", SessionConfig.create(90, 15, 2))
    assert presets.get("u1", "DEEP").config.work_minutes == 90


def test_presets_are_per_user(presets):
    presets.save("u1", "deep", SessionConfig.create(90, 15, 2))
    with pytest.raises(PresetNotFound):
        presets.get("u2", "deep")


def test_save_overwrites(presets):
    presets.save("u1", "deep", SessionConfig.create(90, 15, 2))
    presets.save("u1", "deep", SessionConfig.create(45, 10, 3))
    assert [p.config.cycles for p in presets.list_presets("u1")] == [3]


def test_list_is_sorted(presets):
    for name in ("zen", "alpha", "mid"):
        presets.save("u1", name, SessionConfig.create(25, 5, 4))
    assert [p.name for p in presets.list_presets("u1")] == ["alpha", "mid", "zen"]


def test_delete(presets):
    presets.save("u1", "deep", SessionConfig.create(90, 15, 2))
    presets.delete("u1", "deep")
    assert presets.list_presets("u1") == []
    with pytest.raises(PresetNotFound):
        presets.delete("u1", "deep")


def test_invalid_name(presets):
    with pytest.raises(InvalidPresetName):
        presets.save("u1", "9lives", SessionConfig.create(25, 5, 4))


class TestResolve:
    def test_no_arguments_uses_configured_defaults(self):
        service = PresetService(TimerSettings(default_work_minutes=50))
        assert service.resolve("u1", []) == SessionConfig.create(50, 5, 4)

    def test_three_arguments(self, presets):
        assert presets.resolve("u1", ["30", "10", "3"]) == SessionConfig.create(30, 10, 3)

    @pytest.mark.parametrize("args", [["25", "5"], ["1", "2", "3", "4"]])
    def test_wrong_argument_count(self, presets, args):
        with pytest.raises(InvalidConfig):
            presets.resolve("u1", args)

    def test_unknown_preset(self, presets):
        with pytest.raises(PresetNotFound):
            presets.resolve("u1", ["nothing"])
