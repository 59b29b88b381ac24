"""Tests for the JSON-backed settings manager."""

from __future__ import annotations

import json
import os

import pytest

from graphtable.errors import SettingsLoadError, SettingsValidationError
from graphtable.settings import DEFAULT_SETTINGS, SettingsManager


def test_load_writes_defaults_when_missing(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)

    manager.load()

    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_SETTINGS
    assert manager.get("table.group_by_field") == "name"
    assert manager.get("table.missing", "fallback") == "fallback"


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"table": {"sort_field": "age"}}), encoding="utf-8")
    manager = SettingsManager(path)

    manager.load()

    assert manager.get("table.sort_field") == "age"
    assert manager.get("table.group_by_field") == "name"
    assert manager.get("fetch.cache_entries") == DEFAULT_SETTINGS["fetch"]["cache_entries"]


def test_invalid_value_raises_validation_error(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"fetch": {"timeout_sec": "soon"}}), encoding="utf-8")

    with pytest.raises(SettingsValidationError):
        SettingsManager(path).load()


def test_broken_json_raises_load_error(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SettingsLoadError):
        SettingsManager(path).load()


def test_load_or_default_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    manager = SettingsManager(path)

    manager.load_or_default()

    assert manager.snapshot() == DEFAULT_SETTINGS


def test_set_persists_and_notifies(qtbot, tmp_path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.load()

    with qtbot.waitSignal(manager.settingsChanged) as blocker:
        manager.set("table.subtitles_enabled", True)

    assert blocker.args == ["table.subtitles_enabled", True]
    assert json.loads(path.read_text(encoding="utf-8"))["table"]["subtitles_enabled"] is True


def test_rejected_set_leaves_settings_untouched(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()

    with pytest.raises(SettingsValidationError):
        manager.set("fetch.cache_entries", -5)

    assert manager.get("fetch.cache_entries") == DEFAULT_SETTINGS["fetch"]["cache_entries"]


@pytest.mark.skipif(os.name == "nt", reason="XDG paths are POSIX only")
def test_default_path_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setattr("graphtable.settings.manager.sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert SettingsManager().path == tmp_path / "graphtable" / "settings.json"
