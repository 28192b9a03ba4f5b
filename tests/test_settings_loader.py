# Purpose: Tests for settings_loader: env override, mtime cache and safe defaults.

from core import settings_loader
from core.settings_loader import (
    get_app_config,
    get_collection_settings,
    get_settings_path,
    get_solver_settings,
    get_source_layouts,
    load_settings,
    reload_settings,
)


def test_repository_settings_load():
    reload_settings()
    settings = load_settings()
    assert isinstance(settings, dict)
    assert get_solver_settings()["max_iterations"] == 1000
    assert get_collection_settings()["source"] == "DMO"
    assert set(get_source_layouts()) == {"DMO", "DividendData"}


def test_env_override(settings_file):
    path = settings_file("app_config:\n  data_folder: /tmp/gilts\n")
    assert get_settings_path() == path
    assert get_app_config() == {"data_folder": "/tmp/gilts"}


def test_changed_file_is_reloaded(settings_file):
    settings_file("collection:\n  workers: 2\n")
    assert get_collection_settings()["workers"] == 2
    settings_file("collection:\n  workers: 6\n")
    assert get_collection_settings()["workers"] == 6


def test_missing_file_returns_empty(monkeypatch, tmp_path):
    monkeypatch.setenv("GILTS_SETTINGS_FILE", str(tmp_path / "nope.yaml"))
    reload_settings()
    assert load_settings() == {}
    assert get_solver_settings() == {}
    reload_settings()


def test_unreadable_yaml_returns_empty(settings_file):
    settings_file("solver: [unclosed\n")
    assert load_settings() == {}


def test_empty_sections_read_as_dicts(settings_file):
    settings_file("solver:\nsources:\n")
    assert get_solver_settings() == {}
    assert get_source_layouts() == {}


def test_cache_is_reused(settings_file, monkeypatch):
    settings_file("collection:\n  workers: 2\n")
    first = load_settings()

    def fail(*args, **kwargs):
        raise AssertionError("settings file re-read while unchanged")

    monkeypatch.setattr(settings_loader.yaml, "safe_load", fail)
    assert load_settings() is first
