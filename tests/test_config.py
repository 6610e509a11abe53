"""
Tests for settings loading.
"""

import datetime

import yaml

from timearc.infra.config import Settings


def test_defaults(tmp_path):
    settings = Settings(config_dir=tmp_path / "cfg", data_dir=tmp_path / "data")

    assert (tmp_path / "cfg").is_dir()
    assert (tmp_path / "data").is_dir()
    assert settings.preferences.default_task_name == "Default"
    assert settings.preferences.tick_interval_ms == 10
    assert settings.get_db_url() == f"sqlite+aiosqlite:///{tmp_path / 'data' / 'timearc.db'}"
    assert settings.get_timezone() is None


def test_yaml_preferences(tmp_path):
    (tmp_path / "settings.yaml").write_text(yaml.dump({
        "default_task_name": "Inbox",
        "week_start": 6,
        "timezone": "Europe/Berlin",
        "holiday_country": "DE",
    }), encoding="utf-8")

    settings = Settings(config_dir=tmp_path, data_dir=tmp_path)

    assert settings.preferences.default_task_name == "Inbox"
    assert settings.preferences.week_start == 6
    offset = settings.get_timezone().utcoffset(datetime.datetime(2026, 7, 1))
    assert offset == datetime.timedelta(hours=2)


def test_save_preferences_round_trip(tmp_path):
    settings = Settings(config_dir=tmp_path, data_dir=tmp_path)
    settings.preferences.tick_interval_ms = 50
    settings.save_preferences()

    reloaded = Settings(config_dir=tmp_path, data_dir=tmp_path)
    assert reloaded.preferences.tick_interval_ms == 50


def test_env_overrides_database_url(tmp_path, monkeypatch):
    monkeypatch.setenv("TIMEARC_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    settings = Settings(config_dir=tmp_path, data_dir=tmp_path)
    assert settings.get_db_url() == "sqlite+aiosqlite:///:memory:"


def test_db_path_follows_configured_url(tmp_path, monkeypatch):
    settings = Settings(config_dir=tmp_path, data_dir=tmp_path)
    assert settings.get_db_path() == tmp_path / "timearc.db"

    custom = tmp_path / "elsewhere" / "ledger.db"
    monkeypatch.setenv("TIMEARC_DATABASE_URL", f"sqlite+aiosqlite:///{custom}")
    assert Settings(config_dir=tmp_path, data_dir=tmp_path).get_db_path() == custom

    monkeypatch.setenv("TIMEARC_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    assert Settings(config_dir=tmp_path, data_dir=tmp_path).get_db_path() is None
