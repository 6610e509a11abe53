"""
Settings for Time Arc.

Values come from defaults, then TIMEARC_* environment variables (or a .env
file). Tracker preferences live separately in settings.yaml inside the config
directory so they can be edited and saved back at runtime.
"""

import datetime
import logging
import os
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo
import yaml

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from timearc.domain.models import TrackerPreferences


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
PREFERENCES_FILE = "settings.yaml"
DB_FILENAME = "timearc.db"


def _user_dir(kind: str) -> Path:
    """Per-user base directory for 'config' or 'data' files"""
    if os.name == 'nt':
        return Path(os.getenv('APPDATA'))
    if kind == 'config':
        return Path.home() / '.config'
    return Path.home() / '.local' / 'share'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='TIMEARC_',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    app_name: str = "TimeArc"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    preferences: TrackerPreferences = TrackerPreferences()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.config_dir = self.config_dir or _user_dir('config') / self.app_name.lower()
        self.data_dir = self.data_dir or _user_dir('data') / self.app_name.lower()
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load_preferences()

    @property
    def preferences_file(self) -> Path:
        return self.config_dir / PREFERENCES_FILE

    def _load_preferences(self):
        if self.preferences_file.exists():
            with open(self.preferences_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
            if data:
                self.preferences = TrackerPreferences(**data)

    def save_preferences(self):
        """Write the current preferences to settings.yaml"""
        with open(self.preferences_file, 'w', encoding='utf-8') as f:
            yaml.dump(self.preferences.model_dump(), f, default_flow_style=False)

    def get_db_url(self) -> str:
        """Configured database URL, or the SQLite file in data_dir"""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / DB_FILENAME}"

    def get_db_path(self) -> Optional[Path]:
        """
        File backing the ledger.

        Returns:
            The SQLite file path, or None when the URL is not a file-based
            SQLite database (another backend or :memory:)
        """
        url = make_url(self.get_db_url())
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return None
        return Path(url.database)

    def get_timezone(self) -> Optional[datetime.tzinfo]:
        """Zone used for day boundaries, None meaning host local time"""
        if self.preferences.timezone:
            return ZoneInfo(self.preferences.timezone)
        return None


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once for the application"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Re-read environment and settings.yaml"""
    global _settings
    _settings = Settings()
    return _settings
