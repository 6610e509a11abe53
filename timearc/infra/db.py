"""
SQLAlchemy database models and configuration.

Architecture Decision: Why SQLAlchemy?
- Provides ORM for cleaner code and prevents SQL injection
- Supports async operations so ledger writes never block the timer thread
- The ledger is only reached through the repository, so swapping SQLite for
  another backend stays local to this package
"""

import datetime
from pathlib import Path
from typing import Optional
import os

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, Date, DateTime, Float, UniqueConstraint


# Base class for all models
class Base(DeclarativeBase):
    pass


class DailyTimeEntryModel(Base):
    """SQLAlchemy model for DailyTimeEntry entity"""
    __tablename__ = "daily_time_entries"
    __table_args__ = (
        UniqueConstraint("day", "task_name", name="uq_daily_time_entries_day_task"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    task_name: Mapped[str] = mapped_column(String(200), nullable=False)
    seconds: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now, nullable=False
    )


class DatabaseEngine:
    """
    Manages database connection and session lifecycle.

    Singleton pattern ensures only one engine exists per application.
    """
    _instance: Optional['DatabaseEngine'] = None

    def __init__(self, db_url: str):
        self.engine = create_async_engine(db_url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    @classmethod
    def get_instance(cls, db_url: Optional[str] = None) -> 'DatabaseEngine':
        """Get or create the database engine instance"""
        if cls._instance is None:
            if db_url is None:
                # Default: Store in user's AppData on Windows, ~/.local/share elsewhere
                if os.name == 'nt':  # Windows
                    data_dir = Path(os.getenv('APPDATA')) / 'TimeArc'
                else:  # Linux/Mac
                    data_dir = Path.home() / '.local' / 'share' / 'timearc'

                data_dir.mkdir(parents=True, exist_ok=True)
                db_path = data_dir / 'timearc.db'
                db_url = f"sqlite+aiosqlite:///{db_path}"

            cls._instance = cls(db_url)
        return cls._instance

    @classmethod
    async def reset_instance(cls) -> None:
        """Dispose the engine and forget the singleton (tests, settings reload)"""
        if cls._instance is not None:
            await cls._instance.engine.dispose()
            cls._instance = None

    async def create_tables(self):
        """Create all tables in the database"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def get_session(self) -> AsyncSession:
        """Get a new database session"""
        return self.session_factory()


# Convenience functions
def get_engine(db_url: Optional[str] = None) -> DatabaseEngine:
    """Get the database engine instance"""
    return DatabaseEngine.get_instance(db_url)


async def init_db(db_url: Optional[str] = None):
    """Initialize the database (create tables)"""
    engine = get_engine(db_url)
    await engine.create_tables()
