"""Shared fixtures: SQLite models, a controllable clock and a guard registry."""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timedelta

import pytest
from sqlalchemy import Column, DateTime, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from model_tracker.application.tracker import ModelTracker, reset_tracker
from model_tracker.config import Settings, reset_settings_cache
from model_tracker.infrastructure.database import reset_database_state
from model_tracker.infrastructure.identity import GuardRegistry, get_guard_registry
from model_tracker.utils import get_app_timezone

T0 = datetime(2024, 1, 1, 9, 0, 0)


class ModelBase(DeclarativeBase):
    """Declarative base for the models used in tests."""


class UserModel(ModelBase):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)


class PostModel(ModelBase):
    """Table carrying every tracking column plus the soft delete marker."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)
    deleted_by = Column(Integer, nullable=True)
    deleted_at = Column(DateTime, nullable=True)


class NoteModel(ModelBase):
    """Table without timestamp columns nor soft deletes."""

    __tablename__ = "notes"

    id = Column(Integer, primary_key=True)
    title = Column(String(100), nullable=False)
    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)


class MemoModel(ModelBase):
    """Table with timestamps only."""

    __tablename__ = "memos"

    id = Column(Integer, primary_key=True)
    description = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)


class ArticleModel(ModelBase):
    """Table whose tracking columns use custom names."""

    __tablename__ = "articles"
    __tracking_columns__ = {
        "created_at": "inserted_at",
        "updated_at": "modified_at",
        "created_by": "author_id",
        "updated_by": "editor_id",
        "deleted_by": "remover_id",
    }

    id = Column(Integer, primary_key=True)
    title = Column(String(100), nullable=False)
    inserted_at = Column(DateTime, nullable=True)
    modified_at = Column(DateTime, nullable=True)
    author_id = Column(Integer, nullable=True)
    editor_id = Column(Integer, nullable=True)
    remover_id = Column(Integer, nullable=True)
    deleted_at = Column(DateTime, nullable=True)


class StampedModel(ModelBase):
    """Table whose ``updated_at`` is bumped by an ``onupdate`` default."""

    __tablename__ = "stamped"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    updated_at = Column(DateTime, nullable=True, onupdate=lambda: datetime(2099, 1, 1))
    deleted_by = Column(Integer, nullable=True)
    deleted_at = Column(DateTime, nullable=True)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


@pytest.fixture(autouse=True)
def _reset_caches() -> Generator[None, None, None]:
    """Start and finish every test with fresh settings and singletons."""

    reset_settings_cache()
    reset_tracker()
    get_guard_registry.cache_clear()
    get_app_timezone.cache_clear()
    yield
    reset_database_state()
    reset_settings_cache()
    reset_tracker()
    get_guard_registry.cache_clear()
    get_app_timezone.cache_clear()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ModelBase.metadata.create_all(bind=engine)
    yield engine
    ModelBase.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, environment="testing")


@pytest.fixture()
def registry() -> GuardRegistry:
    return GuardRegistry(["web", "api"])


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture()
def tracker(registry: GuardRegistry, clock: FixedClock, settings: Settings) -> ModelTracker:
    return ModelTracker(registry, clock, settings)
