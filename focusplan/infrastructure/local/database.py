"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
All timestamps are stored as naive UTC.
"""

from datetime import datetime
from functools import lru_cache
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    text,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from focusplan.core.config import get_settings
from focusplan.utils.datetime_utils import UTC, ensure_utc


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for storage."""
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC from storage -> aware UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


# ===========================================
# ORM Models
# ===========================================


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    notes = Column(Text, nullable=True)
    priority = Column(String(10), default="med")
    estimated_minutes = Column(Integer, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), default="todo", index=True)
    actual_minutes_total = Column(Float, default=0.0, nullable=False)
    sessions_count = Column(Integer, default=0, nullable=False)
    completed_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class ProposalORM(Base):
    """Day proposal ORM model. Blocks live in planned_blocks."""

    __tablename__ = "proposals"
    __table_args__ = (
        Index("uq_proposals_day_sequence", "user_id", "plan_date", "sequence", unique=True),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    plan_date = Column(Date, nullable=False, index=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    status = Column(String(20), nullable=False, default="proposed", index=True)
    # Per user/day counter; the highest value is the latest proposal
    sequence = Column(Integer, nullable=False, default=0)
    unplaceable_json = Column(JSON, nullable=True, default=list)
    busy_json = Column(JSON, nullable=True, default=list)
    free_minutes = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)
    expires_at = Column(DateTime, nullable=False)


class PlannedBlockORM(Base):
    """Planned block ORM model. ``version`` backs compare-and-set updates."""

    __tablename__ = "planned_blocks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    proposal_id = Column(String(36), ForeignKey("proposals.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    task_id = Column(String(36), nullable=False, index=True)
    title = Column(String(500), nullable=False, default="")
    plan_date = Column(Date, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    start_ts = Column(DateTime, nullable=False)
    end_ts = Column(DateTime, nullable=False)
    state = Column(String(20), nullable=False, default="proposed", index=True)
    event_id = Column(String(255), nullable=True)
    reason = Column(String(500), nullable=True)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class ExecutionSessionORM(Base):
    """Execution session ORM model."""

    __tablename__ = "task_sessions"
    __table_args__ = (
        # At most one open session per user/task
        Index(
            "uq_task_sessions_active",
            "user_id",
            "task_id",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    task_id = Column(String(36), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False, index=True)
    ended_at = Column(DateTime, nullable=True)


class CalendarEventORM(Base):
    """Calendar event ORM model used by the local calendar provider."""

    __tablename__ = "calendar_events"

    id = Column(String(64), primary_key=True, default=lambda: f"local-{uuid4()}")
    user_id = Column(String(255), nullable=False, index=True)
    summary = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    start_ts = Column(DateTime, nullable=False, index=True)
    end_ts = Column(DateTime, nullable=False)
    extended_private = Column(JSON, nullable=True, default=dict)
    created_at = Column(DateTime, default=_utcnow)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=False)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

