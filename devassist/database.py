"""
Database configuration and SQLAlchemy ORM models.

Provides:
- Engine factory (in-memory pooling)
- UTCDateTime column type
- SQLAlchemy ORM models for CodeSnippet, ErrorPattern and DeveloperContext
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import (
    create_engine,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

# Base class for all ORM models
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ============================================================================
# Database Engine
# ============================================================================


def create_db_engine(database_url: str) -> Engine:
    """
    Create a database engine for the given URL.

    In-memory SQLite databases share a single connection so that every
    session sees the same tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    is_sqlite = database_url.startswith("sqlite")

    kwargs: Dict[str, Any] = {}
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    else:
        # Connection pooling for production
        kwargs["pool_size"] = 5
        kwargs["max_overflow"] = 10

    return create_engine(database_url, **kwargs)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp.

    Uses TIMESTAMP WITH TIME ZONE where the backend has it. SQLite has no
    timezone support, so values are stored as naive UTC there and tagged as
    UTC again on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# ============================================================================
# ORM Models
# ============================================================================


class CodeSnippet(Base):
    """
    A saved code fragment with its origin metadata.

    Snippets are immutable once created except for the favorited flag.
    Rows are only removed by the retention sweep.
    """

    __tablename__ = "snippets"

    id = Column(String(36), primary_key=True, default=_new_id)

    content = Column(Text, nullable=False)

    language = Column(String(50), nullable=False, index=True)

    # JSON-encoded list of tags
    tags_json = Column("tags", Text, nullable=False, default="[]", index=True)

    file_path = Column(String(1024), nullable=True)

    project_context = Column(String(255), nullable=True)

    timestamp = Column(UTCDateTime, default=_utcnow, nullable=False, index=True)

    source_app = Column(String(255), nullable=False)

    favorited = Column(Boolean, default=False, nullable=False)

    @property
    def tags(self) -> List[str]:
        return json.loads(self.tags_json or "[]")

    @tags.setter
    def tags(self, value: List[str]) -> None:
        self.tags_json = json.dumps(list(value or []))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape pushed to clients."""
        return {
            "id": self.id,
            "content": self.content,
            "language": self.language,
            "tags": self.tags,
            "filePath": self.file_path,
            "projectContext": self.project_context,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "sourceApp": self.source_app,
            "favorited": bool(self.favorited),
        }

    def __repr__(self) -> str:
        return f"<CodeSnippet(id={self.id}, language={self.language}, favorited={self.favorited})>"


class ErrorPattern(Base):
    """
    A previously observed error signature and its best-known solution.

    Recurrences of a similar error for the same language update the row in
    place: frequency is incremented, the solution replaced and
    last_encountered refreshed.
    """

    __tablename__ = "error_patterns"

    id = Column(String(36), primary_key=True, default=_new_id)

    error_text = Column(Text, nullable=False)

    solution = Column(Text, nullable=False)

    language = Column(String(50), nullable=False, index=True)

    frequency = Column(Integer, default=1, nullable=False)

    last_encountered = Column(UTCDateTime, default=_utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "errorText": self.error_text,
            "solution": self.solution,
            "language": self.language,
            "frequency": self.frequency,
            "lastEncountered": (
                self.last_encountered.isoformat() if self.last_encountered else None
            ),
        }

    def __repr__(self) -> str:
        return f"<ErrorPattern(id={self.id}, language={self.language}, frequency={self.frequency})>"


class DeveloperContext(Base):
    """
    What the developer is doing right now.

    Append-only: every update inserts a row and only the most recent one is
    read back.
    """

    __tablename__ = "developer_context"

    id = Column(Integer, primary_key=True, autoincrement=True)

    current_app = Column(String(255), nullable=False)

    active_file = Column(String(1024), nullable=True)

    project_root = Column(String(1024), nullable=True)

    last_activity = Column(UTCDateTime, default=_utcnow, nullable=False, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentApp": self.current_app,
            "activeFile": self.active_file,
            "projectRoot": self.project_root,
            "lastActivity": (
                self.last_activity.isoformat() if self.last_activity else None
            ),
        }

    def __repr__(self) -> str:
        return f"<DeveloperContext(id={self.id}, app={self.current_app})>"


# ============================================================================
# Database Initialization
# ============================================================================


def init_db(engine: Engine) -> None:
    """
    Create all tables on the given engine.

    Safe to call repeatedly; existing tables are left untouched.
    """
    Base.metadata.create_all(bind=engine)
