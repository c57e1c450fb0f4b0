"""
Jotter — Note SQLAlchemy Model
===============================

What:  ORM model representing the `notes` table.
Who:   Used by NoteRepository for CRUD and by Alembic for schema management.

Table Design:
    - Integer primary key, assigned by the store and never reused
      (AUTOINCREMENT on SQLite, identity/serial on PostgreSQL)
    - title: VARCHAR(255), required
    - content: TEXT, required, no length limit
    - created_at / updated_at: UTC with timezone; updated_at is refreshed by
      the repository on every update

    Index on updated_at DESC:
        The list view orders by most recently updated first.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from jotter.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always comes back in UTC.

    SQLite has no timezone support and returns naive datetimes; those are
    interpreted as UTC so values loaded from the store compare cleanly with
    values set in Python.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Note(Base):
    """
    A text note.

    Lifecycle:
        1. Created by NoteRepository.create() after validation
        2. title/content replaced by NoteRepository.update(); updated_at refreshed
        3. Removed permanently by NoteRepository.delete() (no soft-delete)

    Invariants: title and content are non-empty; updated_at >= created_at.
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Note title, required",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Note body, required",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was last changed (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_updated_at", updated_at.desc()),
        # Keeps SQLite from reusing the id of a deleted last row
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, updated_at='{self.updated_at}')>"
