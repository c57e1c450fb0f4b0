"""
Jotter — Note Repository
=========================

What:  CRUD statements for the `notes` table.
Who:   Constructed per request around the request's AsyncSession and handed
       to NoteService.

Operations flush inside the request transaction. `commit()` ends it and is
called by NoteService after each write. Missing rows raise NotFoundError, driver failures
are logged and raised as PersistenceError.

Ordering:
    Recency is `updated_at DESC, id DESC`. The id tiebreak keeps the order
    stable when two notes share a timestamp.
"""

import logging
from typing import List

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jotter.exceptions import NotFoundError, PersistenceError
from jotter.models.note import Note, utcnow

logger = logging.getLogger(__name__)


class NoteRepository:
    """Persistence gateway for Note records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, title: str, content: str) -> Note:
        """Insert a note and return it with its assigned id and timestamps."""
        now = utcnow()
        note = Note(title=title, content=content, created_at=now, updated_at=now)
        try:
            self.session.add(note)
            await self.session.flush()  # Assigns the id without committing
        except SQLAlchemyError as e:
            raise self._persistence_error("create", e)
        logger.info("Note created: %s", note.id)
        return note

    async def find(self, note_id: int) -> Note:
        """
        Fetch one note by id.

        Raises:
            NotFoundError: no row with this id
            PersistenceError: query failed
        """
        try:
            note = await self.session.get(Note, note_id)
        except SQLAlchemyError as e:
            raise self._persistence_error("find", e, note_id=note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def list(self) -> List[Note]:
        """All notes, most recently updated first."""
        try:
            result = await self.session.execute(self._recency_query())
        except SQLAlchemyError as e:
            raise self._persistence_error("list", e)
        return list(result.scalars().all())

    async def list_page(self, limit: int, offset: int = 0) -> List[Note]:
        """A window of the recency ordering."""
        try:
            result = await self.session.execute(
                self._recency_query().limit(limit).offset(offset)
            )
        except SQLAlchemyError as e:
            raise self._persistence_error("list_page", e)
        return list(result.scalars().all())

    async def count(self) -> int:
        try:
            result = await self.session.execute(select(func.count(Note.id)))
        except SQLAlchemyError as e:
            raise self._persistence_error("count", e)
        return result.scalar() or 0

    async def update(self, note_id: int, title: str, content: str) -> Note:
        """
        Replace title and content and refresh updated_at.

        created_at is never written here. Concurrent updates to the same
        note are last-write-wins.
        """
        note = await self.find(note_id)
        note.title = title
        note.content = content
        note.updated_at = max(utcnow(), note.created_at)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise self._persistence_error("update", e, note_id=note_id)
        logger.info("Note updated: %s", note_id)
        return note

    async def delete(self, note_id: int) -> None:
        """Permanently remove a note."""
        note = await self.find(note_id)
        try:
            await self.session.delete(note)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise self._persistence_error("delete", e, note_id=note_id)
        logger.info("Note deleted: %s", note_id)

    async def commit(self) -> None:
        """
        Make the flushed writes durable.

        Raises:
            PersistenceError: the commit failed (the transaction is rolled back)
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._persistence_error("commit", e)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _recency_query():
        return select(Note).order_by(desc(Note.updated_at), desc(Note.id))

    @staticmethod
    def _persistence_error(operation: str, exc: Exception, **context) -> PersistenceError:
        logger.error("Database error during note %s: %s", operation, str(exc), exc_info=True)
        return PersistenceError(
            context={"operation": operation, "error_type": type(exc).__name__, **context},
        )
