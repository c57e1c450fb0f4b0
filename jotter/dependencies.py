"""
FastAPI dependencies that assemble the note stack for one request:
session → NoteRepository → NoteService.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jotter.database import get_db_session
from jotter.repositories.note_repository import NoteRepository
from jotter.services.note_service import NoteService


def get_note_repository(db: AsyncSession = Depends(get_db_session)) -> NoteRepository:
    return NoteRepository(db)


def get_note_service(
    request: Request,
    repository: NoteRepository = Depends(get_note_repository),
) -> NoteService:
    return NoteService(repository, per_page=request.app.state.settings.notes_per_page)
