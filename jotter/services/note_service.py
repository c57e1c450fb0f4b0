"""
Jotter — Note Service
======================

What:  Business rules for notes: validate input, call the repository,
       return read models.
How:   NoteService is handed a NoteRepository; it never opens sessions or
       builds queries itself.
Who:   Built per request by `get_note_service` and called by the note routes.

Flow:
    ┌──────────┐    ┌─────────────┐    ┌────────────────┐    ┌──────────┐
    │  Route   │───▶│  Validate   │───▶│ NoteRepository │───▶│ NoteRead │
    └──────────┘    │ (NoteInput) │    └────────────────┘    └──────────┘
                    └─────────────┘
    Validation failure → ValidationError, repository not called
"""

import logging
import math
from typing import Any, Dict, List, Mapping

import pydantic

from jotter.exceptions import ValidationError
from jotter.repositories.note_repository import NoteRepository
from jotter.schemas.note import NoteInput, NotePage, NoteRead

logger = logging.getLogger(__name__)

NOTE_FIELDS = ("title", "content")


class NoteService:
    """
    Note operations used by the HTTP layer.

    Every method returns NoteRead models (or nothing); repository errors
    (NotFoundError, PersistenceError) propagate unchanged.
    """

    def __init__(self, repository: NoteRepository, per_page: int = 10):
        self.repository = repository
        self.per_page = per_page

    async def list_notes(self) -> List[NoteRead]:
        """All notes, most recently updated first."""
        notes = await self.repository.list()
        return [NoteRead.model_validate(note) for note in notes]

    async def list_notes_page(self, page: int = 1) -> NotePage:
        """
        One page of list_notes() ordering.

        Pages are clamped to 1..pages, so a stale or oversized page number
        shows the last page instead of an empty one.
        """
        total = await self.repository.count()
        last_page = max(1, math.ceil(total / self.per_page))
        page = max(1, min(page, last_page))
        notes = await self.repository.list_page(
            limit=self.per_page,
            offset=(page - 1) * self.per_page,
        )
        return NotePage(
            notes=[NoteRead.model_validate(note) for note in notes],
            page=page,
            per_page=self.per_page,
            total=total,
        )

    async def create_note(self, data: Mapping[str, Any]) -> NoteRead:
        """
        Validate and store a new note.

        Raises:
            ValidationError: title or content missing/empty (nothing stored)
            PersistenceError: the insert or its commit failed
        """
        note_input = self.validate(data)
        note = await self.repository.create(note_input.title, note_input.content)
        await self.repository.commit()
        return NoteRead.model_validate(note)

    async def get_note(self, note_id: int) -> NoteRead:
        """Raises NotFoundError if the id is unknown."""
        note = await self.repository.find(note_id)
        return NoteRead.model_validate(note)

    async def update_note(self, note_id: int, data: Mapping[str, Any]) -> NoteRead:
        """
        Validate and apply new title/content.

        Validation runs before the lookup, so an invalid submission for an
        unknown id reports the validation problem.
        """
        note_input = self.validate(data)
        note = await self.repository.update(note_id, note_input.title, note_input.content)
        await self.repository.commit()
        return NoteRead.model_validate(note)

    async def delete_note(self, note_id: int) -> None:
        """Raises NotFoundError if the note is already gone."""
        await self.repository.delete(note_id)
        await self.repository.commit()

    # ── Validation ────────────────────────────────────────────────────────

    @staticmethod
    def validate(data: Mapping[str, Any]) -> NoteInput:
        """
        Turn submitted form data into a NoteInput.

        Pydantic errors become one ValidationError holding a message per
        field plus the values as submitted, for re-rendering the form.
        """
        values = {
            field: "" if data.get(field) is None else str(data.get(field))
            for field in NOTE_FIELDS
        }
        submitted = {field: data.get(field) for field in NOTE_FIELDS if field in data}
        try:
            return NoteInput.model_validate(submitted)
        except pydantic.ValidationError as e:
            errors: Dict[str, str] = {}
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "__all__"
                errors.setdefault(field, _field_message(field, error["type"], error.get("ctx")))
            logger.info("Note input rejected: %s", ", ".join(sorted(errors)))
            raise ValidationError(
                message="Please correct the highlighted fields.",
                errors=errors,
                values=values,
            )


def _field_message(field: str, error_type: str, ctx: Any = None) -> str:
    if error_type in ("missing", "string_too_short"):
        return f"The {field} field is required."
    if error_type == "string_too_long":
        limit = (ctx or {}).get("max_length")
        return f"The {field} field must not be greater than {limit} characters."
    if error_type == "string_type":
        return f"The {field} field must be a string."
    return f"The {field} field is invalid."
