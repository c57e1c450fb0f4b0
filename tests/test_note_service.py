"""
Jotter — Note Service Tests
============================

What:  Tests for NoteService validation and CRUD orchestration.
How:   Unit tests use an AsyncMock repository; the lifecycle tests at the
       bottom run the real repository on SQLite.

What we test:
    ✅ Missing/empty/whitespace fields raise ValidationError, nothing stored
    ✅ Field messages and submitted values are carried for the form
    ✅ NotFoundError from the repository propagates
    ✅ Paging arithmetic and clamping
    ✅ Full create → get → update → delete lifecycle
"""

import asyncio

import pytest

from jotter.exceptions import NotFoundError, PersistenceError, ValidationError
from jotter.schemas.note import NoteRead
from jotter.services.note_service import NoteService


class TestNoteServiceValidation:
    """Validation happens before the repository is touched."""

    @pytest.mark.asyncio
    async def test_create_valid_strips_and_delegates(self, mock_repository, make_note):
        mock_repository.create.return_value = make_note(title="Title", content="Body")
        service = NoteService(mock_repository)

        result = await service.create_note({"title": "  Title ", "content": "Body\n"})

        mock_repository.create.assert_awaited_once_with("Title", "Body")
        mock_repository.commit.assert_awaited_once()
        assert isinstance(result, NoteRead)
        assert result.title == "Title"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data, failing_field",
        [
            ({"title": "", "content": "Body"}, "title"),
            ({"title": "Title", "content": ""}, "content"),
            ({"title": "   ", "content": "Body"}, "title"),
            ({"content": "Body"}, "title"),
            ({"title": "Title"}, "content"),
        ],
    )
    async def test_create_rejects_missing_or_empty_fields(
        self, mock_repository, data, failing_field
    ):
        service = NoteService(mock_repository)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_note(data)

        assert set(exc_info.value.errors) == {failing_field}
        assert exc_info.value.errors[failing_field] == f"The {failing_field} field is required."
        mock_repository.create.assert_not_awaited()
        mock_repository.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_error_keeps_submitted_values(self, mock_repository):
        service = NoteService(mock_repository)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_note({"title": "", "content": "Keep me"})

        assert exc_info.value.values == {"title": "", "content": "Keep me"}

    @pytest.mark.asyncio
    async def test_both_fields_empty_reports_both(self, mock_repository):
        service = NoteService(mock_repository)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_note({})

        assert set(exc_info.value.errors) == {"title", "content"}

    @pytest.mark.asyncio
    async def test_title_longer_than_255_is_rejected(self, mock_repository):
        service = NoteService(mock_repository)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_note({"title": "x" * 256, "content": "Body"})

        assert exc_info.value.errors["title"] == (
            "The title field must not be greater than 255 characters."
        )

    @pytest.mark.asyncio
    async def test_update_validates_before_lookup(self, mock_repository):
        service = NoteService(mock_repository)

        with pytest.raises(ValidationError):
            await service.update_note(1, {"title": "Title", "content": ""})

        mock_repository.update.assert_not_awaited()
        mock_repository.commit.assert_not_awaited()


class TestNoteServiceLookup:

    @pytest.mark.asyncio
    async def test_get_note_returns_read_model(self, mock_repository, make_note):
        mock_repository.find.return_value = make_note(id=3, title="Found")
        service = NoteService(mock_repository)

        result = await service.get_note(3)

        assert result.id == 3
        assert result.title == "Found"
        mock_repository.find.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_get_note_not_found_propagates(self, mock_repository):
        mock_repository.find.side_effect = NotFoundError(resource="note", resource_id=5)
        service = NoteService(mock_repository)

        with pytest.raises(NotFoundError):
            await service.get_note(5)

    @pytest.mark.asyncio
    async def test_failed_commit_propagates_from_writes(self, mock_repository, make_note):
        mock_repository.update.return_value = make_note()
        mock_repository.commit.side_effect = PersistenceError(context={"operation": "commit"})
        service = NoteService(mock_repository)

        with pytest.raises(PersistenceError):
            await service.update_note(1, {"title": "Title", "content": "Body"})
        with pytest.raises(PersistenceError):
            await service.delete_note(1)

    @pytest.mark.asyncio
    async def test_delete_not_found_propagates(self, mock_repository):
        mock_repository.delete.side_effect = NotFoundError(resource="note", resource_id=5)
        service = NoteService(mock_repository)

        with pytest.raises(NotFoundError):
            await service.delete_note(5)
        mock_repository.commit.assert_not_awaited()


class TestNoteServicePaging:

    @pytest.mark.asyncio
    async def test_page_offsets(self, mock_repository, make_note):
        mock_repository.count.return_value = 12
        mock_repository.list_page.return_value = [make_note(id=i) for i in range(6, 11)]
        service = NoteService(mock_repository, per_page=5)

        page = await service.list_notes_page(2)

        mock_repository.list_page.assert_awaited_once_with(limit=5, offset=5)
        assert page.page == 2
        assert page.pages == 3
        assert page.has_previous is True
        assert page.has_next is True
        assert len(page.notes) == 5

    @pytest.mark.asyncio
    async def test_page_below_one_is_clamped(self, mock_repository):
        mock_repository.count.return_value = 0
        mock_repository.list_page.return_value = []
        service = NoteService(mock_repository, per_page=5)

        page = await service.list_notes_page(-3)

        mock_repository.list_page.assert_awaited_once_with(limit=5, offset=0)
        assert page.page == 1
        assert page.pages == 1
        assert page.has_previous is False
        assert page.has_next is False

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_clamped_to_last(self, mock_repository):
        mock_repository.count.return_value = 12
        mock_repository.list_page.return_value = []
        service = NoteService(mock_repository, per_page=5)

        page = await service.list_notes_page(10**20)

        mock_repository.list_page.assert_awaited_once_with(limit=5, offset=10)
        assert page.page == 3
        assert page.has_next is False


class TestNoteServiceLifecycle:
    """Runs the service over the real repository."""

    @pytest.mark.asyncio
    async def test_create_get_update_delete_scenario(self, note_service):
        created = await note_service.create_note({"title": "A", "content": "B"})
        assert created.id == 1

        fetched = await note_service.get_note(1)
        assert (fetched.title, fetched.content) == ("A", "B")

        await asyncio.sleep(0.01)
        updated = await note_service.update_note(1, {"title": "C", "content": "B"})
        assert (await note_service.get_note(1)).title == "C"
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

        await note_service.delete_note(1)
        with pytest.raises(NotFoundError):
            await note_service.get_note(1)

    @pytest.mark.asyncio
    async def test_invalid_create_persists_nothing(self, note_service, note_repository):
        with pytest.raises(ValidationError):
            await note_service.create_note({"title": "", "content": "Body"})

        assert await note_repository.count() == 0

    @pytest.mark.asyncio
    async def test_list_returns_every_created_note(self, note_service):
        submitted = {(f"Title {i}", f"Content {i}") for i in range(4)}
        for title, content in submitted:
            await note_service.create_note({"title": title, "content": content})

        notes = await note_service.list_notes()

        assert len(notes) == 4
        assert {(note.title, note.content) for note in notes} == submitted

    @pytest.mark.asyncio
    async def test_delete_twice_reports_not_found(self, note_service):
        note = await note_service.create_note({"title": "Once", "content": "Only"})

        await note_service.delete_note(note.id)

        with pytest.raises(NotFoundError):
            await note_service.delete_note(note.id)
