"""
Jotter — Note Route Handlers
=============================

What:  The seven note actions plus the HTML-form method override.
How:   Handlers read the form, call NoteService, and either render a page
       or redirect with a flash message. They stay thin: validation and
       persistence live in the service and repository.

Route Table:
    GET     /notes              list_notes      (?page=N)
    GET     /notes/new          create_note     create form
    POST    /notes              store_note      303 → list, or 422 form
    GET     /notes/{id}         show_note       404 if absent
    GET     /notes/{id}/edit    edit_note       404 if absent
    PUT     /notes/{id}         update_note     303 → detail, or 422 form
    PATCH   /notes/{id}         update_note
    DELETE  /notes/{id}         destroy_note    303 → list
    POST    /notes/{id}         override_note_method  (_method=PUT|PATCH|DELETE)

Every write checks the form's `_token` first (419 on mismatch).
NotFoundError and PersistenceError are not caught here; the global handlers
in main.py turn them into error pages.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.exceptions import HTTPException
from starlette.responses import Response

from jotter.csrf import verify_csrf_token
from jotter.dependencies import get_note_service
from jotter.exceptions import ValidationError
from jotter.rendering import (
    flash,
    render_create_form,
    render_edit_form,
    render_note_detail,
    render_note_list,
)
from jotter.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"], default_response_class=HTMLResponse)

# HTML forms can only GET/POST; the rest arrive as POST + _method
OVERRIDABLE_METHODS = {"PUT", "PATCH", "DELETE"}


@router.get("/", include_in_schema=False)
async def home(request: Request) -> RedirectResponse:
    return RedirectResponse(request.url_for("list_notes"), status_code=302)


@router.get("/notes", name="list_notes")
async def list_notes(
    request: Request,
    page: int = Query(default=1, description="1-based page number"),
    service: NoteService = Depends(get_note_service),
) -> Response:
    note_page = await service.list_notes_page(page)
    return render_note_list(request, note_page)


@router.get("/notes/new", name="create_note")
async def create_note(request: Request) -> Response:
    return render_create_form(request)


@router.post("/notes", name="store_note")
async def store_note(
    request: Request,
    service: NoteService = Depends(get_note_service),
) -> Response:
    form = await request.form()
    verify_csrf_token(request, form)
    try:
        note = await service.create_note(form)
    except ValidationError as e:
        return render_create_form(request, values=e.values, errors=e.errors, status_code=422)

    logger.info("Stored note %s", note.id)
    flash(request, "Note created successfully.")
    return RedirectResponse(request.url_for("list_notes"), status_code=303)


@router.get("/notes/{note_id}", name="show_note")
async def show_note(
    request: Request,
    note_id: int,
    service: NoteService = Depends(get_note_service),
) -> Response:
    note = await service.get_note(note_id)
    return render_note_detail(request, note)


@router.get("/notes/{note_id}/edit", name="edit_note")
async def edit_note(
    request: Request,
    note_id: int,
    service: NoteService = Depends(get_note_service),
) -> Response:
    note = await service.get_note(note_id)
    return render_edit_form(request, note)


@router.api_route("/notes/{note_id}", methods=["PUT", "PATCH"], name="update_note")
async def update_note(
    request: Request,
    note_id: int,
    service: NoteService = Depends(get_note_service),
) -> Response:
    return await _update(request, note_id, service)


@router.delete("/notes/{note_id}", name="destroy_note")
async def destroy_note(
    request: Request,
    note_id: int,
    service: NoteService = Depends(get_note_service),
) -> Response:
    return await _destroy(request, note_id, service)


@router.post("/notes/{note_id}", name="override_note_method")
async def override_note_method(
    request: Request,
    note_id: int,
    service: NoteService = Depends(get_note_service),
) -> Response:
    """
    Dispatch an HTML form submission on its `_method` field.

    Anything other than PUT, PATCH or DELETE is answered with 405.
    """
    form = await request.form()
    method = str(form.get("_method", "")).upper()
    if method not in OVERRIDABLE_METHODS:
        raise HTTPException(
            status_code=405,
            detail="Method Not Allowed",
            headers={"Allow": "GET, PUT, PATCH, DELETE"},
        )
    if method == "DELETE":
        return await _destroy(request, note_id, service)
    return await _update(request, note_id, service)


# ── Shared handlers ───────────────────────────────────────────────────────

async def _update(request: Request, note_id: int, service: NoteService) -> Response:
    form = await request.form()
    verify_csrf_token(request, form)
    try:
        note = await service.update_note(note_id, form)
    except ValidationError as e:
        # The edit form needs the stored note; an unknown id becomes a 404 here
        existing = await service.get_note(note_id)
        return render_edit_form(
            request, existing, values=e.values, errors=e.errors, status_code=422
        )

    flash(request, "Note updated successfully.")
    return RedirectResponse(
        request.url_for("show_note", note_id=note.id), status_code=303
    )


async def _destroy(request: Request, note_id: int, service: NoteService) -> Response:
    verify_csrf_token(request, await request.form())
    await service.delete_note(note_id)
    flash(request, "Note deleted successfully.")
    return RedirectResponse(request.url_for("list_notes"), status_code=303)
