"""
Jotter — HTML Rendering
========================

What:  Jinja2 environment, flash messages, and one render function per page.
How:   Routes never call TemplateResponse directly; they pick one of the
       functions below. The create and edit forms are two explicit
       functions over one shared helper, selected by FormMode.

Flash messages live in the signed session cookie (Starlette
SessionMiddleware) and are removed the first time a page reads them.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from jotter.csrf import csrf_token
from jotter.schemas.note import NotePage, NoteRead

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

FLASH_SESSION_KEY = "_flashes"
PREVIEW_LENGTH = 150


# ══════════════════════════════════════════════════════════════════════════
# Flash Messages
# ══════════════════════════════════════════════════════════════════════════

def flash(request: Request, message: str, category: str = "success") -> None:
    """Queue a message for the next rendered page."""
    flashes = request.session.get(FLASH_SESSION_KEY, [])
    flashes.append([category, message])
    request.session[FLASH_SESSION_KEY] = flashes


def get_flashed_messages(request: Request) -> List[Tuple[str, str]]:
    """Pop all queued (category, message) pairs."""
    # Error pages rendered outside SessionMiddleware have no session
    if "session" not in request.scope:
        return []
    return [tuple(item) for item in request.session.pop(FLASH_SESSION_KEY, [])]


templates.env.globals["get_flashed_messages"] = get_flashed_messages
templates.env.globals["csrf_token"] = csrf_token


# ══════════════════════════════════════════════════════════════════════════
# Pages
# ══════════════════════════════════════════════════════════════════════════

def render_note_list(request: Request, page: NotePage) -> Response:
    return templates.TemplateResponse(
        request,
        "notes/index.html",
        {"page": page, "notes": page.notes, "preview_length": PREVIEW_LENGTH},
    )


def render_note_detail(request: Request, note: NoteRead) -> Response:
    return templates.TemplateResponse(request, "notes/show.html", {"note": note})


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


def render_create_form(
    request: Request,
    values: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, str]] = None,
    status_code: int = 200,
) -> Response:
    """Empty (or re-filled) form that POSTs to /notes."""
    return _render_note_form(
        request,
        mode=FormMode.CREATE,
        action_url=str(request.url_for("store_note")),
        cancel_url=str(request.url_for("list_notes")),
        values=values or {"title": "", "content": ""},
        errors=errors,
        status_code=status_code,
    )


def render_edit_form(
    request: Request,
    note: NoteRead,
    values: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, str]] = None,
    status_code: int = 200,
) -> Response:
    """Form pre-filled from the note (or from a rejected submission) that PUTs to /notes/{id}."""
    return _render_note_form(
        request,
        mode=FormMode.EDIT,
        action_url=str(request.url_for("override_note_method", note_id=note.id)),
        cancel_url=str(request.url_for("show_note", note_id=note.id)),
        values=values or {"title": note.title, "content": note.content},
        errors=errors,
        status_code=status_code,
        note=note,
    )


_FORM_LABELS = {
    FormMode.CREATE: {"heading": "Create New Note", "submit": "Save Note", "method": None},
    FormMode.EDIT: {"heading": "Edit Note", "submit": "Update Note", "method": "PUT"},
}


def _render_note_form(
    request: Request,
    mode: FormMode,
    action_url: str,
    cancel_url: str,
    values: Dict[str, str],
    errors: Optional[Dict[str, str]],
    status_code: int,
    note: Optional[NoteRead] = None,
) -> Response:
    labels = _FORM_LABELS[mode]
    return templates.TemplateResponse(
        request,
        "notes/form.html",
        {
            "mode": mode.value,
            "heading": labels["heading"],
            "submit_label": labels["submit"],
            "method_override": labels["method"],
            "action_url": action_url,
            "cancel_url": cancel_url,
            "values": values,
            "errors": errors or {},
            "note": note,
        },
        status_code=status_code,
    )


def render_error(request: Request, status_code: int, title: str, message: str) -> Response:
    return templates.TemplateResponse(
        request,
        "errors/error.html",
        {"status_code": status_code, "title": title, "message": message},
        status_code=status_code,
    )
