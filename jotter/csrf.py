"""
Jotter — Form Tokens
=====================

What:  Per-session CSRF token for the note forms.
How:   The token is stored in the signed session cookie on first use and
       rendered into every form as a hidden `_token` field. Write handlers
       call `verify_csrf_token` before touching the service; a missing or
       mismatched token is answered with 419 Page Expired.
"""

import hmac
import logging
import secrets
from typing import Any, Mapping

from fastapi import Request
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = "_csrf_token"
CSRF_FORM_FIELD = "_token"
CSRF_HEADER = "X-CSRF-Token"


def csrf_token(request: Request) -> str:
    """The session's token, created on first call."""
    token = request.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


def verify_csrf_token(request: Request, form: Mapping[str, Any]) -> None:
    """
    Raises:
        HTTPException(419): the submitted token does not match the session's
    """
    expected = request.session.get(CSRF_SESSION_KEY)
    submitted = form.get(CSRF_FORM_FIELD) or request.headers.get(CSRF_HEADER)
    if (
        not expected
        or not isinstance(submitted, str)
        or not hmac.compare_digest(expected, submitted)
    ):
        logger.warning("CSRF token mismatch on %s %s", request.method, request.url.path)
        raise HTTPException(status_code=419, detail="Page Expired")
