"""
Jotter — Pydantic Schemas
==========================

What:  Input validation for note forms and the read models handed to
       templates and the health endpoint.
How:   `NoteInput` validates submitted form fields; `NoteRead` is built from
       ORM rows (`from_attributes`) so templates never touch live ORM objects.
"""

import math
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class NoteInput(BaseModel):
    """
    Validated title/content pair for create and update.

    Whitespace is stripped before the length checks, so a title of "   "
    is treated as empty.
    """
    title: str = Field(min_length=1, max_length=255, description="Note title")
    content: str = Field(min_length=1, description="Note body")

    model_config = {"str_strip_whitespace": True}


# ══════════════════════════════════════════════════════════════════════════
# Read Models
# ══════════════════════════════════════════════════════════════════════════


class NoteRead(BaseModel):
    """Full representation of a stored note."""
    id: int = Field(description="Store-assigned note identifier")
    title: str
    content: str
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last update timestamp (UTC)")

    model_config = {"from_attributes": True}


class NotePage(BaseModel):
    """
    One page of the notes list, most recently updated first.

    `pages` is at least 1 so an empty store still renders "page 1 of 1".
    """
    notes: List[NoteRead]
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total: int = Field(ge=0)

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


class HealthResponse(BaseModel):
    """Health check response for monitoring and container probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
