"""Structured editor event models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class LogEvent(BaseModel):
    """Single interaction event emitted by the editor controllers."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str
    document_id: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    event_type: str  # "tool_request" | "accept_suggestion" | "persona_mark_resolved" | ...
    tool_name: str | None = None  # action mode or persona id
    selection_start: int | None = None
    selection_end: int | None = None
    doc_length: int | None = None
    payload: dict = Field(default_factory=dict)
