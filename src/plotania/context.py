"""Explicit session/document identifiers passed to every controller."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class EditorContext:
    """Identifies the writing session and document that events belong to."""

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    document_id: str = "doc-1"
