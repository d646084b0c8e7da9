"""Pydantic models for selection ranges, transform requests and suggestions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, model_validator

from plotania.utils.text import word_diff


class ActionMode(str, Enum):
    REWRITE = "rewrite"
    EXPAND = "expand"
    SHORTEN = "shorten"
    TONE = "tone"


# Button labels shown next to each mode in the editor toolbar
MODE_LABELS: dict[ActionMode, str] = {
    ActionMode.REWRITE: "Generate",
    ActionMode.EXPAND: "Revision",
    ActionMode.SHORTEN: "Adjust Length",
    ActionMode.TONE: "Optimize",
}

MODE_DESCRIPTIONS: dict[ActionMode, str] = {
    ActionMode.REWRITE: "Rewrite",
    ActionMode.EXPAND: "Expand",
    ActionMode.SHORTEN: "Adjust length",
    ActionMode.TONE: "Adjust tone",
}


class SelectionRange(BaseModel):
    """An ordered (start, end) pair of document offsets."""

    start: int
    end: int

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> SelectionRange:
        if self.start < 0 or self.end < 0:
            raise ValueError("selection offsets must be non-negative")
        if self.start > self.end:
            raise ValueError(f"selection start {self.start} is after end {self.end}")
        return self

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class TransformRequest(BaseModel):
    """Payload derived from the document for a transform call.

    ``selected_text`` is the whole document when the selection was empty or
    whitespace-only, while ``start``/``end`` still hold the original selection.
    """

    action: ActionMode
    selected_text: str
    context_before: str = ""
    context_after: str = ""
    start: int
    end: int
    full_text: str

    @property
    def selected_is_full_doc(self) -> bool:
        return self.selected_text.strip() == self.full_text.strip()

    def to_payload(self) -> dict:
        """Wire shape sent to the transform endpoint."""
        return {
            "action": self.action.value,
            "selectedText": self.selected_text,
            "contextBefore": self.context_before,
            "contextAfter": self.context_after,
            "from": self.start,
            "to": self.end,
        }


class Suggestion(BaseModel):
    """One pending AI-proposed replacement for a selection."""

    original: str
    suggestion: str
    mode: ActionMode
    range: SelectionRange

    @property
    def word_diff(self) -> int:
        return word_diff(self.original, self.suggestion)
