"""Build transform requests from the current document state."""

from __future__ import annotations

import re

from plotania.editor.document import DocumentModel
from plotania.models.suggestion import ActionMode, TransformRequest

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank-line boundaries."""
    return _PARAGRAPH_BREAK.split(text)


def surrounding_context(full_text: str, selected_text: str) -> tuple[str, str]:
    """Return the paragraphs before and after the one containing ``selected_text``.

    The first paragraph that contains the trimmed selection wins. Either side
    is empty at the document edges or when no paragraph contains it.
    """
    paragraphs = split_paragraphs(full_text)
    needle = selected_text.strip()
    idx = next((i for i, p in enumerate(paragraphs) if needle in p), -1)
    if idx == -1:
        return "", ""
    before = paragraphs[idx - 1] if idx > 0 else ""
    after = paragraphs[idx + 1] if idx < len(paragraphs) - 1 else ""
    return before, after


class TransformRequestBuilder:
    """Derive a ``TransformRequest`` from a document, or ``None`` when not ready."""

    def build(self, document: DocumentModel | None, mode: ActionMode) -> TransformRequest | None:
        if document is None:
            return None

        selection = document.selection
        full_text = document.text
        selected_text = document.text_between(selection.start, selection.end)
        if not selected_text.strip():
            selected_text = full_text

        context_before, context_after = surrounding_context(full_text, selected_text)
        return TransformRequest(
            action=mode,
            selected_text=selected_text,
            context_before=context_before,
            context_after=context_after,
            start=selection.start,
            end=selection.end,
            full_text=full_text,
        )
