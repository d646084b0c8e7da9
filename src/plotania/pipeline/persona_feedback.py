"""Persona feedback requests and the comment status lifecycle."""

from __future__ import annotations

import logging
from collections import Counter

from plotania.clients.text_service import TextService
from plotania.context import EditorContext
from plotania.editor.document import DocumentModel
from plotania.errors import InvalidRangeError
from plotania.logging.event_sink import EventEmitter
from plotania.models.persona import CommentStatus, PersonaComment, PersonaId
from plotania.models.results import Malformed, Ok, ServiceError
from plotania.models.suggestion import SelectionRange
from plotania.utils.text import clip

logger = logging.getLogger(__name__)

EMPTY_TEXT_MESSAGE = "Please select a passage or write something first."


class PersonaFeedbackController:
    """Requests persona critique and keeps every returned comment.

    Comments accumulate across requests and are never deleted; hiding only
    changes their status. Each request remembers the range it was issued for,
    and every comment of that batch re-selects the same range when clicked.
    Concurrent requests for the same persona are not deduplicated.
    """

    def __init__(
        self,
        context: EditorContext,
        service: TextService,
        events: EventEmitter,
        document: DocumentModel | None = None,
        *,
        error_detail_limit: int = 500,
        message_clip: int = 140,
    ):
        self.context = context
        self.service = service
        self.events = events
        self.document = document
        self.error_detail_limit = error_detail_limit
        self.message_clip = message_clip

        self.comments: list[PersonaComment] = []
        self.last_selection: SelectionRange | None = None
        self.loading: Counter[PersonaId] = Counter()  # in-flight requests per persona
        self.message = ""
        self._generation = 0
        self._batch_ranges: dict[int, SelectionRange] = {}
        self._comment_batch: dict[str, int] = {}

    def attach(self, document: DocumentModel) -> None:
        self.document = document

    def _doc_length(self) -> int | None:
        return self.document.length if self.document is not None else None

    def _error(self, persona: PersonaId, message: str, **payload) -> None:
        self.events.emit(
            "persona_feedback_error",
            tool_name=persona.value,
            doc_length=self._doc_length(),
            payload={"personaId": persona.value, "message": message, **payload},
        )

    async def request_feedback(self, persona: PersonaId | str) -> list[PersonaComment]:
        """Ask ``persona`` to critique the selection (or the whole document).

        Returns the comments appended by this request; an empty list on any
        failure or when the service answered with something other than an array.
        """
        persona = PersonaId(persona)
        if self.document is None:
            self.message = "Editor is not ready yet. Please try again."
            self._error(persona, "editor_not_ready")
            return []

        self.events.emit(
            "persona_click_get_feedback",
            tool_name=persona.value,
            doc_length=self._doc_length(),
            payload={"personaId": persona.value},
        )

        document = self.document
        selection = document.selection
        start, end = selection.start, selection.end
        passage = document.text_between(start, end)
        if not passage.strip():
            # Whole-document fallback starts at offset 1
            passage = document.text
            start, end = 1, document.length

        if not passage.strip():
            self.message = EMPTY_TEXT_MESSAGE
            self._error(persona, "empty_text")
            return []

        self._generation += 1
        generation = self._generation
        remembered = SelectionRange(start=start, end=end)
        self.last_selection = remembered

        self.events.emit(
            "persona_feedback_request",
            tool_name=persona.value,
            selection_start=start,
            selection_end=end,
            doc_length=document.length,
            payload={"personaId": persona.value, "excerptLength": len(passage)},
        )

        self.loading[persona] += 1
        try:
            result = await self.service.feedback(persona, passage.strip())
        except Exception as exc:
            logger.exception("Feedback call raised")
            result = ServiceError(status=None, body=str(exc))
        finally:
            self.loading[persona] -= 1
            if self.loading[persona] <= 0:
                del self.loading[persona]

        if isinstance(result, ServiceError):
            detail = result.body[: self.error_detail_limit]
            self.message = f"Feedback request failed: {clip(detail, self.message_clip)}"
            self._error(persona, result.event_message, detail=detail)
            return []
        if isinstance(result, Malformed):
            logger.warning("Persona feedback was not a JSON array (%s); no comments added", result.reason)
            items: list = []
        elif isinstance(result, Ok):
            items = result.value
        else:
            raise TypeError(f"Unexpected service result: {result!r}")

        taken = set(self._comment_batch)
        batch: list[PersonaComment] = []
        for index, item in enumerate(items):
            comment = self._normalize(persona, generation, index, item, taken)
            taken.add(comment.id)
            batch.append(comment)
        self._batch_ranges[generation] = remembered
        for comment in batch:
            self._comment_batch[comment.id] = generation
        self.comments.extend(batch)

        self.message = f"{len(batch)} comment(s) received."
        self.events.emit(
            "persona_feedback_success",
            tool_name=persona.value,
            doc_length=document.length,
            payload={"personaId": persona.value, "count": len(batch)},
        )
        return batch

    @staticmethod
    def _normalize(
        persona: PersonaId, generation: int, index: int, item, taken: set[str]
    ) -> PersonaComment:
        """Fill defaults; ids missing or already in use get ``<persona>-<request>-<n>``."""
        data = item if isinstance(item, dict) else {}
        comment_id = str(data.get("id") or "")
        if not comment_id or comment_id in taken:
            comment_id = f"{persona.value}-{generation}-{index + 1}"
            while comment_id in taken:
                comment_id += "-dup"
        return PersonaComment(
            id=comment_id,
            persona=persona,
            excerpt=str(data.get("excerpt") or ""),
            comment=str(data.get("comment") or ""),
            suggestion=str(data.get("suggestion") or ""),
            status=CommentStatus.OPEN,
        )

    def get(self, comment_id: str) -> PersonaComment | None:
        return next((c for c in self.comments if c.id == comment_id), None)

    def visible_comments(self) -> list[PersonaComment]:
        return [c for c in self.comments if c.status is not CommentStatus.HIDDEN]

    def _set_status(self, comment: PersonaComment, status: CommentStatus, event_type: str) -> None:
        comment.status = status
        self.events.emit(
            event_type,
            tool_name=comment.persona.value,
            doc_length=self._doc_length(),
            payload={"personaId": comment.persona.value, "commentId": comment.id},
        )

    def resolve(self, comment_id: str) -> bool:
        """open -> resolved; anything else is left alone."""
        comment = self.get(comment_id)
        if comment is None or comment.status is not CommentStatus.OPEN:
            return False
        self._set_status(comment, CommentStatus.RESOLVED, "persona_mark_resolved")
        return True

    def hide(self, comment_id: str) -> bool:
        """Any status -> hidden. Hidden comments are kept but never shown again."""
        comment = self.get(comment_id)
        if comment is None or comment.status is CommentStatus.HIDDEN:
            return False
        self._set_status(comment, CommentStatus.HIDDEN, "persona_hide_comment")
        return True

    def excerpt_click(self, comment_id: str | None = None) -> SelectionRange | None:
        """Re-select the range remembered for the comment's request.

        Falls back to the most recently remembered range when the comment is
        unknown. The range is not re-validated against edits made since.
        """
        if self.document is None:
            return None
        batch = self._comment_batch.get(comment_id) if comment_id else None
        selection = self._batch_ranges.get(batch) if batch is not None else self.last_selection
        if selection is None:
            return None
        try:
            self.document.set_selection(selection.start, selection.end)
        except InvalidRangeError:
            logger.warning("Remembered range %s no longer fits the document", selection)
            return None

        comment = self.get(comment_id) if comment_id else None
        persona = comment.persona.value if comment else None
        self.events.emit(
            "persona_highlight_excerpt",
            tool_name=persona,
            doc_length=self.document.length,
            payload={
                "personaId": persona,
                "commentId": comment_id,
                "from": selection.start,
                "to": selection.end,
            },
        )
        return selection
