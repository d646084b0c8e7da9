"""Pending-suggestion state machine for selection transforms.

idle -> requesting(mode) -> reviewing(suggestion) | idle on error
reviewing -> applying -> idle, or reviewing -> dismissing -> idle

A new request is allowed from any state and silently discards the pending
suggestion. Each request takes a new generation number; a response whose
generation is no longer current is dropped, so the last request wins.
"""

from __future__ import annotations

import logging
from enum import Enum

from plotania.clients.text_service import TextService
from plotania.context import EditorContext
from plotania.editor.document import AI_MARK, DocumentModel
from plotania.editor.request_builder import TransformRequestBuilder
from plotania.errors import InvalidRangeError
from plotania.logging.event_sink import EventEmitter
from plotania.models.results import Malformed, Ok, ServiceError
from plotania.models.suggestion import (
    MODE_DESCRIPTIONS,
    MODE_LABELS,
    ActionMode,
    SelectionRange,
    Suggestion,
)
from plotania.pipeline.attribution import AttributionLedger
from plotania.utils.text import clip

logger = logging.getLogger(__name__)

NOT_READY_MESSAGE = "Editor is not ready yet. Please try again."
EMPTY_OUTPUT_MESSAGE = "(No output returned. Please try again.)"


class SuggestionState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    REVIEWING = "reviewing"
    APPLYING = "applying"
    DISMISSING = "dismissing"


def _describe(mode: ActionMode) -> str:
    return f"{MODE_DESCRIPTIONS[mode]} ({MODE_LABELS[mode]})"


class SuggestionController:
    """Turns a selection into one pending suggestion and applies or dismisses it."""

    def __init__(
        self,
        context: EditorContext,
        service: TextService,
        ledger: AttributionLedger,
        events: EventEmitter,
        document: DocumentModel | None = None,
        *,
        builder: TransformRequestBuilder | None = None,
        error_detail_limit: int = 500,
        message_clip: int = 140,
    ):
        self.context = context
        self.service = service
        self.ledger = ledger
        self.events = events
        self.document = document
        self.builder = builder or TransformRequestBuilder()
        self.error_detail_limit = error_detail_limit
        self.message_clip = message_clip

        self.state = SuggestionState.IDLE
        self.pending_mode: ActionMode | None = None
        self.suggestion: Suggestion | None = None
        self.generation = 0
        # Side-panel text: what happened, and what needs attention next
        self.status = "Select a sentence, then choose an action to get an AI suggestion."
        self.message = "AI suggestions will appear here. Apply them to replace the selection."

    def attach(self, document: DocumentModel) -> None:
        self.document = document

    def _doc_length(self) -> int | None:
        return self.document.length if self.document is not None else None

    def _fail(self, mode: ActionMode, message: str, **event) -> None:
        self.state = SuggestionState.IDLE
        self.pending_mode = None
        self.message = message
        self.events.emit("tool_error", tool_name=mode.value, **event)

    async def request(self, mode: ActionMode | str) -> Suggestion | None:
        """Request a transform of the current selection.

        Returns the new pending suggestion, or ``None`` when the document is not
        ready, the service failed, or a newer request superseded this one.
        """
        mode = ActionMode(mode)
        self.generation += 1
        generation = self.generation
        self.suggestion = None
        self.state = SuggestionState.REQUESTING
        self.pending_mode = mode

        self.events.emit("tool_click", tool_name=mode.value, doc_length=self._doc_length())

        request = self.builder.build(self.document, mode)
        if request is None:
            self._fail(
                mode,
                NOT_READY_MESSAGE,
                doc_length=self._doc_length(),
                payload={"message": "editor_not_ready"},
            )
            return None

        self.status = f"Running: {_describe(mode)}. Selected: “{clip(request.selected_text, self.message_clip)}”"
        self.message = "Generating a suggestion…"
        span = {
            "selection_start": request.start,
            "selection_end": request.end,
            "doc_length": len(request.full_text),
        }
        self.events.emit(
            "tool_request",
            tool_name=mode.value,
            payload={
                "selectedTextLength": len(request.selected_text),
                "selectedIsFullDoc": request.selected_is_full_doc,
            },
            **span,
        )

        try:
            result = await self.service.transform(request)
        except Exception as exc:
            logger.exception("Transform call raised")
            result = ServiceError(status=None, body=str(exc))

        if generation != self.generation:
            logger.debug("Dropping stale transform response (generation %d)", generation)
            return None

        if isinstance(result, ServiceError):
            detail = result.body[: self.error_detail_limit]
            self._fail(
                mode,
                f"Backend call failed: {clip(detail, self.message_clip)}",
                payload={"message": result.event_message, "detail": detail},
                **span,
            )
            return None
        if isinstance(result, Malformed):
            self._fail(
                mode,
                "Backend call failed: unreadable response.",
                payload={"message": "malformed_response", "detail": result.raw[: self.error_detail_limit]},
                **span,
            )
            return None
        if not isinstance(result, Ok):
            raise TypeError(f"Unexpected service result: {result!r}")

        suggestion = Suggestion(
            original=request.selected_text,
            suggestion=result.value,
            mode=mode,
            range=SelectionRange(start=request.start, end=request.end),
        )
        self.suggestion = suggestion
        self.state = SuggestionState.REVIEWING
        self.pending_mode = None
        self.message = suggestion.suggestion or EMPTY_OUTPUT_MESSAGE
        self.events.emit(
            "tool_response",
            tool_name=mode.value,
            payload={
                "wordDiff": suggestion.word_diff,
                "suggestionLength": len(suggestion.suggestion),
            },
            **span,
        )
        return suggestion

    def apply(self) -> Suggestion | None:
        """Replace the captured range with the pending suggestion.

        The range is used exactly as captured at request time. It is checked
        before anything changes, then the ledger is updated and the document
        replaced, with no suspension point in between. Returns the applied suggestion, or ``None`` when nothing was
        pending or the range no longer fits the document.
        """
        suggestion = self.suggestion
        if self.state is not SuggestionState.REVIEWING or suggestion is None:
            logger.debug("apply() ignored in state %s", self.state.value)
            return None
        if self.document is None:
            self.message = NOT_READY_MESSAGE
            return None

        self.state = SuggestionState.APPLYING
        start, end = suggestion.range.start, suggestion.range.end
        try:
            self.document.text_between(start, end)
        except InvalidRangeError as exc:
            self.suggestion = None
            self._fail(
                suggestion.mode,
                "The selection changed before the suggestion was applied. Please request it again.",
                selection_start=start,
                selection_end=end,
                doc_length=self.document.length,
                payload={"message": "stale_range", "detail": str(exc)},
            )
            return None

        # Ledger first: change listeners fired by replace_range see the final counts
        total = self.document.length - (end - start) + len(suggestion.suggestion)
        self.ledger.on_suggestion_applied(len(suggestion.suggestion), total)
        self.document.replace_range(start, end, suggestion.suggestion, mark=AI_MARK)
        self.suggestion = None
        self.state = SuggestionState.IDLE

        self.status = (
            f"Applied: {_describe(suggestion.mode)} and replaced the selection. "
            f"“{clip(suggestion.original, 160)}”"
        )
        self.message = "Replacement applied. Select another passage to generate a new suggestion."
        self.events.emit(
            "accept_suggestion",
            tool_name=suggestion.mode.value,
            doc_length=total,
            payload={
                "originalLength": len(suggestion.original),
                "suggestionLength": len(suggestion.suggestion),
            },
        )
        return suggestion

    def dismiss(self) -> bool:
        """Drop the pending suggestion without touching the document or ledger."""
        suggestion = self.suggestion
        if self.state is not SuggestionState.REVIEWING or suggestion is None:
            logger.debug("dismiss() ignored in state %s", self.state.value)
            return False

        self.state = SuggestionState.DISMISSING
        self.suggestion = None
        self.state = SuggestionState.IDLE
        self.status = f"Dismissed: {_describe(suggestion.mode)}. The suggestion was not applied."
        self.message = "You can select a passage again and generate a new suggestion."
        self.events.emit(
            "dismiss_suggestion",
            tool_name=suggestion.mode.value,
            doc_length=self._doc_length(),
        )
        return True
