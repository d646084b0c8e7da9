"""Editor session - wires the document, ledger and both controllers together."""

from __future__ import annotations

import logging

from plotania.clients.text_service import TextService
from plotania.config import EditorConfig
from plotania.context import EditorContext
from plotania.editor.document import AI_MARK, DocumentModel
from plotania.logging.event_sink import EventEmitter, EventSink
from plotania.models.attribution import AttributionStats
from plotania.models.suggestion import SelectionRange
from plotania.pipeline.attribution import AttributionLedger
from plotania.pipeline.persona_feedback import PersonaFeedbackController
from plotania.pipeline.suggestion_controller import SuggestionController

logger = logging.getLogger(__name__)


class EditorSession:
    """One writing session over one document.

    Document change notifications are forwarded to the attribution ledger,
    which treats every length change as human-authored unless it came from an
    applied suggestion.
    """

    def __init__(
        self,
        service: TextService,
        *,
        context: EditorContext | None = None,
        document: DocumentModel | None = None,
        sink: EventSink | None = None,
        config: EditorConfig | None = None,
    ):
        config = config or EditorConfig()
        self.context = context or EditorContext(document_id=config.document_id)
        self.events = EventEmitter(self.context, sink)
        self.ledger = AttributionLedger()
        self.suggestions = SuggestionController(
            self.context,
            service,
            self.ledger,
            self.events,
            error_detail_limit=config.error_detail_limit,
            message_clip=config.message_clip,
        )
        self.feedback = PersonaFeedbackController(
            self.context,
            service,
            self.events,
            error_detail_limit=config.error_detail_limit,
            message_clip=config.message_clip,
        )
        self.document: DocumentModel | None = None
        self.show_ai_origins = True
        self._started = False
        if document is not None:
            self.attach(document)

    def attach(self, document: DocumentModel) -> None:
        """Bind the session to a document once the editor is ready."""
        self.document = document
        self.suggestions.attach(document)
        self.feedback.attach(document)
        document.subscribe(self._on_document_changed)
        self.ledger.on_document_changed(document.length)

    def start(self) -> None:
        """Emit ``session_start`` once per session."""
        if self._started:
            return
        self._started = True
        self.events.emit(
            "session_start",
            doc_length=self.document.length if self.document is not None else None,
        )

    def _on_document_changed(self, text: str) -> None:
        self.ledger.on_document_changed(len(text))
        self.events.emit("editor_change", doc_length=len(text))

    def attribution(self) -> AttributionStats:
        return self.ledger.percentages()

    def toggle_ai_origins(self, value: bool) -> None:
        self.show_ai_origins = value
        self.events.emit(
            "toggle_ai_origins",
            doc_length=self.document.length if self.document is not None else None,
            payload={"value": value},
        )

    def ai_origin_ranges(self) -> list[SelectionRange]:
        """Ranges to highlight as AI-inserted, empty when highlighting is off."""
        if not self.show_ai_origins or self.document is None:
            return []
        marked = getattr(self.document, "marked_ranges", None)
        if marked is None:
            logger.debug("Document does not expose provenance marks")
            return []
        return marked(AI_MARK)
