"""Fire-and-forget event emission.

Controllers call ``EventEmitter.emit`` at their trigger points. The emitter
stamps the explicit session/document ids onto a ``LogEvent`` and hands it to
the configured sink; a failing sink is logged and never reaches the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol

from plotania.context import EditorContext
from plotania.logging.models import LogEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def save_event(self, event: LogEvent) -> None: ...


class LoggingEventSink:
    """Writes events to the standard logger."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def save_event(self, event: LogEvent) -> None:
        logger.log(
            self.level,
            "event=%s tool=%s selection=(%s, %s) doc_length=%s payload=%s",
            event.event_type,
            event.tool_name,
            event.selection_start,
            event.selection_end,
            event.doc_length,
            event.payload,
        )


class MemoryEventSink:
    """Keeps events in a list; useful for tests and dry runs."""

    def __init__(self):
        self.events: list[LogEvent] = []

    def save_event(self, event: LogEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


class EventEmitter:
    """Attaches context ids to events and shields callers from sink failures."""

    def __init__(self, context: EditorContext, sink: EventSink | None = None):
        self.context = context
        self.sink = sink

    def emit(
        self,
        event_type: str,
        *,
        tool_name: str | None = None,
        selection_start: int | None = None,
        selection_end: int | None = None,
        doc_length: int | None = None,
        payload: dict | None = None,
    ) -> None:
        if self.sink is None:
            return
        try:
            event = LogEvent(
                session_id=self.context.session_id,
                document_id=self.context.document_id,
                event_type=event_type,
                tool_name=tool_name,
                selection_start=selection_start,
                selection_end=selection_end,
                doc_length=doc_length,
                payload=payload or {},
            )
            self.sink.save_event(event)
        except Exception:
            logger.warning("Event sink failed for %s", event_type, exc_info=True)
