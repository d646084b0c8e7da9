"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from plotania.clients.llm_client import LLMClient, LLMResponse
from plotania.clients.text_service import TextService
from plotania.context import EditorContext
from plotania.editor.document import TextDocument
from plotania.logging.event_sink import EventEmitter, MemoryEventSink
from plotania.models.results import Ok
from plotania.pipeline.attribution import AttributionLedger

SAMPLE_STORY = "Para one.\n\nPara two.\n\nPara three."


class _ServiceStub:
    """Concrete stand-in so AsyncMock(spec=...) sees async methods."""

    async def transform(self, request):  # pragma: no cover - replaced by mock
        raise NotImplementedError

    async def feedback(self, persona, text):  # pragma: no cover - replaced by mock
        raise NotImplementedError


@pytest.fixture
def sample_story() -> str:
    return SAMPLE_STORY


@pytest.fixture
def document(sample_story) -> TextDocument:
    return TextDocument(sample_story)


@pytest.fixture
def context() -> EditorContext:
    return EditorContext(session_id="sess-test", document_id="doc-test")


@pytest.fixture
def sink() -> MemoryEventSink:
    return MemoryEventSink()


@pytest.fixture
def emitter(context, sink) -> EventEmitter:
    return EventEmitter(context, sink)


@pytest.fixture
def ledger() -> AttributionLedger:
    return AttributionLedger()


@pytest.fixture
def mock_text_service() -> TextService:
    """Create a mock text service returning a fixed rewrite and no comments."""
    service = AsyncMock(spec=_ServiceStub)
    service.transform = AsyncMock(return_value=Ok("Paragraph number two."))
    service.feedback = AsyncMock(return_value=Ok([]))
    return service


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="", input_tokens=100, output_tokens=50)
    )
    return client
