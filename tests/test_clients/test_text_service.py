"""Tests for the LLM-backed and HTTP-backed text services."""

from __future__ import annotations

import json

import anthropic
import httpx
import pytest

from plotania.clients.llm_client import LLMResponse
from plotania.clients.text_service import (
    FEEDBACK_SYSTEM,
    NO_RESPONSE_TEXT,
    TRANSFORM_SYSTEM,
    HttpTextService,
    LLMTextService,
    build_feedback_prompt,
    build_text_service,
    build_transform_prompt,
    parse_comment_array,
)
from plotania.config import AppConfig, ServiceConfig
from plotania.models.persona import PERSONAS, PersonaId
from plotania.models.results import Malformed, Ok, ServiceError
from plotania.models.suggestion import ActionMode, TransformRequest


@pytest.fixture
def transform_request() -> TransformRequest:
    return TransformRequest(
        action=ActionMode.SHORTEN,
        selected_text="Para two.",
        context_before="Para one.",
        context_after="Para three.",
        start=11,
        end=20,
        full_text="Para one.\n\nPara two.\n\nPara three.",
    )


def _status_error(status: int, body) -> anthropic.APIStatusError:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(status, request=request)
    return anthropic.APIStatusError("status error", response=response, body=body)


class TestPrompts:
    def test_transform_prompt_includes_context_and_instruction(self, transform_request):
        prompt = build_transform_prompt(transform_request)
        assert "Action: shorten" in prompt
        assert '"""Para two."""' in prompt
        assert "Context before:\nPara one." in prompt
        assert "Shorten the selected text" in prompt
        assert "Return only the revised version" in prompt

    def test_transform_prompt_marks_missing_context(self, transform_request):
        request = transform_request.model_copy(update={"context_before": "", "context_after": ""})
        prompt = build_transform_prompt(request)
        assert prompt.count("(none)") == 2

    def test_feedback_prompt_uses_persona_framing(self):
        prompt = build_feedback_prompt(PersonaId.EMOTIONAL_READER, "She left.")
        assert prompt.startswith(PERSONAS[PersonaId.EMOTIONAL_READER].prompt)
        assert '"""She left."""' in prompt
        assert '"emotional_reader"' in prompt
        assert "Return ONLY a JSON array" in prompt


class TestParseCommentArray:
    def test_array(self):
        assert parse_comment_array('[{"id": "c1"}]') == Ok([{"id": "c1"}])

    def test_object_is_malformed(self):
        result = parse_comment_array('{"comments": []}')
        assert isinstance(result, Malformed)
        assert result.reason == "not a JSON array"

    def test_plain_text_is_malformed(self):
        assert isinstance(parse_comment_array("I liked it."), Malformed)


class TestLLMTextService:
    async def test_transform_returns_stripped_text(self, mock_llm_client, transform_request):
        mock_llm_client.generate.return_value = LLMResponse(
            text="  Two, briefly.\n", input_tokens=10, output_tokens=5
        )
        service = LLMTextService(mock_llm_client, model="m", transform_temperature=0.5)

        result = await service.transform(transform_request)

        assert result == Ok("Two, briefly.")
        kwargs = mock_llm_client.generate.await_args.kwargs
        assert kwargs["system"] == TRANSFORM_SYSTEM
        assert kwargs["model"] == "m"
        assert kwargs["temperature"] == 0.5

    async def test_empty_transform_gets_placeholder(self, mock_llm_client, transform_request):
        service = LLMTextService(mock_llm_client)
        assert await service.transform(transform_request) == Ok(NO_RESPONSE_TEXT)

    async def test_feedback_parses_array(self, mock_llm_client):
        mock_llm_client.generate.return_value = LLMResponse(
            text='```json\n[{"id": "c1", "comment": "Slow start"}]\n```',
            input_tokens=10,
            output_tokens=5,
        )
        service = LLMTextService(mock_llm_client, feedback_temperature=0.2)

        result = await service.feedback(PersonaId.RUTHLESS_REVIEWER, "Text.")

        assert result == Ok([{"id": "c1", "comment": "Slow start"}])
        kwargs = mock_llm_client.generate.await_args.kwargs
        assert kwargs["system"] == FEEDBACK_SYSTEM
        assert kwargs["temperature"] == 0.2

    async def test_status_error_maps_to_service_error(self, mock_llm_client, transform_request):
        mock_llm_client.generate.side_effect = _status_error(529, {"error": "overloaded"})

        result = await LLMTextService(mock_llm_client).transform(transform_request)

        assert result == ServiceError(status=529, body=json.dumps({"error": "overloaded"}))

    async def test_status_error_without_body_uses_message(self, mock_llm_client, transform_request):
        mock_llm_client.generate.side_effect = _status_error(400, None)

        result = await LLMTextService(mock_llm_client).transform(transform_request)

        assert result == ServiceError(status=400, body="status error")

    async def test_other_failures_are_transport_errors(self, mock_llm_client):
        mock_llm_client.generate.side_effect = RuntimeError("socket closed")

        result = await LLMTextService(mock_llm_client).feedback(PersonaId.STYLISTIC_MENTOR, "x")

        assert isinstance(result, ServiceError)
        assert result.is_transport_error
        assert result.body == "socket closed"


def _http_service(handler) -> HttpTextService:
    return HttpTextService("http://backend.test/", transport=httpx.MockTransport(handler))


class TestHttpTextService:
    async def test_transform_posts_payload(self, transform_request):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"result": "Two."})

        result = await _http_service(handler).transform(transform_request)

        assert result == Ok("Two.")
        assert seen["url"] == "http://backend.test/llm/transform"
        assert seen["body"] == {
            "action": "shorten",
            "selectedText": "Para two.",
            "contextBefore": "Para one.",
            "contextAfter": "Para three.",
            "from": 11,
            "to": 20,
        }

    async def test_transform_accepts_text_key(self, transform_request):
        service = _http_service(lambda request: httpx.Response(200, json={"text": "Two."}))
        assert await service.transform(transform_request) == Ok("Two.")

    async def test_transform_null_result_falls_back_to_text(self, transform_request):
        service = _http_service(
            lambda request: httpx.Response(200, json={"result": None, "text": "Two."})
        )
        assert await service.transform(transform_request) == Ok("Two.")

    async def test_transform_empty_result_is_kept(self, transform_request):
        service = _http_service(
            lambda request: httpx.Response(200, json={"result": "", "text": "Two."})
        )
        assert await service.transform(transform_request) == Ok("")

    async def test_transform_non_json_is_malformed(self, transform_request):
        service = _http_service(lambda request: httpx.Response(200, text="<html>oops</html>"))
        result = await service.transform(transform_request)
        assert isinstance(result, Malformed)
        assert result.raw == "<html>oops</html>"

    async def test_transform_missing_result_is_malformed(self, transform_request):
        service = _http_service(lambda request: httpx.Response(200, json={"other": 1}))
        assert isinstance(await service.transform(transform_request), Malformed)

    async def test_non_success_status(self, transform_request):
        service = _http_service(lambda request: httpx.Response(500, text="internal"))
        assert await service.transform(transform_request) == ServiceError(status=500, body="internal")

    async def test_transport_failure(self, transform_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        result = await _http_service(handler).transform(transform_request)

        assert isinstance(result, ServiceError)
        assert result.event_message == "transport_error"

    async def test_feedback_posts_persona_and_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"id": "c1"}])

        result = await _http_service(handler).feedback(PersonaId.EMOTIONAL_READER, "She left.")

        assert result == Ok([{"id": "c1"}])
        assert seen["url"] == "http://backend.test/llm/feedback"
        assert seen["body"] == {"persona": "emotional_reader", "text": "She left."}

    async def test_feedback_non_array_is_malformed(self):
        service = _http_service(lambda request: httpx.Response(200, json="not an array"))
        result = await service.feedback(PersonaId.RUTHLESS_REVIEWER, "x")
        assert isinstance(result, Malformed)


class TestBuildTextService:
    def test_http_backend(self):
        config = AppConfig(service=ServiceConfig(backend="http", base_url="http://x.test"))
        service = build_text_service(config)
        assert isinstance(service, HttpTextService)
        assert service.base_url == "http://x.test"

    def test_llm_backend_uses_given_client(self, mock_llm_client):
        service = build_text_service(AppConfig(), llm=mock_llm_client)
        assert isinstance(service, LLMTextService)
        assert service.llm is mock_llm_client
