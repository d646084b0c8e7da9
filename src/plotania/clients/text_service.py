"""External text service: transform a passage or collect persona feedback.

Two implementations share the ``TextService`` protocol. ``LLMTextService``
prompts Claude directly; ``HttpTextService`` calls a backend exposing
``/llm/transform`` and ``/llm/feedback``. Both return tagged results and never
raise for service or transport failures.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

import anthropic
import httpx

from plotania.clients.llm_client import DEFAULT_MODEL, LLMClient
from plotania.config import AppConfig
from plotania.models.persona import DEFAULT_PERSONA_PROMPT, PERSONAS, PersonaId
from plotania.models.results import Malformed, Ok, ServiceError, ServiceResult
from plotania.models.suggestion import ActionMode, TransformRequest
from plotania.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "No response from AI model."

TRANSFORM_SYSTEM = "You are a helpful creative-writing assistant."
FEEDBACK_SYSTEM = "You are a helpful fiction reviewer."

MODE_INSTRUCTIONS: dict[ActionMode, str] = {
    ActionMode.REWRITE: "Rewrite the selected text for clarity and flow.",
    ActionMode.EXPAND: "Expand the selected text with more detail, keeping the same storyline and style.",
    ActionMode.SHORTEN: "Shorten the selected text while keeping the key meaning and tone.",
    ActionMode.TONE: "Adjust the tone of the selected text to be more natural and engaging for general readers.",
}


class TextService(Protocol):
    async def transform(self, request: TransformRequest) -> ServiceResult: ...

    async def feedback(self, persona: PersonaId, text: str) -> ServiceResult: ...


def build_transform_prompt(request: TransformRequest) -> str:
    """Prompt asking for a revision of only the selected passage."""
    instruction = MODE_INSTRUCTIONS.get(request.action, "Rewrite and improve the selected text.")
    return f"""You are helping a writer edit part of a story.

Action: {request.action.value}

Here is the surrounding context of the selected passage.

Context before:
{request.context_before or "(none)"}

Selected text:
\"\"\"{request.selected_text}\"\"\"

Context after:
{request.context_after or "(none)"}

{instruction}
Please transform ONLY the selected text, so that it still fits smoothly into the given context.
Return only the revised version of the selected text, with no additional commentary."""


def build_feedback_prompt(persona: PersonaId | str, text: str) -> str:
    """Prompt asking a persona for 3-6 JSON comments on ``text``."""
    try:
        framing = PERSONAS[PersonaId(persona)].prompt
    except ValueError:
        framing = DEFAULT_PERSONA_PROMPT
    persona_value = persona.value if isinstance(persona, PersonaId) else persona
    return f"""{framing}

Here is the text the author wrote:
\"\"\"{text}\"\"\"

Provide 3-6 concrete comments in JSON format.
Each comment should be an object with keys:
- "id": a short unique string id (like "c1", "c2", etc.)
- "persona": the persona id you are using (e.g. "{persona_value}")
- "excerpt": a short quoted excerpt from the text that you are commenting on
- "comment": what you notice (what's working or not)
- "suggestion": a specific suggestion for improvement

Return ONLY a JSON array, no explanation, no surrounding text."""


def parse_comment_array(raw: str) -> ServiceResult:
    """Interpret a feedback body; anything but a JSON array is ``Malformed``."""
    try:
        data = extract_json(raw or "[]")
    except ValueError:
        return Malformed(raw=raw, reason="not JSON")
    if not isinstance(data, list):
        return Malformed(raw=raw, reason="not a JSON array")
    return Ok(data)


class LLMTextService:
    """Text service backed directly by the Claude API."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        model: str = DEFAULT_MODEL,
        transform_temperature: float = 0.8,
        feedback_temperature: float = 0.8,
        max_tokens: int = 2048,
    ):
        self.llm = llm
        self.model = model
        self.transform_temperature = transform_temperature
        self.feedback_temperature = feedback_temperature
        self.max_tokens = max_tokens

    async def _generate(self, prompt: str, system: str, temperature: float) -> ServiceResult:
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=system,
                model=self.model,
                temperature=temperature,
                max_tokens=self.max_tokens,
            )
        except anthropic.APIStatusError as exc:
            if exc.body is None:
                body = exc.message
            else:
                body = exc.body if isinstance(exc.body, str) else json.dumps(exc.body)
            return ServiceError(status=exc.status_code, body=body)
        except Exception as exc:
            logger.exception("Text service call failed")
            return ServiceError(status=None, body=str(exc))
        return Ok(response.text.strip())

    async def transform(self, request: TransformRequest) -> ServiceResult:
        result = await self._generate(
            build_transform_prompt(request), TRANSFORM_SYSTEM, self.transform_temperature
        )
        if isinstance(result, Ok):
            return Ok(result.value or NO_RESPONSE_TEXT)
        return result

    async def feedback(self, persona: PersonaId, text: str) -> ServiceResult:
        result = await self._generate(
            build_feedback_prompt(persona, text), FEEDBACK_SYSTEM, self.feedback_temperature
        )
        if isinstance(result, Ok):
            return parse_comment_array(result.value)
        return result


class HttpTextService:
    """Text service reached over HTTP (``/llm/transform`` and ``/llm/feedback``)."""

    def __init__(
        self,
        base_url: str = "http://localhost:4001",
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _post(self, path: str, body: dict) -> ServiceResult:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(path, json=body)
        except httpx.HTTPError as exc:
            logger.error("Request to %s failed: %s", path, exc)
            return ServiceError(status=None, body=str(exc))
        if not response.is_success:
            return ServiceError(status=response.status_code, body=response.text)
        return Ok(response.text)

    async def transform(self, request: TransformRequest) -> ServiceResult:
        result = await self._post("/llm/transform", request.to_payload())
        if not isinstance(result, Ok):
            return result
        try:
            data = json.loads(result.value)
        except json.JSONDecodeError:
            return Malformed(raw=result.value, reason="not JSON")
        if not isinstance(data, dict):
            return Malformed(raw=result.value, reason="not a JSON object")
        text = data.get("result")
        if text is None:
            text = data.get("text")
        if not isinstance(text, str):
            return Malformed(raw=result.value, reason="missing result")
        return Ok(text)

    async def feedback(self, persona: PersonaId, text: str) -> ServiceResult:
        persona_value = persona.value if isinstance(persona, PersonaId) else persona
        result = await self._post("/llm/feedback", {"persona": persona_value, "text": text})
        if not isinstance(result, Ok):
            return result
        return parse_comment_array(result.value)


def build_text_service(config: AppConfig, llm: LLMClient | None = None) -> TextService:
    """Create the text service selected by ``config.service.backend``."""
    if config.service.backend == "http":
        return HttpTextService(config.service.base_url, timeout=config.service.timeout)
    return LLMTextService(
        llm or LLMClient(timeout=config.llm.timeout),
        model=config.llm.model,
        transform_temperature=config.llm.transform_temperature,
        feedback_temperature=config.llm.feedback_temperature,
        max_tokens=config.llm.max_tokens,
    )
