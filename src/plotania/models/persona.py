"""Pydantic models for reader personas and their comments."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class PersonaId(str, Enum):
    RUTHLESS_REVIEWER = "ruthless_reviewer"
    EMOTIONAL_READER = "emotional_reader"
    STYLISTIC_MENTOR = "stylistic_mentor"


class PersonaConfig(BaseModel):
    id: PersonaId
    name: str
    tagline: str
    focus: str
    prompt: str  # framing placed before the author's text

    model_config = {"frozen": True}


PERSONAS: dict[PersonaId, PersonaConfig] = {
    PersonaId.RUTHLESS_REVIEWER: PersonaConfig(
        id=PersonaId.RUTHLESS_REVIEWER,
        name="Ruthless Reviewer",
        tagline='My comment will be "sharp and brutally honest".',
        focus="Picks apart weak structure, pacing, and logic.",
        prompt=(
            "You are a ruthless but constructive fiction reviewer.\n"
            "Focus on coherence, pacing, plot holes, and logical consistency.\n"
            "Be honest but helpful."
        ),
    ),
    PersonaId.EMOTIONAL_READER: PersonaConfig(
        id=PersonaId.EMOTIONAL_READER,
        name="Emotional Reader",
        tagline="I'm caught up with the story; here's how it feels to read.",
        focus="Focuses on engagement, emotional impact, and character feelings.",
        prompt=(
            "You are an emotionally engaged beta reader.\n"
            "Focus on engagement, emotional impact, and how the characters make you feel."
        ),
    ),
    PersonaId.STYLISTIC_MENTOR: PersonaConfig(
        id=PersonaId.STYLISTIC_MENTOR,
        name="Stylistic Mentor",
        tagline="I care about style, voice, and sentence-level craft.",
        focus="Helps polish prose and avoid clichés.",
        prompt=(
            "You are a stylistic mentor who cares about style, voice, and sentence-level craft.\n"
            "Focus on prose quality, clarity, and clichés."
        ),
    ),
}

DEFAULT_PERSONA_PROMPT = "You are a thoughtful fiction reviewer who gives concrete, helpful feedback."


def persona_name(persona_id: PersonaId | str) -> str:
    """Display name for a persona id, or the raw id when unknown."""
    try:
        return PERSONAS[PersonaId(persona_id)].name
    except ValueError:
        return str(persona_id)


class CommentStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    HIDDEN = "hidden"


class PersonaComment(BaseModel):
    """One piece of persona feedback bound to an excerpt."""

    id: str
    persona: PersonaId
    excerpt: str = ""
    comment: str = ""
    suggestion: str = ""
    status: CommentStatus = CommentStatus.OPEN
