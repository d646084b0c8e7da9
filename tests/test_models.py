"""Tests for Pydantic data models and tagged results."""

import pytest
from pydantic import ValidationError

from plotania.models import (
    ActionMode,
    CommentStatus,
    PersonaComment,
    PersonaId,
    SelectionRange,
    ServiceError,
    Suggestion,
    TransformRequest,
    persona_name,
)
from plotania.utils.text import clip, word_count, word_diff


class TestSelectionRange:
    def test_valid(self):
        selection = SelectionRange(start=2, end=5)
        assert not selection.is_empty

    def test_empty(self):
        assert SelectionRange(start=3, end=3).is_empty

    def test_rejects_reversed(self):
        with pytest.raises(ValidationError):
            SelectionRange(start=5, end=2)

    def test_rejects_negative(self):
        with pytest.raises(ValidationError):
            SelectionRange(start=-1, end=2)

    def test_frozen(self):
        selection = SelectionRange(start=0, end=1)
        with pytest.raises(ValidationError):
            selection.start = 1


class TestTransformRequest:
    def test_payload_uses_wire_keys(self):
        request = TransformRequest(
            action=ActionMode.SHORTEN,
            selected_text="abc",
            context_before="before",
            context_after="after",
            start=1,
            end=4,
            full_text="xabcx",
        )
        assert request.to_payload() == {
            "action": "shorten",
            "selectedText": "abc",
            "contextBefore": "before",
            "contextAfter": "after",
            "from": 1,
            "to": 4,
        }
        assert not request.selected_is_full_doc

    def test_selected_is_full_doc(self):
        request = TransformRequest(
            action=ActionMode.REWRITE, selected_text="all", start=0, end=0, full_text="all"
        )
        assert request.selected_is_full_doc


class TestSuggestion:
    def test_word_diff(self):
        suggestion = Suggestion(
            original="one two",
            suggestion="one two three four",
            mode=ActionMode.EXPAND,
            range=SelectionRange(start=0, end=7),
        )
        assert suggestion.word_diff == 2


class TestPersonaComment:
    def test_defaults(self):
        comment = PersonaComment(id="c1", persona=PersonaId.EMOTIONAL_READER)
        assert comment.status is CommentStatus.OPEN
        assert comment.excerpt == ""

    def test_persona_name(self):
        assert persona_name(PersonaId.RUTHLESS_REVIEWER) == "Ruthless Reviewer"
        assert persona_name("stylistic_mentor") == "Stylistic Mentor"
        assert persona_name("unknown_reader") == "unknown_reader"


class TestServiceError:
    def test_event_message(self):
        assert ServiceError(status=502, body="bad gateway").event_message == "backend_502"
        transport = ServiceError(status=None, body="connection refused")
        assert transport.is_transport_error
        assert transport.event_message == "transport_error"


class TestTextHelpers:
    def test_word_count(self):
        assert word_count("  one\ttwo\nthree ") == 3
        assert word_count("   ") == 0

    def test_word_diff(self):
        assert word_diff("a b c", "a") == -2

    def test_clip(self):
        assert clip("short") == "short"
        assert clip("a   b\n c") == "a b c"
        clipped = clip("x" * 50, max_len=10)
        assert len(clipped) == 10
        assert clipped.endswith("…")
        assert clip(None) == ""
