"""Data models for the writing assistant core."""

from plotania.models.attribution import AttributionStats
from plotania.models.persona import (
    PERSONAS,
    CommentStatus,
    PersonaComment,
    PersonaConfig,
    PersonaId,
    persona_name,
)
from plotania.models.results import Malformed, Ok, ServiceError, ServiceResult
from plotania.models.suggestion import (
    ActionMode,
    SelectionRange,
    Suggestion,
    TransformRequest,
)

__all__ = [
    "PERSONAS",
    "ActionMode",
    "AttributionStats",
    "CommentStatus",
    "Malformed",
    "Ok",
    "PersonaComment",
    "PersonaConfig",
    "PersonaId",
    "SelectionRange",
    "ServiceError",
    "ServiceResult",
    "Suggestion",
    "TransformRequest",
    "persona_name",
]
