"""Pydantic model for derived attribution percentages."""

from __future__ import annotations

from pydantic import BaseModel


class AttributionStats(BaseModel):
    human_chars: int
    ai_chars: int
    human_percent: int
    ai_percent: int

    @property
    def total_chars(self) -> int:
        return self.human_chars + self.ai_chars
