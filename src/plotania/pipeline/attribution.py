"""Running human/AI character accounting for a document.

The ledger is advisory, not a live diff. It is reconciled only when the
document reports a new total length and when a suggestion is applied; in both
cases ``human_chars = max(total - ai_chars, 0)``. Any length change is
therefore credited to the human, including hand edits made inside text that
was inserted by the AI. ``ai_chars`` only ever grows.
"""

from __future__ import annotations

import logging
import math

from plotania.models.attribution import AttributionStats

logger = logging.getLogger(__name__)


class AttributionLedger:
    """Human/AI character counts with zero-safe percentages."""

    def __init__(self, human_chars: int = 0, ai_chars: int = 0):
        if human_chars < 0 or ai_chars < 0:
            raise ValueError("character counts must be non-negative")
        self.human_chars = human_chars
        self.ai_chars = ai_chars

    @property
    def total_chars(self) -> int:
        return self.human_chars + self.ai_chars

    def _reconcile(self, total_length: int) -> None:
        self.human_chars = max(total_length - self.ai_chars, 0)

    def on_document_changed(self, total_length: int) -> None:
        self._reconcile(total_length)

    def on_suggestion_applied(self, suggestion_length: int, total_length_after_apply: int) -> None:
        self.ai_chars += suggestion_length
        self._reconcile(total_length_after_apply)
        logger.debug(
            "Ledger after apply: human=%d ai=%d", self.human_chars, self.ai_chars
        )

    def percentages(self) -> AttributionStats:
        """AI share rounded half-up; the human share is its complement."""
        total = self.total_chars
        if total == 0:
            ai_percent = human_percent = 0
        else:
            ai_percent = math.floor(self.ai_chars * 100 / total + 0.5)
            human_percent = 100 - ai_percent
        return AttributionStats(
            human_chars=self.human_chars,
            ai_chars=self.ai_chars,
            human_percent=human_percent,
            ai_percent=ai_percent,
        )
