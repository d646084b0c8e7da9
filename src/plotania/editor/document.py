"""Document model seen by the controllers, plus an in-memory implementation.

Controllers only rely on the ``DocumentModel`` protocol: the full text, the
current selection, range-scoped read and replace, and provenance marks on
inserted text. ``TextDocument`` implements it over a plain string with
0-based character offsets.
"""

from __future__ import annotations

from typing import Callable, Protocol

from plotania.errors import InvalidRangeError
from plotania.models.suggestion import SelectionRange

AI_MARK = "ai"

ChangeListener = Callable[[str], None]


class DocumentModel(Protocol):
    @property
    def text(self) -> str: ...

    @property
    def length(self) -> int: ...

    @property
    def selection(self) -> SelectionRange: ...

    def text_between(self, start: int, end: int) -> str: ...

    def replace_range(self, start: int, end: int, text: str, mark: str | None = None) -> None: ...

    def set_selection(self, start: int, end: int) -> None: ...

    def subscribe(self, listener: ChangeListener) -> None: ...


class TextDocument:
    """Plain-text document with a selection, provenance marks and change listeners."""

    def __init__(self, text: str = "", selection: tuple[int, int] | None = None):
        self._text = text
        self._selection = SelectionRange(start=0, end=0)
        self._marks: list[tuple[str, int, int]] = []
        self._listeners: list[ChangeListener] = []
        if selection is not None:
            self.set_selection(*selection)

    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    @property
    def selection(self) -> SelectionRange:
        return self._selection

    def _check(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise InvalidRangeError(start, end, len(self._text))

    def text_between(self, start: int, end: int) -> str:
        self._check(start, end)
        return self._text[start:end]

    def set_selection(self, start: int, end: int) -> None:
        self._check(start, end)
        self._selection = SelectionRange(start=start, end=end)

    def replace_range(self, start: int, end: int, text: str, mark: str | None = None) -> None:
        """Replace ``[start, end)`` with ``text``, optionally tagging the insertion.

        Existing marks are shifted by the length delta; marks overlapping the
        replaced range keep only their parts outside it. The selection
        collapses to the end of the inserted text.
        """
        self._check(start, end)
        delta = len(text) - (end - start)
        self._text = self._text[:start] + text + self._text[end:]

        shifted: list[tuple[str, int, int]] = []
        for name, m_start, m_end in self._marks:
            if m_end <= start:
                shifted.append((name, m_start, m_end))
            elif m_start >= end:
                shifted.append((name, m_start + delta, m_end + delta))
            else:
                if m_start < start:
                    shifted.append((name, m_start, start))
                if m_end > end:
                    shifted.append((name, end + delta, m_end + delta))
        if mark and text:
            shifted.append((mark, start, start + len(text)))
        self._marks = sorted(shifted, key=lambda m: (m[1], m[2]))

        cursor = start + len(text)
        self._selection = SelectionRange(start=cursor, end=cursor)
        self._notify()

    def insert(self, offset: int, text: str) -> None:
        """Type ``text`` at ``offset`` as a human edit."""
        self.replace_range(offset, offset, text)

    def delete(self, start: int, end: int) -> None:
        self.replace_range(start, end, "")

    def marked_ranges(self, mark: str = AI_MARK) -> list[SelectionRange]:
        return [
            SelectionRange(start=m_start, end=m_end)
            for name, m_start, m_end in self._marks
            if name == mark
        ]

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._text)
