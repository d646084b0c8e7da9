"""Error hierarchy shared by the editor and pipeline layers."""

from __future__ import annotations

__all__ = [
    "PlotaniaError",
    "InvalidRangeError",
    "ConfigError",
]


class PlotaniaError(Exception):
    """Base error for all plotania failures."""


class InvalidRangeError(PlotaniaError, ValueError):
    """Raised when a selection range does not fit the current document."""

    def __init__(self, start: int, end: int, length: int):
        super().__init__(f"Range ({start}, {end}) is outside document of length {length}")
        self.start = start
        self.end = end
        self.length = length


class ConfigError(PlotaniaError, ValueError):
    """Raised when a configuration value is missing or out of bounds."""
