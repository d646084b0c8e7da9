"""Tagged results returned by the external text service.

Every caller handles all three shapes explicitly instead of probing response
fields: ``Ok`` carries the parsed value, ``Malformed`` a response that arrived
but could not be interpreted, ``ServiceError`` a non-success status or a
transport failure (``status`` is ``None`` when no response was received).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Malformed:
    raw: str
    reason: str = ""


@dataclass(frozen=True)
class ServiceError:
    status: int | None
    body: str

    @property
    def is_transport_error(self) -> bool:
        return self.status is None

    @property
    def event_message(self) -> str:
        """Short code recorded in error events."""
        if self.status is None:
            return "transport_error"
        return f"backend_{self.status}"


ServiceResult = Union[Ok[Any], Malformed, ServiceError]
