"""Tagged result values returned by client operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import CIFError


@dataclass(frozen=True)
class Response:
    """Raw transport response."""

    status: int
    reason: str
    text: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Success:
    """Operation succeeded; ``value`` holds the decoded JSON payload.

    Write operations also carry the raw ``response`` for callers that
    need the status or headers.
    """

    value: Any
    response: Optional[Response] = None

    ok = True
    error = None

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Operation failed; ``error`` says how."""

    error: CIFError

    ok = False
    value = None
    response = None

    def unwrap(self) -> Any:
        raise self.error
