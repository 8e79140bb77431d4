"""Exception types raised or returned by the CIF client."""

from __future__ import annotations

import re

# Matches the token query parameter (and similar secrets) in URLs and messages.
_SENSITIVE_PARAM_RE = re.compile(
    r"((?:token|api_key|apiKey|Authorization)[=:]\s*)[^\s&,;\"']+",
    re.IGNORECASE,
)


def sanitize_message(msg: str) -> str:
    """Redact token values from a string."""
    return _SENSITIVE_PARAM_RE.sub(r"\1[REDACTED]", msg)


class CIFError(Exception):
    """Base exception for CIF client errors."""

    pass


class ConfigError(CIFError):
    """Raised when the client configuration is invalid."""

    pass


class TransportError(CIFError):
    """Connection, timeout or TLS failure before an HTTP response arrived."""

    pass


class RequestError(CIFError):
    """A read request answered with a status other than 200.

    The body is kept as raw text; it is never parsed since error bodies
    are not guaranteed to be JSON.
    """

    def __init__(self, status: int, reason: str, body: str):
        super().__init__(f"request failed({status}): {reason}: {body}")
        self.status = status
        self.reason = reason
        self.body = body


class DecodeError(CIFError):
    """A successful response carried a body that is not valid JSON."""

    def __init__(self, message: str, body: str):
        super().__init__(message)
        self.body = body


class SubmissionError(CIFError):
    """A submission was rejected by the server or never reached it."""

    def __init__(self, status: int | None, reason: str, body: str = ""):
        if status is None:
            message = f"submission failed ({reason}): contact administrator"
        else:
            message = f"submission failed ({status} {reason}): contact administrator"
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.body = body
