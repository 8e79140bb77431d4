"""URL and body construction for CIF API requests.

Read requests carry everything in the query string:

    <remote>/<resource>?token=<token>&key=value...

Parameters with a falsy value (None, "", 0, False, empty containers) are
left out, so a zero or empty value can never be sent through this path.
Values are percent-encoded; ordinary values such as domains, addresses
and numbers come out unchanged.

Write requests PUT a JSON list of records to ``<remote>/<resource>/``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Optional
from urllib.parse import quote

_SAFE_CHARS = ",:"


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        value = "true"
    elif isinstance(value, Mapping):
        raise TypeError(f"cannot encode a mapping as a query value: {value!r}")
    elif isinstance(value, (list, tuple, set, frozenset)):
        value = ",".join(str(v) for v in value)
    return quote(str(value), safe=_SAFE_CHARS)


def build_query_url(
    remote: str,
    resource: str,
    token: str,
    params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Build a read-path URL.

    Args:
        remote: Base URL of the CIF instance
        resource: Resource path segment (observables, feeds, ping)
        token: Token to authenticate with
        params: Extra query parameters, appended in mapping order

    Returns:
        Fully composed URL
    """
    url = f"{remote.rstrip('/')}/{resource}?token={_encode(token)}"
    for key, value in (params or {}).items():
        if key == "token" or not value:
            continue
        url += f"&{_encode(key)}={_encode(value)}"
    return url


def build_submit_url(remote: str, resource: str, token: str) -> str:
    """Build a write-path URL (note the trailing slash before the query)."""
    return f"{remote.rstrip('/')}/{resource}/?token={_encode(token)}"


def normalize_submission(data: Any) -> list[Any]:
    """Wrap a single record in a list; pass sequences of records through."""
    if isinstance(data, Mapping):
        return [data]
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Sequence):
        raise TypeError(
            f"submission must be a record or a sequence of records, not {type(data).__name__}"
        )
    return list(data)


def encode_submission(data: Any) -> str:
    """Serialise a submission payload to the JSON request body."""
    return json.dumps(normalize_submission(data), separators=(",", ":"))
