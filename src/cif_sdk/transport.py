"""HTTP transport built on a requests session."""

from __future__ import annotations

import logging
from typing import Any

import requests
import urllib3

from .config import ClientConfig
from .errors import TransportError, sanitize_message
from .results import Response


class Transport:
    """Synchronous HTTP executor for one client.

    Holds a single ``requests.Session``. Sessions are not documented as
    thread-safe, so a transport (and the client owning it) is meant for
    sequential use; give each thread its own client.

    No retries are attempted. Network failures raise
    :class:`~cif_sdk.errors.TransportError`; any HTTP status, including
    errors, is returned as a :class:`~cif_sdk.results.Response`.
    """

    def __init__(self, config: ClientConfig, logger: Any = None):
        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.session = requests.Session()
        self._setup_session()

    def _setup_session(self) -> None:
        """Configure session with fixed headers, proxy and TLS policy."""
        # Only the configured proxy is used; ignore *_PROXY from the environment.
        self.session.trust_env = False
        self.session.headers.update(self.config.headers)
        self.session.headers["User-Agent"] = self.config.user_agent
        self.session.proxies.update(self.config.proxies())
        self.session.verify = self.config.verify_ssl

        if not self.config.verify_ssl:
            self.logger.warning("TLS certificate verification disabled for %s", self.config.remote)
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def _send(self, method: str, url: str, **kwargs) -> Response:
        try:
            r = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.Timeout as e:
            raise TransportError(
                f"{method} {sanitize_message(url)} timed out after {self.config.timeout}s"
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"{method} request failed: {sanitize_message(str(e))}") from e

        return Response(
            status=r.status_code,
            reason=r.reason or "",
            text=r.text,
            headers=dict(r.headers),
        )

    def get(self, url: str) -> Response:
        """Issue a GET; the query string is already part of ``url``."""
        return self._send("GET", url)

    def put(self, url: str, body: str) -> Response:
        """Issue a PUT with a JSON text body.

        Redirects are not followed: requests would replay a redirected PUT
        as a bodiless GET, so the 3xx status itself is returned.
        """
        return self._send(
            "PUT",
            url,
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            allow_redirects=False,
        )

    def close(self) -> None:
        self.session.close()
