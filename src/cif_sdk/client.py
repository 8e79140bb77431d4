"""CIF API client.

    from cif_sdk import Client

    cli = Client(token="1234", remote="https://cif.example.com", timeout=10)

    result = cli.ping()
    print(f"roundtrip: {result.value:.3f} s")

    result = cli.search({"query": "example.com", "confidence": 25, "limit": 500})
    if result.ok:
        for observable in result.value:
            ...
    else:
        print(result.error)

Read operations (ping, search, search_id, search_feed) never raise for
request problems: they return a :class:`~cif_sdk.results.Failure`.
Submissions raise :class:`~cif_sdk.errors.SubmissionError` when the server
rejects them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from contextlib import nullcontext
from typing import Any, Optional, Union

from .config import ClientConfig
from .errors import DecodeError, RequestError, SubmissionError, TransportError, sanitize_message
from .query import build_query_url, build_submit_url, encode_submission
from .results import Failure, Success
from .timing import Stopwatch
from .transport import Transport

Result = Union[Success, Failure]

OBSERVABLES = "observables"
FEEDS = "feeds"
PING = "ping"


class Client:
    """Client for the CIF REST API.

    Args:
        config: Connection settings. When omitted, keyword options are
            passed to :class:`~cif_sdk.config.ClientConfig` instead.
        logger: Anything with ``debug``, ``warning`` and ``critical``
            methods; shared with the transport. Defaults to this module's
            logger, which is silent unless logging is configured by the
            application.
        transport: Pre-built transport (mainly for tests).
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        logger: Any = None,
        transport: Optional[Transport] = None,
        **options: Any,
    ):
        if config is None:
            config = ClientConfig(**options)
        elif options:
            config = config.with_options(**options)
        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.transport = transport or Transport(config, logger=self.logger)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    @staticmethod
    def _merge(params: Optional[Mapping[str, Any]], extra: dict[str, Any]) -> dict[str, Any]:
        merged = dict(params or {})
        merged.update(extra)
        return merged

    def _make_request(
        self,
        resource: str,
        params: Optional[Mapping[str, Any]] = None,
        stopwatch: Optional[Stopwatch] = None,
    ) -> Result:
        """GET a resource and decode the JSON body on a 200 response.

        When given, ``stopwatch`` runs around the transport call only.
        """
        params = params or {}
        token = params.get("token") or self.config.token

        url = build_query_url(self.config.remote, resource, token, params)
        self.logger.debug("uri created: %s", sanitize_message(url))
        self.logger.debug("making request...")

        try:
            with stopwatch or nullcontext():
                resp = self.transport.get(url)
        except TransportError as e:
            self.logger.debug("transport failure: %s", e)
            return Failure(e)

        if resp.status != 200:
            self.logger.debug("request failed: %s %s", resp.status, resp.reason)
            return Failure(RequestError(resp.status, resp.reason, resp.text))

        self.logger.debug("success, decoding...")
        try:
            return Success(json.loads(resp.text))
        except ValueError as e:
            return Failure(DecodeError(f"invalid JSON in {resource} response: {e}", resp.text))

    def _submit(self, resource: str, data: Any) -> Success:
        """PUT records to a resource.

        Raises:
            SubmissionError: Status >= 399 or the request never completed
            DecodeError: Accepted, but the response body is not JSON
            TypeError: ``data`` is neither a record nor a sequence of records
        """
        self.logger.debug("encoding args...")
        body = encode_submission(data)

        url = build_submit_url(self.config.remote, resource, self.config.token)
        self.logger.debug("uri generated: %s", sanitize_message(url))
        self.logger.debug("making request...")

        try:
            resp = self.transport.put(url, body)
        except TransportError as e:
            self.logger.critical("submission to %s failed: %s", resource, e)
            raise SubmissionError(None, str(e)) from e

        if resp.status >= 399:
            self.logger.critical("status: %s -- %s", resp.status, resp.reason)
            raise SubmissionError(resp.status, resp.reason, resp.text)

        self.logger.debug("decoding response..")
        try:
            content = json.loads(resp.text)
        except ValueError as e:
            raise DecodeError(f"invalid JSON in {resource} submission response: {e}", resp.text) from e

        self.logger.debug("success...")
        return Success(content, response=resp)

    # --- read operations ---

    def ping(self) -> Result:
        """Measure the round trip to the ``ping`` resource.

        Returns:
            Success with the elapsed time in seconds, or the Failure of
            the underlying request
        """
        self.logger.debug("generating ping...")
        sw = Stopwatch()
        result = self._make_request(PING, stopwatch=sw)
        if not result.ok:
            return result
        self.logger.debug("success...")
        return Success(sw.elapsed)

    def search(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Result:
        """Search observables.

        Args:
            params: Query parameters (query, confidence, limit, token, ...),
                passed through unchanged; keyword arguments are merged in

        Returns:
            Success with the decoded list of observables, or Failure
        """
        return self._make_request(OBSERVABLES, self._merge(params, kwargs))

    def search_id(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Result:
        """Fetch observables by id. Only ``id`` and ``token`` are sent."""
        args = self._merge(params, kwargs)
        reduced = {
            "id": args.get("id"),
            "token": args.get("token") or self.config.token,
        }
        return self._make_request(OBSERVABLES, reduced)

    search_by_id = search_id

    def search_feed(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Result:
        """Search aggregated feeds."""
        return self._make_request(FEEDS, self._merge(params, kwargs))

    # --- write operations ---

    def submit(self, data: Any) -> Success:
        """Submit one observable record or a list of them.

            cli.submit({
                "observable": "example.com",
                "tlp": "green",
                "tags": ["zeus", "botnet"],
                "provider": "me@example.com",
            })
        """
        return self._submit(OBSERVABLES, data)

    def submit_feed(self, data: Any) -> Success:
        """Submit one feed record or a list of them."""
        return self._submit(FEEDS, data)
