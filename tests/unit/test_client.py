"""Unit tests for the CIF client operations."""

import json
from unittest.mock import patch

import pytest
import requests
import responses

from cif_sdk import Client, ClientConfig
from cif_sdk.errors import (
    DecodeError,
    RequestError,
    SubmissionError,
    TransportError,
)
from cif_sdk.results import Failure, Response, Success

REMOTE = "https://cif.example.com"


class RecordingLogger:
    """Minimal logger capturing messages by level."""

    def __init__(self):
        self.messages = []

    def debug(self, msg, *args):
        self.messages.append(("debug", msg % args))

    def warning(self, msg, *args):
        self.messages.append(("warning", msg % args))

    def critical(self, msg, *args):
        self.messages.append(("critical", msg % args))


@pytest.fixture
def client():
    return Client(token="1234", remote=REMOTE)


class TestClientConstruction:
    """Tests for client defaults and configuration."""

    def test_defaults(self):
        cli = Client(token="1234")
        assert cli.config.remote == "https://localhost"
        assert cli.config.verify_ssl is True
        assert cli.config.timeout == 300

    def test_explicit_config(self):
        config = ClientConfig(token="1234", remote=REMOTE, timeout=10)
        cli = Client(config)
        assert cli.config is config

    def test_config_with_overrides(self):
        config = ClientConfig(token="1234")
        cli = Client(config, timeout=5)
        assert cli.config.timeout == 5
        assert config.timeout == 300

    def test_context_manager_closes(self):
        with Client(token="1234") as cli:
            assert cli.transport.session is not None


class TestSearch:
    """Tests for read operations."""

    @responses.activate
    def test_search_success(self, client):
        responses.add(
            responses.GET,
            f"{REMOTE}/observables",
            json=[{"observable": "example.com", "confidence": 85}],
            status=200,
        )

        result = client.search({"query": "example.com", "confidence": 25, "limit": 500})

        assert isinstance(result, Success)
        assert result.ok is True
        assert result.error is None
        assert result.value == [{"observable": "example.com", "confidence": 85}]
        assert responses.calls[0].request.url == (
            f"{REMOTE}/observables?token=1234&query=example.com&confidence=25&limit=500"
        )

    @responses.activate
    def test_search_skips_falsy_params(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        client.search({"query": "example.com", "confidence": 0, "limit": None, "tags": ""})

        assert responses.calls[0].request.url == f"{REMOTE}/observables?token=1234&query=example.com"

    @responses.activate
    def test_search_keyword_params(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        client.search(query="example.com", limit=10)

        assert responses.calls[0].request.url == (
            f"{REMOTE}/observables?token=1234&query=example.com&limit=10"
        )

    @responses.activate
    def test_search_token_override(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        client.search({"query": "example.com", "token": "other"})

        assert responses.calls[0].request.url == f"{REMOTE}/observables?token=other&query=example.com"

    @responses.activate
    def test_search_error_not_parsed(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", body="not found", status=404)

        result = client.search({"query": "example.com"})

        assert isinstance(result, Failure)
        assert result.ok is False
        assert result.value is None
        assert isinstance(result.error, RequestError)
        assert result.error.status == 404
        assert result.error.reason == "Not Found"
        assert result.error.body == "not found"
        assert str(result.error) == "request failed(404): Not Found: not found"

    @responses.activate
    def test_search_non_200_success_status_is_error(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json={"a": 1}, status=201)

        result = client.search({"query": "example.com"})

        assert isinstance(result.error, RequestError)
        assert result.error.status == 201

    @responses.activate
    def test_search_decode_error(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", body="<html>", status=200)

        result = client.search({"query": "example.com"})

        assert isinstance(result.error, DecodeError)
        assert not isinstance(result.error, RequestError)
        assert result.error.body == "<html>"

    @responses.activate
    def test_search_transport_error_returned(self, client):
        responses.add(
            responses.GET,
            f"{REMOTE}/observables",
            body=requests.exceptions.ConnectionError("Connection refused"),
        )

        result = client.search({"query": "example.com"})

        assert isinstance(result.error, TransportError)
        with pytest.raises(TransportError):
            result.unwrap()

    @responses.activate
    def test_read_success_decodes_json(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", body='{"a":1}', status=200)

        assert client.search({"query": "x"}).unwrap() == {"a": 1}

    @responses.activate
    def test_search_id_reduces_params(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        client.search_id({"id": "X", "token": "T", "extra": "Y"})

        url = responses.calls[0].request.url
        assert url == f"{REMOTE}/observables?token=T&id=X"
        assert "extra" not in url

    @responses.activate
    def test_search_id_default_token(self, client):
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        client.search_by_id({"id": "X", "query": "ignored"})

        assert responses.calls[0].request.url == f"{REMOTE}/observables?token=1234&id=X"

    @responses.activate
    def test_search_feed(self, client):
        responses.add(responses.GET, f"{REMOTE}/feeds", json={"feed": []}, status=200)

        result = client.search_feed({"query": "botnet", "confidence": 65})

        assert result.value == {"feed": []}
        assert responses.calls[0].request.url == f"{REMOTE}/feeds?token=1234&query=botnet&confidence=65"


class TestPing:
    """Tests for the connectivity check."""

    @responses.activate
    def test_ping_returns_duration(self, client):
        responses.add(responses.GET, f"{REMOTE}/ping", json={"pong": True}, status=200)

        result = client.ping()

        assert result.ok
        assert isinstance(result.value, float)
        assert 0 < result.value < client.config.timeout
        assert responses.calls[0].request.url == f"{REMOTE}/ping?token=1234"

    @responses.activate
    def test_ping_ignores_payload(self, client):
        responses.add(responses.GET, f"{REMOTE}/ping", json=[1, 2, 3], status=200)

        assert isinstance(client.ping().value, float)

    def test_ping_times_transport_call_only(self):
        class FakeTransport:
            def get(self, url):
                return Response(status=200, reason="OK", text="{}")

        cli = Client(token="1234", remote=REMOTE, transport=FakeTransport())

        with patch("cif_sdk.timing.time.perf_counter", side_effect=[1.0, 1.5]):
            result = cli.ping()

        assert result.value == 0.5

    @responses.activate
    def test_ping_propagates_failure(self, client):
        responses.add(responses.GET, f"{REMOTE}/ping", body="unauthorized", status=401)

        result = client.ping()

        assert isinstance(result.error, RequestError)
        assert result.error.status == 401

    @responses.activate
    def test_ping_propagates_transport_failure(self, client):
        responses.add(
            responses.GET,
            f"{REMOTE}/ping",
            body=requests.exceptions.ConnectTimeout("timed out"),
        )

        result = client.ping()

        assert isinstance(result.error, TransportError)


class TestSubmit:
    """Tests for write operations."""

    RECORD = {"observable": "example.com", "tlp": "green", "tags": ["zeus", "botnet"], "provider": "me@example.com"}

    @responses.activate
    def test_submit_success(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", json=[1], status=201)

        result = client.submit(self.RECORD)

        assert result.ok
        assert result.value == [1]
        assert result.response.status == 201
        assert result.response.reason == "Created"
        assert result.response.headers["Content-Type"] == "application/json"
        request = responses.calls[0].request
        assert request.method == "PUT"
        assert request.url == f"{REMOTE}/observables/?token=1234"
        assert json.loads(request.body) == [self.RECORD]

    @responses.activate
    def test_single_and_list_bodies_identical(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", json=[1], status=201)
        responses.add(responses.PUT, f"{REMOTE}/observables/", json=[1], status=201)

        client.submit(self.RECORD)
        client.submit([self.RECORD])

        assert responses.calls[0].request.body == responses.calls[1].request.body

    @responses.activate
    def test_submit_feed(self, client):
        responses.add(responses.PUT, f"{REMOTE}/feeds/", json={"ok": 2}, status=200)

        result = client.submit_feed([{"observable": "a.com"}, {"observable": "b.com"}])

        assert result.value == {"ok": 2}
        assert responses.calls[0].request.url == f"{REMOTE}/feeds/?token=1234"

    @responses.activate
    def test_submit_ignores_token_in_record(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", json=[1], status=201)

        client.submit({"observable": "example.com", "token": "other"})

        assert responses.calls[0].request.url == f"{REMOTE}/observables/?token=1234"

    @responses.activate
    def test_submit_redirect_not_followed(self, client):
        responses.add(
            responses.PUT,
            f"{REMOTE}/observables/",
            json={"moved": True},
            status=302,
            headers={"Location": f"{REMOTE}/elsewhere"},
        )
        responses.add(responses.GET, f"{REMOTE}/elsewhere", json={"ok": 1}, status=200)

        result = client.submit(self.RECORD)

        assert [c.request.method for c in responses.calls] == ["PUT"]
        assert result.response.status == 302
        assert result.value == {"moved": True}

    @responses.activate
    def test_submit_failure_raises(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", body="boom", status=500)

        with pytest.raises(SubmissionError) as exc_info:
            client.submit(self.RECORD)

        assert exc_info.value.status == 500
        assert exc_info.value.body == "boom"
        assert "contact administrator" in str(exc_info.value)

    @responses.activate
    def test_submit_399_is_failure(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", body="", status=399)

        with pytest.raises(SubmissionError):
            client.submit(self.RECORD)

    @responses.activate
    def test_submit_transport_failure_raises(self, client):
        responses.add(
            responses.PUT,
            f"{REMOTE}/observables/",
            body=requests.exceptions.ConnectionError("Connection refused"),
        )

        with pytest.raises(SubmissionError) as exc_info:
            client.submit(self.RECORD)

        assert exc_info.value.status is None
        assert isinstance(exc_info.value.__cause__, TransportError)

    @responses.activate
    def test_submit_decode_error(self, client):
        responses.add(responses.PUT, f"{REMOTE}/observables/", body="accepted", status=201)

        with pytest.raises(DecodeError):
            client.submit(self.RECORD)

    def test_submit_rejects_string(self, client):
        with pytest.raises(TypeError):
            client.submit("example.com")


class TestLogging:
    """Tests for the injected logger."""

    @responses.activate
    def test_debug_messages_redact_token(self):
        log = RecordingLogger()
        cli = Client(token="secret-token", remote=REMOTE, logger=log)
        responses.add(responses.GET, f"{REMOTE}/observables", json=[], status=200)

        cli.search({"query": "example.com"})

        levels = {level for level, _ in log.messages}
        assert levels == {"debug"}
        assert all("secret-token" not in msg for _, msg in log.messages)
        assert any("uri created" in msg for _, msg in log.messages)

    @responses.activate
    def test_submission_failure_logged_critical(self):
        log = RecordingLogger()
        cli = Client(token="1234", remote=REMOTE, logger=log)
        responses.add(responses.PUT, f"{REMOTE}/observables/", body="", status=403)

        with pytest.raises(SubmissionError):
            cli.submit({"observable": "example.com"})

        assert ("critical", "status: 403 -- Forbidden") in log.messages

    @patch("cif_sdk.transport.urllib3.disable_warnings")
    def test_transport_uses_injected_logger(self, mock_disable):
        log = RecordingLogger()
        cli = Client(token="1234", remote=REMOTE, verify_ssl=False, logger=log)

        assert cli.transport.logger is log
        assert ("warning", f"TLS certificate verification disabled for {REMOTE}") in log.messages
