"""
Unit tests for PostmarkEmailAdapter.

The HTTP API is replaced with httpx.MockTransport; no network access.
"""

import json

import httpx

from src.adapters.postmark_email import PostmarkEmailAdapter
from src.core.ports.email import EmailStatus


def make_adapter(handler) -> PostmarkEmailAdapter:
    return PostmarkEmailAdapter(
        base_url="https://email.example.org/",
        sender="newsletter@gmail.com",
        authorization_token="my-secret-token",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def send(adapter: PostmarkEmailAdapter):
    return adapter.send_email(
        recipient="ursula_le_guin@gmail.com",
        subject="Welcome!",
        body_html="<p>Hello</p>",
        body_text="Hello",
    )


class TestPostmarkRequest:
    def test_request_shape(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"MessageID": "abc-123"})

        send(make_adapter(handler))

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://email.example.org/email"
        assert request.headers["X-Postmark-Server-Token"] == "my-secret-token"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "From": "newsletter@gmail.com",
            "To": "ursula_le_guin@gmail.com",
            "Subject": "Welcome!",
            "HtmlBody": "<p>Hello</p>",
            "TextBody": "Hello",
        }


class TestPostmarkResult:
    def test_success_returns_sent_with_message_id(self) -> None:
        adapter = make_adapter(lambda request: httpx.Response(200, json={"MessageID": "abc-123"}))

        result = send(adapter)

        assert result.status == EmailStatus.SENT
        assert result.message_id == "abc-123"
        assert result.recipient == "ursula_le_guin@gmail.com"

    def test_success_without_json_body(self) -> None:
        adapter = make_adapter(lambda request: httpx.Response(200, text="ok"))

        result = send(adapter)

        assert result.status == EmailStatus.SENT
        assert result.message_id is None

    def test_server_error_returns_failed(self) -> None:
        adapter = make_adapter(lambda request: httpx.Response(500))

        result = send(adapter)

        assert result.status == EmailStatus.FAILED
        assert result.is_failure
        assert "500" in (result.error or "")

    def test_timeout_returns_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = send(make_adapter(handler))

        assert result.status == EmailStatus.FAILED

    def test_connection_error_returns_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = send(make_adapter(handler))

        assert result.status == EmailStatus.FAILED
