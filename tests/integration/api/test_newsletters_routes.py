"""
Tests for POST /newsletters.
"""

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter

ISSUE = {
    "title": "Newsletter title",
    "content": {
        "text": "Newsletter body as plain text",
        "html": "<p>Newsletter body as HTML</p>",
    },
}


@pytest.fixture
def pending_subscriber(client: TestClient, email_adapter: DevEmailAdapter) -> str:
    client.post("/subscriptions", data={"name": "pending", "email": "pending@gmail.com"})
    return "pending@gmail.com"


@pytest.fixture
def confirmed_subscriber(client: TestClient, email_adapter: DevEmailAdapter) -> str:
    client.post("/subscriptions", data={"name": "le guin", "email": "ursula_le_guin@gmail.com"})
    email = email_adapter.get_last_email()
    assert email is not None
    link = next(w for w in email.body_text.split() if w.startswith("http"))
    response = client.get(link.replace("http://127.0.0.1:8000", ""))
    assert response.status_code == 200
    email_adapter.clear()
    return "ursula_le_guin@gmail.com"


class TestPublishAuth:
    def test_missing_credentials_rejected(self, client: TestClient) -> None:
        response = client.post("/newsletters", json=ISSUE)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="publish"'

    def test_unknown_user_rejected(self, client: TestClient, publisher_auth) -> None:
        response = client.post("/newsletters", json=ISSUE, auth=("nobody", "password"))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="publish"'

    def test_wrong_password_rejected(self, client: TestClient, publisher_auth) -> None:
        username, _ = publisher_auth

        response = client.post("/newsletters", json=ISSUE, auth=(username, "wrong-password"))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="publish"'

    def test_auth_checked_before_body(self, client: TestClient) -> None:
        response = client.post("/newsletters", json={"title": "Missing content"})

        assert response.status_code == 401

    def test_rejected_request_sends_nothing(
        self,
        client: TestClient,
        email_adapter: DevEmailAdapter,
        confirmed_subscriber: str,
    ) -> None:
        client.post("/newsletters", json=ISSUE, auth=("nobody", "password"))

        assert email_adapter.email_count == 0


class TestPublishBody:
    @pytest.mark.parametrize(
        "body",
        [
            {"content": {"text": "Newsletter body as plain text", "html": "<p>body</p>"}},
            {"title": "Newsletter!"},
            {"title": "Newsletter!", "content": {"text": "only text"}},
            {"title": "Newsletter!", "content": {"html": "<p>only html</p>"}},
        ],
    )
    def test_invalid_body_returns_400(
        self, client: TestClient, publisher_auth, body: dict
    ) -> None:
        response = client.post("/newsletters", json=body, auth=publisher_auth)

        assert response.status_code == 400


class TestPublishDelivery:
    def test_no_subscribers_is_ok(
        self, client: TestClient, publisher_auth, email_adapter: DevEmailAdapter
    ) -> None:
        response = client.post("/newsletters", json=ISSUE, auth=publisher_auth)

        assert response.status_code == 200
        assert email_adapter.email_count == 0

    def test_pending_subscribers_receive_nothing(
        self,
        client: TestClient,
        publisher_auth,
        email_adapter: DevEmailAdapter,
        pending_subscriber: str,
    ) -> None:
        email_adapter.clear()

        response = client.post("/newsletters", json=ISSUE, auth=publisher_auth)

        assert response.status_code == 200
        assert email_adapter.get_emails_to(pending_subscriber) == []

    def test_confirmed_subscribers_receive_issue(
        self,
        client: TestClient,
        publisher_auth,
        email_adapter: DevEmailAdapter,
        confirmed_subscriber: str,
        pending_subscriber: str,
    ) -> None:
        email_adapter.clear()

        response = client.post("/newsletters", json=ISSUE, auth=publisher_auth)

        assert response.status_code == 200
        assert email_adapter.email_count == 1
        email = email_adapter.get_last_email()
        assert email is not None
        assert email.recipient == confirmed_subscriber
        assert email.subject == "Newsletter title"
        assert email.body_html == "<p>Newsletter body as HTML</p>"
        assert email.body_text == "Newsletter body as plain text"

    def test_delivery_failures_do_not_fail_the_request(
        self,
        client: TestClient,
        publisher_auth,
        email_adapter: DevEmailAdapter,
        confirmed_subscriber: str,
    ) -> None:
        email_adapter.failing_recipients.add(confirmed_subscriber)

        response = client.post("/newsletters", json=ISSUE, auth=publisher_auth)

        assert response.status_code == 200
