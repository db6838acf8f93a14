"""
Postmark Email Adapter.

Sends email through a Postmark-compatible HTTP API:

    POST {base_url}/email
    X-Postmark-Server-Token: <token>
    {"From": ..., "To": ..., "Subject": ..., "HtmlBody": ..., "TextBody": ...}

Non-2xx responses, timeouts and connection errors are returned as a
FAILED EmailResult.
"""

from __future__ import annotations

import logging

import httpx

from src.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


class PostmarkEmailAdapter:
    """HTTP email adapter. Implements EmailPort protocol."""

    def __init__(
        self,
        base_url: str,
        sender: str,
        authorization_token: str,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        payload = {
            "From": self.sender,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": body_html,
            "TextBody": body_text,
        }
        try:
            response = self._client.post(
                f"{self.base_url}/email",
                headers={"X-Postmark-Server-Token": self._authorization_token},
                json=payload,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Email delivery to %s failed: %s", recipient, e)
            return EmailResult.failed(recipient, str(e))

        return EmailResult.success(recipient, message_id=self._message_id(response))

    @staticmethod
    def _message_id(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("MessageID"):
            return str(body["MessageID"])
        return None

    def close(self) -> None:
        self._client.close()
