"""
Dev Email Adapter.

Keeps outgoing mail in memory and writes a one-line summary to the log
instead of contacting a mail provider. Backs the "dev" email backend and
the test suite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from src.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentEmail:
    message_id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str


def _preview(body: str, limit: int) -> str:
    return body if len(body) <= limit else body[:limit] + "..."


@dataclass
class DevEmailAdapter:
    """
    EmailPort that records instead of delivering.

    Accepted mail gets a SKIPPED result. Addresses in failing_recipients
    get a FAILED result and are not recorded.
    """

    outbox: list[SentEmail] = field(default_factory=list)
    failing_recipients: set[str] = field(default_factory=set)
    body_preview_length: int = 100

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        if recipient in self.failing_recipients:
            logger.warning("EMAIL (dev): simulated failure for %s", recipient)
            return EmailResult.failed(recipient, "Simulated transport failure")

        email = SentEmail(f"dev-{uuid4().hex[:12]}", recipient, subject, body_html, body_text)
        self.outbox.append(email)
        logger.info(
            "EMAIL (dev): To=%s, Subject=%s, Body=%s",
            recipient,
            subject,
            _preview(body_html, self.body_preview_length),
            extra={"message_id": email.message_id},
        )
        return EmailResult.skipped(recipient, message_id=email.message_id, reason="dev backend")

    def get_last_email(self) -> SentEmail | None:
        return self.outbox[-1] if self.outbox else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.outbox if e.recipient == recipient]

    def clear(self) -> None:
        self.outbox.clear()

    @property
    def email_count(self) -> int:
        return len(self.outbox)
