"""
Email Adapter Interface.

Protocol-based interface for sending transactional and broadcast emails.
Used by the registration workflow (confirmation links) and newsletter
fan-out.

Key requirements:
- HTML and plain text body on every message
- Stateless send operation
- Transport failures reported as a result, never raised

Implementation strategies:
1. DevEmailAdapter: Logs emails and keeps them in memory (dev/test)
2. PostmarkEmailAdapter: Sends via a Postmark-style HTTP API
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter: logged, not sent


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @property
    def is_failure(self) -> bool:
        return self.status == EmailStatus.FAILED

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(
        cls, recipient: str, message_id: str | None = None, reason: str = "Dev mode"
    ) -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        """Create a failed result."""
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations:
    - DevEmailAdapter: Logs to console (dev/test)
    - PostmarkEmailAdapter: Sends over HTTP
    """

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        """
        Send one email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body

        Returns:
            EmailResult with send outcome

        Notes:
            - Must not raise for transport errors; return failed status instead
        """
        ...
