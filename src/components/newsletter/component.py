"""
Newsletter component.

Fan-out of one issue to every confirmed subscriber.

Key behaviors:
- Only confirmed subscribers are selected (pending ones never receive issues)
- Each recipient is attempted independently; one failure does not stop
  the others
- Failures are logged and reported in PublishReport, never retried
- The publish succeeds once the confirmed-subscriber query succeeds

The caller authenticates the publisher before invoking this component.
"""

from __future__ import annotations

import logging

from src.components.newsletter.models import NewsletterIssue, PublishReport
from src.components.newsletter.ports import ConfirmedSubscriberSourcePort
from src.components.subscriptions.models import (
    SubscriberEmail,
    SubscriberValidationError,
)
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)


def publish_newsletter(
    issue: NewsletterIssue,
    store: ConfirmedSubscriberSourcePort,
    email_sender: EmailPort,
) -> PublishReport:
    """
    Send an issue to all confirmed subscribers.

    Args:
        issue: Title and bodies to send
        store: Source of confirmed subscriber addresses
        email_sender: Outbound email transport

    Returns:
        PublishReport with per-recipient outcomes

    Raises:
        StorageError: if the confirmed-subscriber query fails
    """
    report = PublishReport()

    for stored_email in store.list_confirmed_subscriber_emails():
        try:
            recipient = SubscriberEmail.parse(stored_email)
        except SubscriberValidationError:
            logger.warning("Skipping a confirmed subscriber: stored contact details are invalid")
            report.skipped_invalid.append(stored_email)
            continue

        result = email_sender.send_email(str(recipient), issue.title, issue.html, issue.text)
        if result.is_failure:
            logger.error("Failed to send newsletter issue to %s: %s", recipient, result.error)
            report.failed.append(str(recipient))
        else:
            report.delivered.append(str(recipient))

    logger.info(
        "Newsletter issue published: %d delivered, %d failed, %d skipped",
        len(report.delivered),
        len(report.failed),
        len(report.skipped_invalid),
    )
    return report
