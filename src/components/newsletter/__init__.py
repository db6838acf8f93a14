"""
Newsletter component.

Broadcast of newsletter issues to confirmed subscribers.
"""

from src.components.newsletter.component import publish_newsletter
from src.components.newsletter.models import NewsletterIssue, PublishReport
from src.components.newsletter.ports import ConfirmedSubscriberSourcePort

__all__ = [
    "publish_newsletter",
    "NewsletterIssue",
    "PublishReport",
    "ConfirmedSubscriberSourcePort",
]
