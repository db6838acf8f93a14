"""
Newsletter publishing endpoint.

POST /newsletters - Send an issue to every confirmed subscriber.
Requires HTTP Basic credentials of a publisher.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from src.adapters.sqlite_db import SQLiteSubscriberStore
from src.api.deps import get_current_publisher, get_email_adapter, get_subscriber_store
from src.components.newsletter import NewsletterIssue, publish_newsletter
from src.components.publishers import Publisher
from src.components.subscriptions import StorageError
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)

router = APIRouter()


class NewsletterContent(BaseModel):
    html: str
    text: str


class NewsletterRequest(BaseModel):
    """Request body for publishing an issue."""

    title: str
    content: NewsletterContent


@router.post("", status_code=status.HTTP_200_OK, summary="Publish a newsletter issue")
def publish(
    body: NewsletterRequest,
    publisher: Publisher = Depends(get_current_publisher),
    store: SQLiteSubscriberStore = Depends(get_subscriber_store),
    email_sender: EmailPort = Depends(get_email_adapter),
) -> Response:
    issue = NewsletterIssue(title=body.title, html=body.content.html, text=body.content.text)
    try:
        report = publish_newsletter(issue, store, email_sender)
    except StorageError as e:
        logger.exception("Failed to get the list of confirmed subscribers")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong",
        ) from e

    if not report.all_delivered:
        logger.warning(
            "Issue '%s' published by %s with %d failed deliveries",
            issue.title,
            publisher.username,
            len(report.failed),
        )
    return Response(status_code=status.HTTP_200_OK)
