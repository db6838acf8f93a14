"""
Subscriptions component ports.

Protocol interfaces for subscriber persistence.

Every mutating call participates in a transaction opened by the workflow;
implementations raise StorageError (with the driver error chained) on any
failure.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.components.subscriptions.models import (
    NewSubscriber,
    SubscriberRecord,
    SubscriptionToken,
)


class SubscriberTransactionPort(Protocol):
    """
    Mutations available inside one atomic storage transaction.

    Changes become visible only when the owning context manager exits
    cleanly; an exception rolls all of them back.
    """

    def insert_or_update_subscriber(
        self,
        subscriber: NewSubscriber,
        new_id: UUID,
        subscribed_at: datetime,
    ) -> UUID | None:
        """
        Insert a pending subscriber, or re-key a still-pending one.

        A single conditional write keyed by email:
        - no row: insert with new_id, status pending_confirmation
        - pending row: overwrite its id with new_id
        - confirmed row: untouched

        Returns:
            The persisted id, or None when the email is already confirmed
        """
        ...

    def insert_token(self, subscriber_id: UUID, token: SubscriptionToken) -> None:
        """Bind a confirmation token to a subscriber."""
        ...

    def lookup_subscriber_id_by_token(self, token: SubscriptionToken) -> UUID | None:
        """Get the subscriber id bound to a token, as seen by this transaction."""
        ...

    def mark_confirmed(self, subscriber_id: UUID) -> bool:
        """
        Set status to confirmed.

        Returns:
            False when no subscriber has this id
        """
        ...

    def delete_tokens_for_subscriber(self, subscriber_id: UUID) -> int:
        """Delete every token bound to a subscriber, returning the count."""
        ...


class SubscriberStorePort(Protocol):
    """
    Subscriber store interface.

    Abstracts persistence of subscribers and their confirmation tokens.
    """

    def transaction(self) -> AbstractContextManager[SubscriberTransactionPort]:
        """Open an atomic write transaction."""
        ...

    def lookup_subscriber_id_by_token(self, token: SubscriptionToken) -> UUID | None:
        """Get the subscriber id bound to a token (outside any transaction)."""
        ...

    def list_confirmed_subscriber_emails(self) -> list[str]:
        """List the stored addresses of all confirmed subscribers."""
        ...

    def get_by_email(self, email: str) -> SubscriberRecord | None:
        """Get subscriber by email address."""
        ...

    def list_tokens_for_subscriber(self, subscriber_id: UUID) -> list[str]:
        """List outstanding tokens for a subscriber."""
        ...
