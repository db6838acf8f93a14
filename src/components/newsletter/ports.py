"""
Newsletter component ports.
"""

from __future__ import annotations

from typing import Protocol


class ConfirmedSubscriberSourcePort(Protocol):
    """Read side of the subscriber store used for fan-out."""

    def list_confirmed_subscriber_emails(self) -> list[str]:
        """List the stored addresses of all confirmed subscribers."""
        ...
