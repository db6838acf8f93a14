"""
Subscriptions component models.

Value objects, entities and error types for the subscriber lifecycle.

State machine (Subscriber: pending_confirmation → confirmed)
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

import regex
from email_validator import EmailNotValidError, validate_email

# --- Constants ---

NAME_MAX_GRAPHEMES = 256
NAME_FORBIDDEN_CHARACTERS = frozenset('/()"<>\\{}')

TOKEN_LENGTH = 25
TOKEN_ALPHABET = string.ascii_letters + string.digits

_GRAPHEME = regex.compile(r"\X")


# --- State Machine ---


class SubscriberStatus(Enum):
    """
    Subscriber status.

    State transitions:
    - pending_confirmation → confirmed (via confirmation link)
    """

    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


VALID_TRANSITIONS: dict[SubscriberStatus, set[SubscriberStatus]] = {
    SubscriberStatus.PENDING_CONFIRMATION: {SubscriberStatus.CONFIRMED},
    SubscriberStatus.CONFIRMED: set(),  # Terminal state
}


def can_transition(from_status: SubscriberStatus, to_status: SubscriberStatus) -> bool:
    """Check if a status transition is allowed."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


# --- Error Types ---


class SubscriptionServiceError(Exception):
    """Base error for the subscription service."""

    pass


class SubscriberValidationError(SubscriptionServiceError):
    """Malformed email, name or token supplied by a client."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


class UnknownTokenError(SubscriptionServiceError):
    """Token is well-formed but not bound to any subscriber."""

    def __init__(self) -> None:
        super().__init__("There is no subscriber associated with the provided token.")


class StorageError(SubscriptionServiceError):
    """Failure reported by the persistence layer."""

    pass


class DeliveryError(SubscriptionServiceError):
    """Outbound email could not be delivered."""

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to send email to {recipient}: {reason}")


# --- Value Objects ---


@dataclass(frozen=True)
class SubscriberEmail:
    """A syntactically valid email address."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberEmail:
        """
        Parse a raw email address.

        Grammar only: no DNS or deliverability lookups are performed.

        Raises:
            SubscriberValidationError: if the address is malformed
        """
        try:
            info = validate_email(raw, check_deliverability=False)
        except EmailNotValidError as e:
            raise SubscriberValidationError(
                "email", f"{raw} is not a valid email address"
            ) from e
        return cls(info.normalized)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberName:
    """A display name free of markup characters."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberName:
        """
        Parse a raw display name.

        Rejects names that are blank after trimming, longer than 256
        grapheme clusters, or that contain any of / ( ) " < > \\ { }.

        Raises:
            SubscriberValidationError: if the name is not acceptable
        """
        is_empty = not raw.strip()
        is_too_long = len(_GRAPHEME.findall(raw)) > NAME_MAX_GRAPHEMES
        has_forbidden = any(c in NAME_FORBIDDEN_CHARACTERS for c in raw)

        if is_empty or is_too_long or has_forbidden:
            raise SubscriberValidationError("name", f"{raw} is not a valid subscriber name")
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriptionToken:
    """One-time bearer value proving control of a confirmation link."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriptionToken:
        """
        Validate the shape of an externally supplied token.

        Raises:
            SubscriberValidationError: unless raw is 25 ASCII alphanumerics
        """
        if len(raw) != TOKEN_LENGTH or any(c not in TOKEN_ALPHABET for c in raw):
            raise SubscriberValidationError(
                "subscription_token", "The subscription token is malformed"
            )
        return cls(raw)

    @classmethod
    def generate(cls) -> SubscriptionToken:
        """Generate a fresh token from a cryptographically secure source."""
        return cls("".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH)))

    def __str__(self) -> str:
        return self.value


# --- Entities ---


@dataclass(frozen=True)
class NewSubscriber:
    """Validated registration data, not yet persisted."""

    email: SubscriberEmail
    name: SubscriberName


@dataclass(frozen=True)
class SubscriberRecord:
    """A persisted subscriber row."""

    id: UUID
    email: str
    name: str
    status: SubscriberStatus
    subscribed_at: datetime


def parse_new_subscriber(raw_email: str, raw_name: str) -> NewSubscriber:
    """Validate a raw name/email pair (name first)."""
    name = SubscriberName.parse(raw_name)
    email = SubscriberEmail.parse(raw_email)
    return NewSubscriber(email=email, name=name)


# --- Input Models ---


@dataclass(frozen=True)
class RegisterInput:
    """Input for a registration attempt."""

    email: str
    name: str


@dataclass(frozen=True)
class ConfirmInput:
    """Input for a confirmation attempt."""

    subscription_token: str


# --- Output Models ---


class RegistrationOutcome(Enum):
    """What a successful registration did."""

    CONFIRMATION_SENT = "confirmation_sent"
    ALREADY_CONFIRMED = "already_confirmed"  # Idempotent no-op


@dataclass(frozen=True)
class RegisterOutput:
    """Output from a registration attempt."""

    outcome: RegistrationOutcome
    subscriber_id: UUID | None = None
    token: SubscriptionToken | None = None
    confirmation_link: str | None = None


@dataclass(frozen=True)
class ConfirmOutput:
    """Output from a confirmation attempt."""

    subscriber_id: UUID
    tokens_removed: int = 0


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    """Subscription workflow configuration."""

    base_url: str = "http://127.0.0.1:8000"
    confirmation_path: str = "/subscriptions/confirm"
    confirmation_subject: str = "Welcome!"
