"""
Subscriptions component.

Subscriber lifecycle: registration with a confirmation email, and the
pending_confirmation → confirmed transition.

Key behaviors:
- Validation happens before any storage access
- Subscriber upsert and token insert share one transaction
- Confirmation email is sent only after commit; a failed send leaves
  the committed rows in place
- Confirmation looks up the token, marks the subscriber confirmed and
  deletes all of its tokens in one transaction, so a token is redeemable
  at most once
- Re-registering a confirmed address is an idempotent no-op

Invariants:
- Email is unique across subscribers
- Status never reverts from confirmed
- No automatic retries
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from html import escape
from uuid import uuid4

from src.components.subscriptions.models import (
    ConfirmInput,
    ConfirmOutput,
    DeliveryError,
    RegisterInput,
    RegisterOutput,
    RegistrationOutcome,
    SubscriptionConfig,
    SubscriptionToken,
    UnknownTokenError,
    parse_new_subscriber,
)
from src.components.subscriptions.ports import SubscriberStorePort
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def build_confirmation_link(
    base_url: str,
    token: SubscriptionToken,
    path: str = "/subscriptions/confirm",
) -> str:
    """
    Build the confirmation link embedded in the email.

    Args:
        base_url: Public application base URL
        token: Subscription token
        path: URL path of the confirmation endpoint

    Returns:
        {base_url}{path}?subscription_token={token}
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?subscription_token={token}"


def render_confirmation_email(confirmation_link: str) -> tuple[str, str]:
    """
    Render the HTML and plain-text bodies of the confirmation email.

    Both bodies carry the same single link.

    Returns:
        (body_html, body_text)
    """
    href = escape(confirmation_link, quote=True)
    body_html = (
        "<p>Welcome to our newsletter!</p>"
        f'<p>Click <a href="{href}">here</a> to confirm your subscription.</p>'
    )
    body_text = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_link} to confirm your subscription."
    )
    return body_html, body_text


# --- Run Handlers ---


def run_register(
    inp: RegisterInput,
    store: SubscriberStorePort,
    email_sender: EmailPort,
    *,
    config: SubscriptionConfig | None = None,
    now: datetime | None = None,
) -> RegisterOutput:
    """
    Register a subscriber and send the confirmation email.

    Args:
        inp: Raw email and name
        store: Subscriber store
        email_sender: Outbound email transport
        config: Workflow configuration (Optional)
        now: Current time (for testing)

    Returns:
        RegisterOutput describing what happened

    Raises:
        SubscriberValidationError: malformed email or name, nothing persisted
        StorageError: transaction failed, nothing persisted
        DeliveryError: rows committed but the email could not be sent
    """
    cfg = config or SubscriptionConfig()
    subscriber = parse_new_subscriber(inp.email, inp.name)
    subscribed_at = now or datetime.now(UTC)

    token = SubscriptionToken.generate()
    with store.transaction() as tx:
        subscriber_id = tx.insert_or_update_subscriber(subscriber, uuid4(), subscribed_at)
        if subscriber_id is not None:
            tx.insert_token(subscriber_id, token)

    if subscriber_id is None:
        logger.info("Registration for an already confirmed subscriber ignored")
        return RegisterOutput(outcome=RegistrationOutcome.ALREADY_CONFIRMED)

    link = build_confirmation_link(cfg.base_url, token, cfg.confirmation_path)
    body_html, body_text = render_confirmation_email(link)
    result = email_sender.send_email(
        str(subscriber.email),
        cfg.confirmation_subject,
        body_html,
        body_text,
    )
    if result.is_failure:
        raise DeliveryError(str(subscriber.email), result.error or "unknown error")

    logger.info("Confirmation email sent to subscriber %s", subscriber_id)
    return RegisterOutput(
        outcome=RegistrationOutcome.CONFIRMATION_SENT,
        subscriber_id=subscriber_id,
        token=token,
        confirmation_link=link,
    )


def run_confirm(inp: ConfirmInput, store: SubscriberStorePort) -> ConfirmOutput:
    """
    Confirm a pending subscriber from a token.

    Raises:
        SubscriberValidationError: malformed token, no storage access
        UnknownTokenError: token not bound to any subscriber, nothing persisted
        StorageError: transaction failed, nothing persisted
    """
    token = SubscriptionToken.parse(inp.subscription_token)

    # Lookup and update share the write lock; a re-registration re-keys the id
    with store.transaction() as tx:
        subscriber_id = tx.lookup_subscriber_id_by_token(token)
        if subscriber_id is None or not tx.mark_confirmed(subscriber_id):
            raise UnknownTokenError()
        removed = tx.delete_tokens_for_subscriber(subscriber_id)

    logger.info("Subscriber %s confirmed", subscriber_id)
    return ConfirmOutput(subscriber_id=subscriber_id, tokens_removed=removed)


def run(
    inp: RegisterInput | ConfirmInput,
    *,
    store: SubscriberStorePort,
    email_sender: EmailPort | None = None,
    config: SubscriptionConfig | None = None,
) -> RegisterOutput | ConfirmOutput:
    """
    Main component entry point.

    Args:
        inp: Input command
        store: Subscriber store (Required)
        email_sender: Email transport (Required for registration)
        config: Configuration (Optional)

    Returns:
        Operation result
    """
    if isinstance(inp, RegisterInput):
        if email_sender is None:
            raise ValueError("Registration requires an email sender")
        return run_register(inp, store, email_sender, config=config)
    elif isinstance(inp, ConfirmInput):
        return run_confirm(inp, store)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
