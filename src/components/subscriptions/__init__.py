"""
Subscriptions component.

Double opt-in registration and confirmation of newsletter subscribers.
"""

from src.components.subscriptions.component import (
    build_confirmation_link,
    render_confirmation_email,
    run,
    run_confirm,
    run_register,
)
from src.components.subscriptions.models import (
    NAME_FORBIDDEN_CHARACTERS,
    NAME_MAX_GRAPHEMES,
    TOKEN_LENGTH,
    VALID_TRANSITIONS,
    ConfirmInput,
    ConfirmOutput,
    DeliveryError,
    NewSubscriber,
    RegisterInput,
    RegisterOutput,
    RegistrationOutcome,
    StorageError,
    SubscriberEmail,
    SubscriberName,
    SubscriberRecord,
    SubscriberStatus,
    SubscriberValidationError,
    SubscriptionConfig,
    SubscriptionServiceError,
    SubscriptionToken,
    UnknownTokenError,
    can_transition,
    parse_new_subscriber,
)
from src.components.subscriptions.ports import (
    SubscriberStorePort,
    SubscriberTransactionPort,
)

__all__ = [
    # Component
    "run",
    "run_register",
    "run_confirm",
    # Pure functions
    "build_confirmation_link",
    "render_confirmation_email",
    "parse_new_subscriber",
    "can_transition",
    # Constants
    "NAME_FORBIDDEN_CHARACTERS",
    "NAME_MAX_GRAPHEMES",
    "TOKEN_LENGTH",
    "VALID_TRANSITIONS",
    # Models
    "SubscriberEmail",
    "SubscriberName",
    "SubscriptionToken",
    "NewSubscriber",
    "SubscriberRecord",
    "SubscriberStatus",
    "SubscriptionConfig",
    # Input/Output
    "RegisterInput",
    "RegisterOutput",
    "RegistrationOutcome",
    "ConfirmInput",
    "ConfirmOutput",
    # Errors
    "SubscriptionServiceError",
    "SubscriberValidationError",
    "UnknownTokenError",
    "StorageError",
    "DeliveryError",
    # Ports
    "SubscriberStorePort",
    "SubscriberTransactionPort",
]
