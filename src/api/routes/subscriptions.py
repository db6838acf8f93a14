"""
Public subscription endpoints.

Endpoints:
- POST /subscriptions - Register a subscriber (form fields: name, email)
- GET /subscriptions/confirm - Confirm a subscriber from the emailed link
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, status

from src.adapters.sqlite_db import SQLiteSubscriberStore
from src.api.deps import get_email_adapter, get_subscriber_store, get_subscription_config
from src.components.subscriptions import (
    ConfirmInput,
    DeliveryError,
    RegisterInput,
    StorageError,
    SubscriberValidationError,
    SubscriptionConfig,
    UnknownTokenError,
    run_confirm,
    run_register,
)
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR_DETAIL = "Something went wrong"


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Subscribe to the newsletter",
    description="Register a subscriber and send a confirmation email.",
)
def subscribe(
    name: Annotated[str, Form()],
    email: Annotated[str, Form()],
    store: SQLiteSubscriberStore = Depends(get_subscriber_store),
    email_sender: EmailPort = Depends(get_email_adapter),
    config: SubscriptionConfig = Depends(get_subscription_config),
) -> Response:
    """
    Register a subscriber.

    Responses:
    - 200: Confirmation email sent, or address already confirmed
    - 400: Invalid name or email
    - 500: Storage or email delivery failure
    """
    try:
        run_register(RegisterInput(email=email, name=name), store, email_sender, config=config)
    except SubscriberValidationError as e:
        logger.info("Rejected subscription request: %s", e.reason)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason) from e
    except (StorageError, DeliveryError) as e:
        logger.exception("Failed to register a new subscriber")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e

    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/confirm",
    status_code=status.HTTP_200_OK,
    summary="Confirm a subscription",
)
def confirm(
    subscription_token: Annotated[str, Query()],
    store: SQLiteSubscriberStore = Depends(get_subscriber_store),
) -> Response:
    """
    Confirm a pending subscriber.

    Responses:
    - 200: Subscriber confirmed
    - 400: Malformed token
    - 401: Token not bound to any subscriber
    - 500: Storage failure
    """
    try:
        run_confirm(ConfirmInput(subscription_token=subscription_token), store)
    except SubscriberValidationError as e:
        logger.info("Rejected confirmation request: %s", e.reason)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason) from e
    except UnknownTokenError as e:
        logger.info("Confirmation attempted with an unknown token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except StorageError as e:
        logger.exception("Failed to confirm a pending subscriber")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e

    return Response(status_code=status.HTTP_200_OK)
