import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.postmark_email import PostmarkEmailAdapter
from src.adapters.sqlite_db import SQLitePublisherRepo, SQLiteSubscriberStore
from src.app_shell.config import Settings, load_settings
from src.components.publishers import (
    AuthenticationError,
    Credentials,
    Publisher,
    validate_credentials,
)
from src.components.subscriptions.models import StorageError, SubscriptionConfig
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)

PUBLISH_REALM = "publish"


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return load_settings()


def get_subscription_config(settings: Settings = Depends(get_settings)) -> SubscriptionConfig:
    return SubscriptionConfig(base_url=settings.application.base_url)


# --- Repos ---
def get_subscriber_store(settings: Settings = Depends(get_settings)) -> SQLiteSubscriberStore:
    return SQLiteSubscriberStore(settings.database.path, settings.database.timeout_seconds)


def get_publisher_repo(settings: Settings = Depends(get_settings)) -> SQLitePublisherRepo:
    return SQLitePublisherRepo(settings.database.path, settings.database.timeout_seconds)


# --- Adapters ---
# Email adapter singleton; the Postmark adapter holds a pooled HTTP client
_email_adapter_instance: EmailPort | None = None


def build_email_adapter(settings: Settings) -> EmailPort:
    email = settings.email_client
    if email.backend == "postmark":
        return PostmarkEmailAdapter(
            base_url=email.base_url,
            sender=email.sender_email,
            authorization_token=email.authorization_token.get_secret_value(),
            timeout_seconds=email.timeout_seconds,
        )
    return DevEmailAdapter()


def get_email_adapter(settings: Settings = Depends(get_settings)) -> EmailPort:
    """Get email adapter singleton."""
    global _email_adapter_instance
    if _email_adapter_instance is None:
        _email_adapter_instance = build_email_adapter(settings)
    return _email_adapter_instance


_password_hasher_instance: Argon2PasswordHasher | None = None


def get_password_hasher() -> Argon2PasswordHasher:
    """Get password hasher singleton."""
    global _password_hasher_instance
    if _password_hasher_instance is None:
        _password_hasher_instance = Argon2PasswordHasher()
    return _password_hasher_instance


# --- Auth ---
basic_auth = HTTPBasic(realm=PUBLISH_REALM, auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": f'Basic realm="{PUBLISH_REALM}"'},
    )


def get_current_publisher(
    credentials: Annotated[HTTPBasicCredentials | None, Depends(basic_auth)],
    repo: SQLitePublisherRepo = Depends(get_publisher_repo),
    hasher: Argon2PasswordHasher = Depends(get_password_hasher),
) -> Publisher:
    if credentials is None:
        raise _unauthorized("The 'Authorization' header is missing")

    try:
        return validate_credentials(
            Credentials(username=credentials.username, password=credentials.password),
            repo,
            hasher,
        )
    except AuthenticationError as e:
        logger.info("Publisher authentication failed: %s", e.reason)
        raise _unauthorized("Invalid credentials") from e
    except StorageError as e:
        logger.exception("Could not check publisher credentials")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong",
        ) from e


def close_email_adapter() -> None:
    """Release the email adapter singleton and its HTTP connections."""
    global _email_adapter_instance
    if isinstance(_email_adapter_instance, PostmarkEmailAdapter):
        _email_adapter_instance.close()
    _email_adapter_instance = None
