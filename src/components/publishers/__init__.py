"""
Publishers component.

Credential check for newsletter publishers (HTTP Basic, argon2 hashes).
"""

from .component import create_publisher, ensure_publisher, validate_credentials
from .models import (
    AuthenticationError,
    CreatePublisherInput,
    Credentials,
    Publisher,
    PublisherExistsError,
)
from .ports import PasswordHasherPort, PublisherRepoPort

__all__ = [
    "validate_credentials",
    "create_publisher",
    "ensure_publisher",
    "AuthenticationError",
    "CreatePublisherInput",
    "Credentials",
    "Publisher",
    "PublisherExistsError",
    "PasswordHasherPort",
    "PublisherRepoPort",
]
