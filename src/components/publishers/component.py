from uuid import uuid4

from .models import (
    AuthenticationError,
    CreatePublisherInput,
    Credentials,
    Publisher,
    PublisherExistsError,
)
from .ports import PasswordHasherPort, PublisherRepoPort


def validate_credentials(
    credentials: Credentials,
    repo: PublisherRepoPort,
    hasher: PasswordHasherPort,
) -> Publisher:
    publisher = repo.get_by_username(credentials.username)
    if publisher is None:
        # Same cost as a wrong password
        hasher.verify_password(credentials.password, hasher.dummy_hash)
        raise AuthenticationError("Unknown username")

    if not hasher.verify_password(credentials.password, publisher.password_hash):
        raise AuthenticationError("Invalid password")

    return publisher


def create_publisher(
    inp: CreatePublisherInput,
    repo: PublisherRepoPort,
    hasher: PasswordHasherPort,
) -> Publisher:
    if not inp.username or not inp.password:
        raise ValueError("Username and password are required")

    if repo.get_by_username(inp.username):
        raise PublisherExistsError(inp.username)

    publisher = Publisher(
        user_id=uuid4(),
        username=inp.username,
        password_hash=hasher.hash_password(inp.password),
    )
    return repo.save(publisher)


def ensure_publisher(
    username: str | None,
    password: str | None,
    repo: PublisherRepoPort,
    hasher: PasswordHasherPort,
) -> Publisher | None:
    """Create the bootstrap publisher if configured and not yet present."""
    if not username or not password:
        return None

    existing = repo.get_by_username(username)
    if existing:
        return existing

    return create_publisher(CreatePublisherInput(username=username, password=password), repo, hasher)
