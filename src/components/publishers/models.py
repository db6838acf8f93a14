from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Publisher:
    user_id: UUID
    username: str
    password_hash: str


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


@dataclass
class CreatePublisherInput:
    username: str
    password: str


class AuthenticationError(Exception):
    """Credentials missing, unknown user or wrong password."""

    def __init__(self, reason: str = "Invalid username or password") -> None:
        self.reason = reason
        super().__init__(reason)


class PublisherExistsError(Exception):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Publisher '{username}' already exists")
