from typing import Protocol

from .models import Publisher


class PublisherRepoPort(Protocol):
    def get_by_username(self, username: str) -> Publisher | None: ...
    def save(self, publisher: Publisher) -> Publisher: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, plain: str) -> str: ...
    def verify_password(self, plain: str, hashed: str) -> bool: ...

    @property
    def dummy_hash(self) -> str:
        """A valid hash matching no real password."""
        ...
