from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class Argon2PasswordHasher:
    """Password hasher backed by passlib's argon2 scheme."""

    def __init__(self, context: CryptContext | None = None) -> None:
        self._context = context or pwd_context
        self._dummy_hash: str | None = None

    def hash_password(self, plain: str) -> str:
        result: str = self._context.hash(plain)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            result: bool = self._context.verify(plain, hashed)
        except ValueError:
            # Stored value is not a recognizable hash
            return False
        return result

    @property
    def dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password("not-a-real-publisher-password")
        return self._dummy_hash
