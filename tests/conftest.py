from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLitePublisherRepo, SQLiteSubscriberStore
from src.api.deps import get_email_adapter, get_password_hasher, get_settings
from src.api.main import app
from src.app_shell.config import DatabaseSettings, Settings
from src.components.publishers import CreatePublisherInput, Publisher, create_publisher

# Low-cost argon2 parameters keep the suite fast
FAST_CONTEXT = CryptContext(
    schemes=["argon2"],
    argon2__memory_cost=1024,
    argon2__rounds=1,
)

PUBLISHER_USERNAME = "editor"
PUBLISHER_PASSWORD = "everythinghastostartsomewhere"


@pytest.fixture
def db_path(tmp_path) -> str:
    """Migrated SQLite database in a temp directory."""
    path = str(tmp_path / "newsletter.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def store(db_path: str) -> SQLiteSubscriberStore:
    return SQLiteSubscriberStore(db_path)


@pytest.fixture
def publisher_repo(db_path: str) -> SQLitePublisherRepo:
    return SQLitePublisherRepo(db_path)


@pytest.fixture
def hasher() -> Argon2PasswordHasher:
    return Argon2PasswordHasher(FAST_CONTEXT)


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings(database=DatabaseSettings(path=db_path, run_migrations=False))


@pytest.fixture
def client(
    settings: Settings,
    email_adapter: DevEmailAdapter,
    hasher: Argon2PasswordHasher,
) -> Generator[TestClient, None, None]:
    """Create test client with dependency overrides."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_email_adapter] = lambda: email_adapter
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def publisher(publisher_repo: SQLitePublisherRepo, hasher: Argon2PasswordHasher) -> Publisher:
    return create_publisher(
        CreatePublisherInput(username=PUBLISHER_USERNAME, password=PUBLISHER_PASSWORD),
        publisher_repo,
        hasher,
    )


@pytest.fixture
def publisher_auth(publisher: Publisher) -> tuple[str, str]:
    """Basic auth pair for the publisher fixture."""
    return (PUBLISHER_USERNAME, PUBLISHER_PASSWORD)
