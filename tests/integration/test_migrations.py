import sqlite3

import pytest

from src.adapters.sqlite.migrator import MIGRATIONS_DIR, SQLiteMigrator


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "nested" / "test_db.sqlite")


def table_names(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


def test_migrator_creates_schema(temp_db_path):
    applied = SQLiteMigrator(temp_db_path).run_migrations()

    assert applied == ["001_initial.sql"]
    assert {"_migrations", "subscriptions", "subscription_tokens", "users"} <= table_names(
        temp_db_path
    )


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR)

    migrator.run_migrations()
    assert migrator.run_migrations() == []

    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute("SELECT count(*) FROM _migrations WHERE filename='001_initial.sql'")
    assert cursor.fetchone()[0] == 1
    conn.close()


def test_down_section_is_not_applied(temp_db_path):
    SQLiteMigrator(temp_db_path).run_migrations()

    # Tables dropped in the Down section must still exist
    assert "users" in table_names(temp_db_path)


def test_status_check_constraint(temp_db_path):
    SQLiteMigrator(temp_db_path).run_migrations()

    conn = sqlite3.connect(temp_db_path)
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO subscriptions (id, email, name, subscribed_at, status) "
            "VALUES ('1', 'a@gmail.com', 'a', '2024-01-01T00:00:00', 'unsubscribed')"
        )
    conn.close()


def test_failed_migration_is_rolled_back(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_ok.sql").write_text("CREATE TABLE ok (id INTEGER);")
    (migrations / "002_broken.sql").write_text(
        "CREATE TABLE half_done (id INTEGER);\nINSERT INTO missing_table VALUES (1);"
    )
    db_path = str(tmp_path / "test.db")

    with pytest.raises(RuntimeError, match="002_broken.sql"):
        SQLiteMigrator(db_path, migrations).run_migrations()

    tables = table_names(db_path)
    assert "ok" in tables
    assert "half_done" not in tables
