"""
SQLite Database Adapter.

Implements the subscriber store and publisher repository using SQLite.
Schema lives in migrations/ and is applied by SQLiteMigrator.

Each operation opens its own connection (autocommit mode); write
transactions are explicit and start with BEGIN IMMEDIATE so concurrent
registrations for the same email serialize on the database lock.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from src.components.publishers.models import Publisher
from src.components.subscriptions.models import (
    NewSubscriber,
    StorageError,
    SubscriberRecord,
    SubscriberStatus,
    SubscriptionToken,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def connect(db_path: str, timeout_seconds: float = 5.0) -> sqlite3.Connection:
    """Open a connection in autocommit mode with foreign keys enforced."""
    conn = sqlite3.connect(db_path, timeout=timeout_seconds, isolation_level=None)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout_seconds: float = 5.0):
        self.db_path = db_path
        self.timeout_seconds = timeout_seconds

    def _get_conn(self) -> sqlite3.Connection:
        try:
            return connect(self.db_path, self.timeout_seconds)
        except sqlite3.Error as e:
            raise StorageError("Failed to open a database connection") from e

    @contextmanager
    def _read(self, description: str) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Failed to {description}") from e
        finally:
            conn.close()


# -----------------------------------------------------------------------------
# Subscriber store
# -----------------------------------------------------------------------------


class SQLiteSubscriberTransaction:
    """Mutations bound to one open transaction. Implements SubscriberTransactionPort."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def _execute(self, description: str, sql: str, params: tuple[Any, ...]) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to {description}") from e

    def insert_or_update_subscriber(
        self,
        subscriber: NewSubscriber,
        new_id: UUID,
        subscribed_at: datetime,
    ) -> UUID | None:
        cursor = self._execute(
            "insert new subscriber in the database",
            """
            INSERT INTO subscriptions (id, email, name, subscribed_at, status)
            VALUES (?, ?, ?, ?, 'pending_confirmation')
            ON CONFLICT(email) DO UPDATE SET
                id = excluded.id
            WHERE subscriptions.status = 'pending_confirmation'
            RETURNING id
            """,
            (
                str(new_id),
                str(subscriber.email),
                str(subscriber.name),
                subscribed_at.isoformat(),
            ),
        )
        # Drain RETURNING rows so the statement completes
        rows = cursor.fetchall()
        return UUID(rows[0]["id"]) if rows else None

    def insert_token(self, subscriber_id: UUID, token: SubscriptionToken) -> None:
        self._execute(
            "store the confirmation token for a subscriber",
            "INSERT INTO subscription_tokens (subscription_token, subscriber_id) VALUES (?, ?)",
            (str(token), str(subscriber_id)),
        )

    def lookup_subscriber_id_by_token(self, token: SubscriptionToken) -> UUID | None:
        row = self._execute(
            "get the subscriber id bound to a token",
            "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
            (str(token),),
        ).fetchone()
        return UUID(row["subscriber_id"]) if row else None

    def mark_confirmed(self, subscriber_id: UUID) -> bool:
        cursor = self._execute(
            "update subscriber status",
            "UPDATE subscriptions SET status = 'confirmed' WHERE id = ?",
            (str(subscriber_id),),
        )
        return cursor.rowcount > 0

    def delete_tokens_for_subscriber(self, subscriber_id: UUID) -> int:
        cursor = self._execute(
            "delete subscriber tokens",
            "DELETE FROM subscription_tokens WHERE subscriber_id = ?",
            (str(subscriber_id),),
        )
        return cursor.rowcount


class SQLiteSubscriberStore(SQLiteRepoBase):
    """SQLite implementation of SubscriberStorePort."""

    @contextmanager
    def transaction(self) -> Iterator[SQLiteSubscriberTransaction]:
        conn = self._get_conn()
        try:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError("Failed to begin a database transaction") from e

            try:
                yield SQLiteSubscriberTransaction(conn)
            except BaseException:
                if conn.in_transaction:
                    logger.debug("Rolling back subscriber transaction")
                    conn.execute("ROLLBACK")
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise StorageError("Failed to commit the database transaction") from e
        finally:
            conn.close()

    def lookup_subscriber_id_by_token(self, token: SubscriptionToken) -> UUID | None:
        with self._read("get the subscriber id bound to a token") as conn:
            row = conn.execute(
                "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
                (str(token),),
            ).fetchone()
        return UUID(row["subscriber_id"]) if row else None

    def list_confirmed_subscriber_emails(self) -> list[str]:
        with self._read("get confirmed subscribers") as conn:
            rows = conn.execute(
                "SELECT email FROM subscriptions WHERE status = 'confirmed' ORDER BY subscribed_at"
            ).fetchall()
        return [r["email"] for r in rows]

    def get_by_email(self, email: str) -> SubscriberRecord | None:
        with self._read("get subscriber by email") as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE email = ?", (email,)
            ).fetchone()
        return self._map_row(row) if row else None

    def list_tokens_for_subscriber(self, subscriber_id: UUID) -> list[str]:
        with self._read("list subscriber tokens") as conn:
            rows = conn.execute(
                "SELECT subscription_token FROM subscription_tokens WHERE subscriber_id = ?",
                (str(subscriber_id),),
            ).fetchall()
        return [r["subscription_token"] for r in rows]

    def _map_row(self, row: dict[str, Any]) -> SubscriberRecord:
        return SubscriberRecord(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            status=SubscriberStatus(row["status"]),
            subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
        )


# -----------------------------------------------------------------------------
# Publisher repository
# -----------------------------------------------------------------------------


class SQLitePublisherRepo(SQLiteRepoBase):
    """SQLite implementation of PublisherRepoPort."""

    def get_by_username(self, username: str) -> Publisher | None:
        with self._read("get publisher by username") as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?", (username,)
            ).fetchone()
        if not row:
            return None
        return Publisher(
            user_id=UUID(row["user_id"]),
            username=row["username"],
            password_hash=row["password_hash"],
        )

    def save(self, publisher: Publisher) -> Publisher:
        with self._read("save publisher") as conn:
            conn.execute(
                """
                INSERT INTO users (user_id, username, password_hash)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    username = excluded.username,
                    password_hash = excluded.password_hash
                """,
                (str(publisher.user_id), publisher.username, publisher.password_hash),
            )
        return publisher
