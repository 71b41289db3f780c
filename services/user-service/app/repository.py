"""Database repository for registered user accounts.

Expects a ``users`` table along these lines (migrations live outside this
service)::

    CREATE TABLE users (
        id            TEXT PRIMARY KEY,
        email         TEXT NOT NULL CONSTRAINT users_email_key UNIQUE,
        username      TEXT NOT NULL CONSTRAINT users_username_key UNIQUE,
        first_name    TEXT NOT NULL,
        last_name     TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        created_at    TIMESTAMPTZ NOT NULL,
        updated_at    TIMESTAMPTZ NOT NULL,
        is_active     BOOLEAN NOT NULL,
        is_deleted    BOOLEAN NOT NULL,
        deleted_at    TIMESTAMPTZ
    );
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg
from psycopg.errors import UniqueViolation
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool, PoolTimeout

from .domain.account import Account
from .domain.errors import ConflictError, NotFoundError, StoreError
from .domain.values import Email, PersonName, Username

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, email, username, first_name, last_name, password_hash, "
    "created_at, updated_at, is_active, is_deleted, deleted_at"
)


class PostgresAccountStore:
    """Postgres-backed account persistence.

    Uniqueness is enforced by the table's unique constraints; a colliding
    insert is rejected with ``ConflictError`` rather than overwriting.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def is_email_unique(self, email: Email) -> bool:
        return not self._exists("email", email.value)

    def is_username_unique(self, username: Username) -> bool:
        return not self._exists("username", username.value)

    def add(self, account: Account) -> Account:
        """Insert ``account`` and return the row as persisted."""
        with self._translate_errors():
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    try:
                        cur.execute(
                            f"""
                            INSERT INTO users ({_COLUMNS})
                            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                            RETURNING {_COLUMNS}
                            """,
                            self._to_params(account),
                        )
                    except UniqueViolation as exc:
                        conn.rollback()
                        raise self._conflict_from(exc) from exc
                    record = cur.fetchone()
                conn.commit()
        return self._map_record(record)

    def get_by_id(self, account_id: str) -> Account | None:
        return self._fetch_one("id", account_id)

    def get_by_email(self, email: Email) -> Account | None:
        return self._fetch_one("email", email.value)

    def get_by_username(self, username: Username) -> Account | None:
        return self._fetch_one("username", username.value)

    def update(self, account: Account) -> Account:
        """Persist the mutable fields of an existing account."""
        with self._translate_errors():
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        UPDATE users
                        SET first_name = %s, last_name = %s, password_hash = %s,
                            updated_at = %s, is_active = %s, is_deleted = %s, deleted_at = %s
                        WHERE id = %s
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account.first_name.value,
                            account.last_name.value,
                            account.password_hash,
                            account.updated_at,
                            account.is_active,
                            account.is_deleted,
                            account.deleted_at,
                            account.account_id,
                        ),
                    )
                    record = cur.fetchone()
                conn.commit()
        if record is None:
            raise NotFoundError("account not found")
        return self._map_record(record)

    def list_active(self) -> list[Account]:
        with self._translate_errors():
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM users
                        WHERE is_active AND NOT is_deleted
                        ORDER BY created_at
                        """
                    )
                    rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def _exists(self, column: str, value: str) -> bool:
        with self._translate_errors():
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(f"SELECT 1 FROM users WHERE {column} = %s", (value,))
                    return cur.fetchone() is not None

    def _fetch_one(self, column: str, value: str) -> Account | None:
        with self._translate_errors():
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {column} = %s", (value,))
                    row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        """Surface connectivity failures as ``StoreError``."""
        try:
            yield
        except (PoolTimeout, psycopg.OperationalError) as exc:
            logger.warning("account store unavailable: %s", exc)
            raise StoreError("account store unavailable") from exc

    def _conflict_from(self, exc: UniqueViolation) -> ConflictError:
        constraint = exc.diag.constraint_name or str(exc)
        if "username" in constraint:
            return ConflictError("username already taken")
        if "email" in constraint:
            return ConflictError("email already registered")
        return ConflictError("account already stored")

    def _to_params(self, account: Account) -> tuple:
        return (
            account.account_id,
            account.email.value,
            account.username.value,
            account.first_name.value,
            account.last_name.value,
            account.password_hash,
            account.created_at,
            account.updated_at,
            account.is_active,
            account.is_deleted,
            account.deleted_at,
        )

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account``.

        Rows are re-validated through the value objects; a row written under
        older rules raises ``ValidationError`` or ``DomainError`` here.
        """
        return Account.rehydrate(
            account_id=str(row[0]),
            email=Email(row[1]),
            username=Username(row[2]),
            first_name=PersonName(row[3]),
            last_name=PersonName(row[4]),
            password_hash=row[5],
            created_at=row[6],
            updated_at=row[7],
            is_active=row[8],
            is_deleted=row[9],
            deleted_at=row[10],
        )
