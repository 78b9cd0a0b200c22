"""Account store interface and its Postgres implementation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Protocol

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool, PoolTimeout

from .domain.account import Account, AccountState
from .domain.contracts import AccountUpdate, NewAccount
from .errors import DuplicateAccount, StoreUnavailable, UnknownAccount

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "account_id, email, password_hash, state, role, created_at, updated_at, "
    "nickname, phone, image, introduction"
)
_UPDATABLE_COLUMNS = frozenset(
    {"password_hash", "state", "nickname", "phone", "image", "introduction"}
)


def normalise_email(email: str) -> str:
    """Return the case-insensitive lookup key for an email address."""
    return email.strip().lower()


class AccountStore(Protocol):
    """Persistence operations the account workflows depend on.

    Implementations raise ``StoreUnavailable`` for backend failures and must
    enforce email uniqueness atomically in :meth:`create`.
    """

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_id(self, account_id: str) -> Account | None: ...

    def find_password_hash_by_id(self, account_id: str) -> str | None: ...

    def create(self, payload: NewAccount) -> Account: ...

    def update(self, account_id: str, changes: AccountUpdate) -> Account: ...


class PostgresAccountStore:
    """Postgres-backed account persistence.

    Email uniqueness is guaranteed by the ``accounts_email_key`` unique index
    on ``lower(email)`` (see ``migrations/001_accounts.sql``), so two racing
    registrations cannot both succeed.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def find_by_email(self, email: str) -> Account | None:
        row = self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE lower(email) = %s",
            (normalise_email(email),),
        )
        return self._map_record(row) if row else None

    def find_by_id(self, account_id: str) -> Account | None:
        row = self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s",
            (account_id,),
        )
        return self._map_record(row) if row else None

    def find_password_hash_by_id(self, account_id: str) -> str | None:
        row = self._fetch_one(
            "SELECT password_hash FROM accounts WHERE account_id = %s",
            (account_id,),
        )
        return row[0] if row else None

    def create(self, payload: NewAccount) -> Account:
        """Insert a new account, translating the unique-index conflict to ``DuplicateAccount``."""
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (
                            account_id, email, password_hash, state, role, created_at, updated_at,
                            nickname, phone, image, introduction
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            account_id,
                            payload.email.strip(),
                            payload.password_hash,
                            payload.state.value,
                            payload.role,
                            now,
                            now,
                            payload.nickname,
                            payload.phone,
                            payload.image,
                            payload.introduction,
                        ),
                    )
                    record = cur.fetchone()
                conn.commit()
        except pg_errors.UniqueViolation as exc:
            raise DuplicateAccount(payload.email) from exc
        except (psycopg.OperationalError, PoolTimeout) as exc:
            logger.error("account store insert failed: %s", exc)
            raise StoreUnavailable("account store unavailable") from exc
        return self._map_record(record)

    def update(self, account_id: str, changes: AccountUpdate) -> Account:
        """Apply the non-empty fields of ``changes`` and return the updated account."""
        values = changes.changes()
        if not values:
            account = self.find_by_id(account_id)
            if account is None:
                raise UnknownAccount(account_id)
            return account

        assignments: list[str] = []
        params: list[object] = []
        for column, value in values.items():
            if column not in _UPDATABLE_COLUMNS:
                raise ValueError(f"column {column!r} is not updatable")
            assignments.append(f"{column} = %s")
            params.append(value.value if isinstance(value, AccountState) else value)
        assignments.append("updated_at = %s")
        params.append(datetime.now(timezone.utc))
        params.append(account_id)

        query = f"""
            UPDATE accounts
            SET {", ".join(assignments)}
            WHERE account_id = %s
            RETURNING {_ACCOUNT_COLUMNS}
        """
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
                conn.commit()
        except (psycopg.OperationalError, PoolTimeout) as exc:
            logger.error("account store update failed: %s", exc)
            raise StoreUnavailable("account store unavailable") from exc
        if not row:
            raise UnknownAccount(account_id)
        return self._map_record(row)

    def _fetch_one(self, query: str, params: tuple) -> tuple | None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    return cur.fetchone()
        except (psycopg.OperationalError, PoolTimeout) as exc:
            logger.error("account store query failed: %s", exc)
            raise StoreUnavailable("account store unavailable") from exc

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            email=row[1],
            password_hash=row[2],
            state=AccountState(row[3]),
            role=row[4],
            created_at=row[5],
            updated_at=row[6],
            nickname=row[7],
            phone=row[8],
            image=row[9],
            introduction=row[10],
        )
