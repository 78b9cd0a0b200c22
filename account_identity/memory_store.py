"""In-memory account store for tests and local development."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import datetime, timezone
from threading import Lock

from .domain.account import Account
from .domain.contracts import AccountUpdate, NewAccount
from .errors import DuplicateAccount, UnknownAccount
from .repository import normalise_email


class InMemoryAccountStore:
    """Thread-safe dictionary store.

    A single lock covers the uniqueness check and the insert, which is what
    the Postgres unique index gives the real store. Accounts are returned as
    copies so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._ids_by_email: dict[str, str] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._accounts)

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._ids_by_email.get(normalise_email(email))
            if account_id is None:
                return None
            return dataclasses.replace(self._accounts[account_id])

    def find_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return dataclasses.replace(account) if account else None

    def find_password_hash_by_id(self, account_id: str) -> str | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.password_hash if account else None

    def create(self, payload: NewAccount) -> Account:
        key = normalise_email(payload.email)
        now = datetime.now(timezone.utc)
        with self._lock:
            if key in self._ids_by_email:
                raise DuplicateAccount(payload.email)
            account = Account(
                account_id=str(uuid.uuid4()),
                email=payload.email.strip(),
                password_hash=payload.password_hash,
                state=payload.state,
                role=payload.role,
                created_at=now,
                updated_at=now,
                nickname=payload.nickname,
                phone=payload.phone,
                image=payload.image,
                introduction=payload.introduction,
            )
            self._accounts[account.account_id] = account
            self._ids_by_email[key] = account.account_id
            return dataclasses.replace(account)

    def update(self, account_id: str, changes: AccountUpdate) -> Account:
        values = changes.changes()
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise UnknownAccount(account_id)
            if values:
                account = dataclasses.replace(
                    account, **values, updated_at=datetime.now(timezone.utc)
                )
                self._accounts[account_id] = account
            return dataclasses.replace(account)
