from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AccountState(str, Enum):
    active = "active"
    disabled = "disabled"


@dataclass(slots=True)
class Account:
    """Aggregate root for a user identity and its credential."""

    account_id: str
    email: str
    password_hash: str = field(repr=False)
    state: AccountState
    created_at: datetime
    updated_at: datetime
    role: str = "user"
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None
