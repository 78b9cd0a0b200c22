"""Domain-level request contracts shared by multiple layers.

Plaintext passwords are excluded from ``repr`` so an input struct can be
logged or shown in a traceback without leaking credential material.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .account import AccountState


@dataclass(slots=True)
class RegisterAccountInput:
    """Validated inputs required to register an account."""

    email: str
    password: str = field(repr=False)
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None


@dataclass(slots=True)
class LoginInput:
    """Email/password pair presented at login."""

    email: str
    password: str = field(repr=False)


@dataclass(slots=True)
class ReauthorizeInput:
    """Password re-confirmation for an already identified account."""

    account_id: str
    password: str = field(repr=False)


@dataclass(slots=True)
class ChangePasswordInput:
    account_id: str
    current_password: str = field(repr=False)
    new_password: str = field(repr=False)


@dataclass(slots=True)
class NewAccount:
    """Fields handed to the account store when creating a record."""

    email: str
    password_hash: str = field(repr=False)
    state: AccountState = AccountState.active
    role: str = "user"
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None


@dataclass(slots=True)
class AccountUpdate:
    """Partial update applied by the account store; ``None`` means unchanged."""

    password_hash: str | None = field(default=None, repr=False)
    state: AccountState | None = None
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields that carry a new value."""
        values = {
            "password_hash": self.password_hash,
            "state": self.state,
            "nickname": self.nickname,
            "phone": self.phone,
            "image": self.image,
            "introduction": self.introduction,
        }
        return {name: value for name, value in values.items() if value is not None}
