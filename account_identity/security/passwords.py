"""Password hashing backed by Argon2id."""

from __future__ import annotations

from enum import Enum

import argon2
from argon2.exceptions import HashingError, InvalidHash, VerificationError, VerifyMismatchError

from ..errors import HashingFailure


def _is_encodable(plaintext: str) -> bool:
    try:
        plaintext.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class VerificationOutcome(str, Enum):
    match = "match"
    mismatch = "mismatch"
    malformed = "malformed"


class CredentialHasher:
    """Salted one-way password hashing with constant-time verification.

    The cost parameters default to argon2-cffi's RFC 9106 low-memory profile.
    Existing hashes keep verifying after the costs change because Argon2
    encodes its parameters in the hash string.
    """

    def __init__(
        self,
        *,
        time_cost: int = argon2.DEFAULT_TIME_COST,
        memory_cost: int = argon2.DEFAULT_MEMORY_COST,
        parallelism: int = argon2.DEFAULT_PARALLELISM,
    ) -> None:
        self._hasher = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Return the encoded Argon2id hash of ``plaintext``.

        Raises
        ------
        HashingFailure
            When the underlying transform fails or ``plaintext`` cannot be
            encoded as UTF-8.
        """
        try:
            return self._hasher.hash(plaintext)
        except (HashingError, UnicodeEncodeError) as exc:
            raise HashingFailure("password hash transform failed") from exc

    def outcome(self, plaintext: str, password_hash: str | None) -> VerificationOutcome:
        """Compare ``plaintext`` with ``password_hash`` without raising.

        A stored hash that cannot be parsed is reported as ``malformed`` so it
        can be told apart from a wrong password. Both mean "not authenticated".
        """
        if not isinstance(password_hash, str) or not password_hash:
            return VerificationOutcome.malformed
        if not _is_encodable(plaintext):
            return VerificationOutcome.mismatch
        try:
            self._hasher.verify(password_hash, plaintext)
        except VerifyMismatchError:
            return VerificationOutcome.mismatch
        except (InvalidHash, VerificationError, UnicodeEncodeError):
            return VerificationOutcome.malformed
        return VerificationOutcome.match

    def verify(self, plaintext: str, password_hash: str | None) -> bool:
        """Return ``True`` only when ``plaintext`` matches ``password_hash``."""
        return self.outcome(plaintext, password_hash) is VerificationOutcome.match
