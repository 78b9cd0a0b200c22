"""Issuance of signed bearer tokens for authenticated accounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import time
from typing import Any

import jwt

from ..errors import ConfigurationError

ALGORITHM = "HS256"


@dataclass(slots=True, frozen=True)
class IssuedToken:
    """Bearer token handed to the caller; the service keeps no reference to it."""

    access_token: str
    expires_in: int
    expires_at: datetime
    token_type: str = "bearer"


class TokenIssuer:
    """Mint HS256 JWTs carrying an account's identity claims.

    Parameters
    ----------
    secret:
        Process-wide signing key. Validated here, once, so a missing key stops
        the process at startup rather than failing the first login.
    issuer:
        Value of the ``iss`` claim.
    ttl_seconds:
        Default lifetime applied when :meth:`issue` is called without ``ttl``.
    """

    def __init__(self, *, secret: str, issuer: str, ttl_seconds: int) -> None:
        if not secret:
            raise ConfigurationError("token signing key is empty")
        if ttl_seconds <= 0:
            raise ConfigurationError("token ttl must be positive")
        self._secret = secret
        self._issuer = issuer
        self._ttl_seconds = ttl_seconds

    def issue(self, account_id: str, role: str, ttl: int | None = None) -> IssuedToken:
        """Create a signed JWT for ``account_id`` expiring ``ttl`` seconds from now.

        Parameters
        ----------
        account_id:
            Account identifier embedded in the ``sub`` claim.
        role:
            Role held by the account at issuance time.
        ttl:
            Optional lifetime override in seconds.

        Returns
        -------
        IssuedToken
            The encoded token with its lifetime and absolute expiry.
        """
        expires_in = self._ttl_seconds if ttl is None else ttl
        if expires_in <= 0:
            raise ValueError("ttl must be positive")
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account_id,
            "role": role,
            "iat": now,
            "exp": now + expires_in,
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return IssuedToken(
            access_token=token,
            expires_in=expires_in,
            expires_at=datetime.fromtimestamp(now + expires_in, tz=timezone.utc),
        )
