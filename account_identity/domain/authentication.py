"""Login: exchange an email/password pair for a bearer token."""

from __future__ import annotations

import logging
import secrets

from .contracts import LoginInput
from .credentials import confirm_password
from .state import ensure_login_permitted
from ..errors import UnknownAccount
from ..repository import AccountStore
from ..security.passwords import CredentialHasher
from ..security.tokens import IssuedToken, TokenIssuer

logger = logging.getLogger(__name__)


class AuthenticationFlow:
    """Fetch the account, check its state, verify the password, issue a token.

    The checks run in that order and the order is part of the contract: a
    disabled account is rejected before its password is looked at, so the
    response reveals nothing about whether the password was right.
    """

    def __init__(
        self, store: AccountStore, hasher: CredentialHasher, issuer: TokenIssuer
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self._decoy_hash: str | None = None

    def login(self, payload: LoginInput) -> IssuedToken:
        """Return a token for the account identified by ``payload.email``.

        Raises
        ------
        UnknownAccount
            No account is registered under the email.
        AccountDisabled
            The account exists but is not active.
        InvalidCredentials
            The password does not match.
        """
        account = self._store.find_by_email(payload.email)
        if account is None:
            # same hash work as a real password check, so timing does not reveal the miss
            self._hasher.verify(payload.password, self._get_decoy_hash())
            raise UnknownAccount(payload.email)

        ensure_login_permitted(account.state)
        confirm_password(
            self._hasher, payload.password, account.password_hash, account_id=account.account_id
        )

        token = self._issuer.issue(account.account_id, account.role)
        logger.debug("issued token for account %s", account.account_id)
        return token

    def _get_decoy_hash(self) -> str:
        if self._decoy_hash is None:
            self._decoy_hash = self._hasher.hash(secrets.token_urlsafe(32))
        return self._decoy_hash
