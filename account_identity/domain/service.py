"""Account service composing login, reauthorization and lifecycle workflows."""

from __future__ import annotations

import logging

from .account import Account
from .authentication import AuthenticationFlow
from .contracts import (
    AccountUpdate,
    ChangePasswordInput,
    LoginInput,
    ReauthorizeInput,
    RegisterAccountInput,
)
from .lifecycle import AccountLifecycleFlow
from .reauthorization import ReauthorizationFlow
from ..errors import AccountError, UnknownAccount
from ..repository import AccountStore
from ..security.passwords import CredentialHasher
from ..security.tokens import IssuedToken, TokenIssuer

logger = logging.getLogger(__name__)


class AccountService:
    """Entry point held by the HTTP layer; collaborators are injected."""

    def __init__(
        self, store: AccountStore, hasher: CredentialHasher, issuer: TokenIssuer
    ) -> None:
        """Build the workflows over the shared store, hasher and token issuer."""
        self._store = store
        self._hasher = hasher
        self.authentication = AuthenticationFlow(store, hasher, issuer)
        self.reauthorization = ReauthorizationFlow(store, hasher)
        self.lifecycle = AccountLifecycleFlow(store, hasher)

    def register(self, payload: RegisterAccountInput) -> Account:
        """Create an active account for a previously unseen email."""
        try:
            return self.lifecycle.register(payload)
        except AccountError as exc:
            logger.info("registration for %s rejected: %s", payload.email, type(exc).__name__)
            raise

    def login(self, payload: LoginInput) -> IssuedToken:
        """Authenticate by email and password and return a bearer token."""
        try:
            token = self.authentication.login(payload)
        except AccountError as exc:
            logger.info("login for %s rejected: %s", payload.email, type(exc).__name__)
            raise
        logger.info("login succeeded for %s", payload.email)
        return token

    def reauthorize(self, payload: ReauthorizeInput) -> None:
        """Confirm the current password of an already identified account."""
        try:
            self.reauthorization.reauthorize(payload)
        except AccountError as exc:
            logger.warning(
                "reauthorization for account %s rejected: %s",
                payload.account_id,
                type(exc).__name__,
            )
            raise

    def get_account(self, account_id: str) -> Account:
        account = self._store.find_by_id(account_id)
        if account is None:
            raise UnknownAccount(account_id)
        return account

    def change_password(self, payload: ChangePasswordInput) -> None:
        """Replace the password after confirming the current one in the same call."""
        self.reauthorize(ReauthorizeInput(payload.account_id, payload.current_password))
        password_hash = self._hasher.hash(payload.new_password)
        self._store.update(payload.account_id, AccountUpdate(password_hash=password_hash))
        logger.info("password changed for account %s", payload.account_id)

    def disable_account(self, account_id: str, password: str) -> Account:
        """Disable an account once its owner has re-entered the password."""
        self.reauthorize(ReauthorizeInput(account_id, password))
        return self.lifecycle.disable(account_id)
