"""Account registration and disablement."""

from __future__ import annotations

import logging

from .account import Account, AccountState
from .contracts import AccountUpdate, NewAccount, RegisterAccountInput
from .state import transition
from ..errors import DuplicateAccount, UnknownAccount
from ..repository import AccountStore
from ..security.passwords import CredentialHasher

logger = logging.getLogger(__name__)


class AccountLifecycleFlow:
    """Create accounts and move them to their terminal ``disabled`` state."""

    def __init__(self, store: AccountStore, hasher: CredentialHasher) -> None:
        self._store = store
        self._hasher = hasher

    def register(self, payload: RegisterAccountInput) -> Account:
        """Hash the password and create an active account.

        The early lookup avoids paying for a hash on an obvious duplicate; the
        store's own uniqueness guarantee still decides concurrent races.
        """
        if self._store.find_by_email(payload.email) is not None:
            raise DuplicateAccount(payload.email)

        password_hash = self._hasher.hash(payload.password)
        account = self._store.create(
            NewAccount(
                email=payload.email,
                password_hash=password_hash,
                state=AccountState.active,
                nickname=payload.nickname,
                phone=payload.phone,
                image=payload.image,
                introduction=payload.introduction,
            )
        )
        logger.info("registered account %s", account.account_id)
        return account

    def disable(self, account_id: str) -> Account:
        """Disable the account; a second call is a silent no-op."""
        account = self._store.find_by_id(account_id)
        if account is None:
            raise UnknownAccount(account_id)

        target = transition(account.state, AccountState.disabled)
        if account.state is target:
            logger.debug("account %s already disabled", account_id)
            return account

        updated = self._store.update(account_id, AccountUpdate(state=target))
        logger.info("disabled account %s", account_id)
        return updated
