"""Password re-confirmation for an already identified account."""

from __future__ import annotations

from .contracts import ReauthorizeInput
from .credentials import confirm_password
from ..errors import UnknownAccount
from ..repository import AccountStore
from ..security.passwords import CredentialHasher


class ReauthorizationFlow:
    """Confirm the caller still knows the account password.

    Success issues no token and writes nothing. It only gates the sensitive
    mutation the caller performs next.
    """

    def __init__(self, store: AccountStore, hasher: CredentialHasher) -> None:
        self._store = store
        self._hasher = hasher

    def reauthorize(self, payload: ReauthorizeInput) -> None:
        password_hash = self._store.find_password_hash_by_id(payload.account_id)
        if password_hash is None:
            raise UnknownAccount(payload.account_id)
        confirm_password(
            self._hasher, payload.password, password_hash, account_id=payload.account_id
        )
