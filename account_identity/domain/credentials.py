from __future__ import annotations

import logging

from ..errors import InvalidCredentials
from ..security.passwords import CredentialHasher, VerificationOutcome

logger = logging.getLogger(__name__)


def confirm_password(
    hasher: CredentialHasher, plaintext: str, password_hash: str | None, *, account_id: str
) -> None:
    """Raise ``InvalidCredentials`` unless ``plaintext`` matches the stored hash."""
    outcome = hasher.outcome(plaintext, password_hash)
    if outcome is VerificationOutcome.match:
        return
    if outcome is VerificationOutcome.malformed:
        logger.warning("stored password hash for account %s is malformed", account_id)
    raise InvalidCredentials(account_id)
