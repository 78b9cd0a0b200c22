"""Account state machine.

``active -> disabled`` is the only transition. Disabling a disabled account
is a no-op and nothing leads back out of ``disabled``.
"""

from __future__ import annotations

from .account import AccountState
from ..errors import AccountDisabled, InvalidStateTransition

_ALLOWED_TRANSITIONS: dict[AccountState, frozenset[AccountState]] = {
    AccountState.active: frozenset({AccountState.active, AccountState.disabled}),
    AccountState.disabled: frozenset({AccountState.disabled}),
}


def can_transition(current: AccountState, target: AccountState) -> bool:
    return target in _ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(current: AccountState, target: AccountState) -> AccountState:
    """Return ``target`` when the move from ``current`` is permitted.

    Raises
    ------
    InvalidStateTransition
        When the state machine has no edge from ``current`` to ``target``.
    """
    if not can_transition(current, target):
        raise InvalidStateTransition(f"{current.value} -> {target.value}")
    return target


def can_login(state: AccountState) -> bool:
    return state is AccountState.active


def ensure_login_permitted(state: AccountState) -> None:
    """Raise ``AccountDisabled`` unless ``state`` allows login."""
    if not can_login(state):
        raise AccountDisabled(state.value)
