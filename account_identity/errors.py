"""Error kinds raised by the account identity core.

These classes identify *what* went wrong. None of them carries user-facing
text: the HTTP boundary owns the mapping to status codes and messages.
"""


class ConfigurationError(RuntimeError):
    """Startup configuration is missing or invalid; the process must not start."""


class AccountError(RuntimeError):
    """Base class for failures surfaced by account workflows."""


class DuplicateAccount(AccountError):
    """Registration attempted with an email already on file."""


class UnknownAccount(AccountError):
    """Lookup by email or id found nothing."""


class AccountDisabled(AccountError):
    """Login attempted against an account that is not active."""


class InvalidCredentials(AccountError):
    """Password did not match the stored hash."""


class InvalidStateTransition(AccountError):
    """Requested account state change is not permitted."""


class HashingFailure(AccountError):
    """The password hash transform failed internally."""


class StoreUnavailable(AccountError):
    """The account store could not be reached or failed mid-operation."""
